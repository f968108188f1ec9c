from __future__ import annotations

import pytest

from frontapp_mcp.tools.base import handle_with
from frontapp_mcp.tools.inboxes import GetInboxHandler, GetInboxesHandler
from frontapp_mcp.tools.tags import ApplyTagHandler, GetTagsHandler, RemoveTagHandler
from frontapp_mcp.tools.teammates import GetTeammateHandler, GetTeammatesHandler
from tests.helpers.stubs import StubFrontappClient, make_context

TEAMMATE = {
    "id": "tea_1",
    "email": "alice@example.com",
    "username": "alice",
    "first_name": "Alice",
    "last_name": "Smith",
    "is_admin": True,
    "is_available": True,
    "is_blocked": False,
    "custom_fields": {},
    "_links": {"related": {"inboxes": "https://api/tea_1/inboxes", "conversations": "https://api/tea_1/cnv"}},
}


@pytest.mark.asyncio
async def test_get_teammates_passes_pagination() -> None:
    client = StubFrontappClient({"get_teammates": {"_results": [TEAMMATE], "_pagination": {"next": "t2"}}})

    response = await handle_with(
        GetTeammatesHandler(), {"limit": 25, "page_token": "t1"}, client=client, ctx=make_context()
    )

    assert response.data["teammates"][0]["username"] == "alice"
    assert "_links" not in response.data["teammates"][0]
    assert response.data["pagination"] == {"next_page_token": "t2"}
    assert client.called("get_teammates") == [(({"limit": 25, "page_token": "t1"},), {})]


@pytest.mark.asyncio
async def test_get_teammate_exposes_related_links() -> None:
    client = StubFrontappClient({"get_teammate": TEAMMATE})

    response = await handle_with(GetTeammateHandler(), {"teammate_id": "tea_1"}, client=client, ctx=make_context())

    assert response.data["inboxes"] == "https://api/tea_1/inboxes"
    assert response.data["conversations"] == "https://api/tea_1/cnv"


@pytest.mark.asyncio
async def test_get_tags_formats_timestamps() -> None:
    client = StubFrontappClient(
        {
            "get_tags": {
                "_results": [
                    {
                        "id": "tag_1",
                        "name": "vip",
                        "highlight": "red",
                        "is_private": False,
                        "created_at": 1700000000,
                        "updated_at": 1700000000,
                    }
                ]
            }
        }
    )

    response = await handle_with(GetTagsHandler(), {}, client=client, ctx=make_context())

    assert response.data["tags"] == [
        {
            "id": "tag_1",
            "name": "vip",
            "highlight": "red",
            "is_private": False,
            "created_at": "2023-11-14T22:13:20.000Z",
            "updated_at": "2023-11-14T22:13:20.000Z",
        }
    ]
    assert client.called("get_tags") == [(({},), {})]


@pytest.mark.asyncio
async def test_apply_and_remove_tag_messages() -> None:
    client = StubFrontappClient()
    args = {"conversation_id": "cnv_1", "tag_id": "tag_1"}

    applied = await handle_with(ApplyTagHandler(), args, client=client, ctx=make_context())
    removed = await handle_with(RemoveTagHandler(), args, client=client, ctx=make_context())

    assert applied.data == {"message": "Tag tag_1 applied to conversation cnv_1 successfully"}
    assert removed.data == {"message": "Tag tag_1 removed from conversation cnv_1 successfully"}
    assert [name for name, _, _ in client.calls] == ["apply_tag", "remove_tag"]


@pytest.mark.asyncio
async def test_inbox_tools() -> None:
    inbox = {
        "id": "inb_1",
        "name": "Support",
        "is_private": False,
        "is_public": True,
        "_links": {"related": {"teammates": "https://api/inb_1/teammates", "conversations": "https://api/inb_1/cnv"}},
    }
    client = StubFrontappClient({"get_inboxes": {"_results": [inbox]}, "get_inbox": inbox})

    listing = await handle_with(GetInboxesHandler(), {"limit": 5}, client=client, ctx=make_context())
    single = await handle_with(GetInboxHandler(), {"inbox_id": "inb_1"}, client=client, ctx=make_context())

    assert listing.data["inboxes"][0]["name"] == "Support"
    assert listing.data["pagination"] == {"next_page_token": None}
    assert single.data["teammates_url"] == "https://api/inb_1/teammates"
    assert client.called("get_inboxes") == [(({"limit": 5},), {})]
