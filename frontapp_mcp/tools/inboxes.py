from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from .base import object_schema
from .envelope import ToolResponse
from .formatting import pagination, related_link, results
from .validation import PAGE_SCHEMA, PageArgs, require_string, validate_page_args

if TYPE_CHECKING:
    from frontapp_mcp.clients.frontapp import FrontappAPI
    from frontapp_mcp.core.context import RequestContext


def _inbox(inbox: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": inbox.get("id"),
        "name": inbox.get("name"),
        "is_private": inbox.get("is_private"),
        "is_public": inbox.get("is_public"),
        "custom_fields": inbox.get("custom_fields"),
    }


class GetInboxesHandler:
    name = "get_inboxes"
    description = "Get a list of inboxes from Frontapp"
    failure_message = "Failed to get inboxes"
    input_schema = object_schema(PAGE_SCHEMA)

    def validate_args(self, raw: Mapping[str, Any]) -> PageArgs:
        return validate_page_args(raw)

    async def execute(self, args: PageArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        page = await client.get_inboxes(args.params())
        inboxes = [_inbox(inbox) for inbox in results(page)]
        return ToolResponse.success({"inboxes": inboxes, "pagination": pagination(page)})


@dataclass(slots=True, frozen=True)
class GetInboxArgs:
    inbox_id: str


class GetInboxHandler:
    name = "get_inbox"
    description = "Get an inbox from Frontapp"
    failure_message = "Failed to get inbox"
    input_schema = object_schema(
        {"inbox_id": {"type": "string", "description": "ID of the inbox"}},
        required=("inbox_id",),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> GetInboxArgs:
        return GetInboxArgs(inbox_id=require_string(raw, "inbox_id"))

    async def execute(self, args: GetInboxArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        inbox = await client.get_inbox(args.inbox_id)
        payload = _inbox(inbox)
        payload["teammates_url"] = related_link(inbox, "teammates")
        payload["conversations_url"] = related_link(inbox, "conversations")
        return ToolResponse.success(payload)


INBOX_HANDLERS = (GetInboxesHandler(), GetInboxHandler())

__all__ = ["GetInboxHandler", "GetInboxesHandler", "INBOX_HANDLERS"]
