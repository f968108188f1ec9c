from __future__ import annotations

import json

import httpx
import pytest

from frontapp_mcp.clients.frontapp import FrontappAPIError, FrontappClient
from frontapp_mcp.core.config import FrontappSettings


def _settings(**overrides) -> FrontappSettings:
    values = {"api_key": "test-key", "retry_backoff_seconds": 0, "max_retries": 2}
    values.update(overrides)
    return FrontappSettings(**values)


class Recorder:
    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome.status_code, headers=outcome.headers, content=outcome.content)


@pytest.mark.asyncio
async def test_requests_carry_bearer_token_and_decode_json() -> None:
    recorder = Recorder(httpx.Response(200, json={"id": "cnv_1"}))
    client = FrontappClient(_settings(), transport=httpx.MockTransport(recorder))
    try:
        payload = await client.get_conversation("cnv_1")
    finally:
        await client.aclose()

    assert payload == {"id": "cnv_1"}
    request = recorder.requests[0]
    assert request.headers["Authorization"] == "Bearer test-key"
    assert request.url.path == "/conversations/cnv_1"


@pytest.mark.asyncio
async def test_write_operations_send_expected_bodies() -> None:
    recorder = Recorder(httpx.Response(204))
    client = FrontappClient(_settings(), transport=httpx.MockTransport(recorder))
    try:
        assert await client.assign_conversation("cnv_1", "tea_1") == {}
        await client.add_comment("cnv_1", body="hi", author_id="tea_1")
        await client.remove_tag("cnv_1", "tag_1")
    finally:
        await client.aclose()

    assign, comment, untag = recorder.requests
    assert (assign.method, assign.url.path) == ("PATCH", "/conversations/cnv_1")
    assert json.loads(assign.content) == {"assignee_id": "tea_1"}
    assert (comment.method, comment.url.path) == ("POST", "/conversations/cnv_1/comments")
    assert json.loads(comment.content) == {"author_id": "tea_1", "body": "hi"}
    assert (untag.method, untag.url.path) == ("DELETE", "/conversations/cnv_1/tags")
    assert json.loads(untag.content) == {"tag_ids": ["tag_1"]}


@pytest.mark.asyncio
async def test_server_errors_are_retried() -> None:
    recorder = Recorder(httpx.Response(503, json={"_error": {"message": "busy"}}), httpx.Response(200, json={"ok": True}))
    client = FrontappClient(_settings(), transport=httpx.MockTransport(recorder))
    try:
        payload = await client.get_contact("crd_1")
    finally:
        await client.aclose()

    assert payload == {"ok": True}
    assert len(recorder.requests) == 2


@pytest.mark.asyncio
async def test_rate_limit_honours_retry_after() -> None:
    delays: list[float] = []

    async def sleep(delay: float) -> None:
        delays.append(delay)

    recorder = Recorder(httpx.Response(429, headers={"Retry-After": "2"}), httpx.Response(200, json={"id": "x"}))
    client = FrontappClient(_settings(), transport=httpx.MockTransport(recorder), sleep=sleep)
    try:
        payload = await client.get_account("acc_1")
    finally:
        await client.aclose()

    assert payload == {"id": "x"}
    assert delays == [2.0]


@pytest.mark.asyncio
async def test_client_errors_are_not_retried() -> None:
    recorder = Recorder(httpx.Response(404, json={"_error": {"status": 404, "message": "Conversation not found"}}))
    client = FrontappClient(_settings(), transport=httpx.MockTransport(recorder))
    try:
        with pytest.raises(FrontappAPIError) as exc_info:
            await client.get_conversation("cnv_missing")
    finally:
        await client.aclose()

    assert exc_info.value.status_code == 404
    assert str(exc_info.value) == "Frontapp API returned 404: Conversation not found"
    assert len(recorder.requests) == 1


@pytest.mark.asyncio
async def test_network_errors_exhaust_retries() -> None:
    recorder = Recorder(httpx.ConnectError("connection refused"))
    client = FrontappClient(_settings(max_retries=2), transport=httpx.MockTransport(recorder))
    try:
        with pytest.raises(FrontappAPIError, match="Network error calling Frontapp"):
            await client.get_inbox("inb_1")
    finally:
        await client.aclose()

    assert len(recorder.requests) == 3


@pytest.mark.asyncio
async def test_reference_reads_are_cached_without_params() -> None:
    recorder = Recorder(httpx.Response(200, json={"_results": []}))
    client = FrontappClient(_settings(), transport=httpx.MockTransport(recorder))
    try:
        await client.get_tags()
        await client.get_tags()
        await client.get_tags({"limit": 5})
    finally:
        await client.aclose()

    assert len(recorder.requests) == 2
    assert recorder.requests[1].url.params["limit"] == "5"


@pytest.mark.asyncio
async def test_cache_disabled_with_zero_ttl() -> None:
    recorder = Recorder(httpx.Response(200, json={"_results": []}))
    client = FrontappClient(_settings(cache_ttl_seconds=0), transport=httpx.MockTransport(recorder))
    try:
        await client.get_inboxes()
        await client.get_inboxes()
    finally:
        await client.aclose()

    assert len(recorder.requests) == 2


@pytest.mark.asyncio
async def test_cache_evicts_oldest_entry_when_full() -> None:
    recorder = Recorder(httpx.Response(200, json={"id": "tea"}))
    client = FrontappClient(_settings(cache_max_entries=2), transport=httpx.MockTransport(recorder))
    try:
        for teammate_id in ("tea_1", "tea_2", "tea_3"):
            await client.get_teammate(teammate_id)
        cached_entries = len(client._cache)
        await client.get_teammate("tea_3")
        await client.get_teammate("tea_1")
    finally:
        await client.aclose()

    assert cached_entries == 2
    paths = [request.url.path for request in recorder.requests]
    assert paths == ["/teammates/tea_1", "/teammates/tea_2", "/teammates/tea_3", "/teammates/tea_1"]


@pytest.mark.asyncio
async def test_cache_size_stays_bounded_under_many_ids() -> None:
    recorder = Recorder(httpx.Response(200, json={"id": "inb"}))
    client = FrontappClient(_settings(cache_max_entries=10), transport=httpx.MockTransport(recorder))
    try:
        for index in range(50):
            await client.get_inbox(f"inb_{index}")
    finally:
        await client.aclose()

    assert len(client._cache) == 10


@pytest.mark.asyncio
async def test_account_writes_invalidate_cached_reads() -> None:
    account = {"id": "acc_1", "name": "Old"}

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "PATCH":
            account.update(json.loads(request.content))
            return httpx.Response(200, json=account)
        if request.method == "POST":
            return httpx.Response(201, json={"id": "acc_2", "name": "Other"})
        if request.url.path == "/accounts":
            return httpx.Response(200, json={"_results": [account]})
        return httpx.Response(200, json=account)

    client = FrontappClient(_settings(), transport=httpx.MockTransport(handler))
    try:
        assert (await client.get_account("acc_1"))["name"] == "Old"
        await client.get_accounts()
        await client.update_account("acc_1", {"name": "New"})
        refreshed = await client.get_account("acc_1")
        listed = await client.get_accounts()
        await client.create_account({"name": "Other", "domains": ["other.com"]})
        account["name"] = "Newest"
        relisted = await client.get_accounts()
    finally:
        await client.aclose()

    assert refreshed["name"] == "New"
    assert listed["_results"][0]["name"] == "New"
    assert relisted["_results"][0]["name"] == "Newest"
