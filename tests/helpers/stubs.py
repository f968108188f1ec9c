from __future__ import annotations

import copy
from typing import Any, Mapping

from frontapp_mcp.core.config import Settings
from frontapp_mcp.core.context import RequestContext


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "environment": "test",
        "frontapp": {"api_key": "test-key"},
        "observability": {"metrics_log_interval_seconds": 0},
    }
    values.update(overrides)
    return Settings(**values)


def make_context(**bindings: Any) -> RequestContext:
    return RequestContext.new(transport="test", **bindings)


class StubFrontappClient:
    """In-memory stand-in for FrontappClient that records every call."""

    def __init__(
        self,
        responses: Mapping[str, Any] | None = None,
        *,
        failures: Mapping[str, BaseException] | None = None,
    ) -> None:
        self.responses: dict[str, Any] = dict(responses or {})
        self.failures: dict[str, BaseException] = dict(failures or {})
        self.calls: list[tuple[str, tuple[Any, ...], dict[str, Any]]] = []

    def called(self, method: str) -> list[tuple[tuple[Any, ...], dict[str, Any]]]:
        return [(args, kwargs) for name, args, kwargs in self.calls if name == method]

    async def _record(self, method: str, *args: Any, **kwargs: Any) -> Any:
        self.calls.append((method, args, kwargs))
        failure = self.failures.get(method)
        if failure is not None:
            raise failure
        return copy.deepcopy(self.responses.get(method, {}))

    async def get_conversations(self, params: Mapping[str, Any] | None = None) -> Any:
        return await self._record("get_conversations", params)

    async def get_conversation(self, conversation_id: str) -> Any:
        return await self._record("get_conversation", conversation_id)

    async def get_conversation_messages(self, conversation_id: str) -> Any:
        return await self._record("get_conversation_messages", conversation_id)

    async def send_message(self, conversation_id: str, data: Mapping[str, Any]) -> Any:
        return await self._record("send_message", conversation_id, dict(data))

    async def add_comment(self, conversation_id: str, *, body: str, author_id: str) -> Any:
        return await self._record("add_comment", conversation_id, body=body, author_id=author_id)

    async def archive_conversation(self, conversation_id: str) -> Any:
        return await self._record("archive_conversation", conversation_id)

    async def assign_conversation(self, conversation_id: str, assignee_id: str) -> Any:
        return await self._record("assign_conversation", conversation_id, assignee_id)

    async def get_contact(self, contact_id: str) -> Any:
        return await self._record("get_contact", contact_id)

    async def create_contact(self, data: Mapping[str, Any]) -> Any:
        return await self._record("create_contact", dict(data))

    async def update_contact(self, contact_id: str, data: Mapping[str, Any]) -> Any:
        return await self._record("update_contact", contact_id, dict(data))

    async def get_teammates(self, params: Mapping[str, Any] | None = None) -> Any:
        return await self._record("get_teammates", params)

    async def get_teammate(self, teammate_id: str) -> Any:
        return await self._record("get_teammate", teammate_id)

    async def get_accounts(self, params: Mapping[str, Any] | None = None) -> Any:
        return await self._record("get_accounts", params)

    async def get_account(self, account_id: str) -> Any:
        return await self._record("get_account", account_id)

    async def create_account(self, data: Mapping[str, Any]) -> Any:
        return await self._record("create_account", dict(data))

    async def update_account(self, account_id: str, data: Mapping[str, Any]) -> Any:
        return await self._record("update_account", account_id, dict(data))

    async def get_tags(self, params: Mapping[str, Any] | None = None) -> Any:
        return await self._record("get_tags", params)

    async def apply_tag(self, conversation_id: str, tag_id: str) -> Any:
        return await self._record("apply_tag", conversation_id, tag_id)

    async def remove_tag(self, conversation_id: str, tag_id: str) -> Any:
        return await self._record("remove_tag", conversation_id, tag_id)

    async def get_inboxes(self, params: Mapping[str, Any] | None = None) -> Any:
        return await self._record("get_inboxes", params)

    async def get_inbox(self, inbox_id: str) -> Any:
        return await self._record("get_inbox", inbox_id)

    async def aclose(self) -> None:
        return None
