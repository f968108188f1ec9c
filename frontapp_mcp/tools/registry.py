from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator

from .base import ToolDescriptor, ToolHandler, describe, handle_with
from .envelope import ErrorCode, ToolResponse
from .exceptions import ToolNotFoundError

if TYPE_CHECKING:
    from frontapp_mcp.clients.frontapp import FrontappAPI
    from frontapp_mcp.core.context import RequestContext


def normalize_tool_name(name: str) -> str:
    if not isinstance(name, str):
        raise TypeError("Tool name must be a string")
    return name.strip().lower()


class ToolRegistry:
    """Name to handler map; handlers are stateless singletons shared by every call."""

    def __init__(self, handlers: Iterable[ToolHandler] | None = None) -> None:
        self._registry: Dict[str, ToolHandler] = {}
        for handler in handlers or ():
            self.register(handler)

    def register(self, handler: ToolHandler) -> None:
        key = normalize_tool_name(handler.name)
        if key in self._registry:
            raise ValueError(f"Tool already registered: {handler.name}")
        self._registry[key] = handler

    def get(self, name: str) -> ToolHandler | None:
        return self._registry.get(normalize_tool_name(name))

    def require(self, name: str) -> ToolHandler:
        handler = self.get(name)
        if handler is None:
            raise ToolNotFoundError(f"Tool not found: {name}")
        return handler

    def list(self) -> list[str]:
        return sorted(handler.name for handler in self._registry.values())

    def descriptors(self) -> list[ToolDescriptor]:
        return [describe(self._registry[key]) for key in sorted(self._registry)]

    def items(self) -> Iterator[tuple[str, ToolHandler]]:
        for handler in self._registry.values():
            yield handler.name, handler

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_tool_name(name) in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    async def dispatch(
        self,
        name: str,
        raw: Any,
        *,
        client: "FrontappAPI",
        ctx: "RequestContext",
    ) -> ToolResponse:
        try:
            handler = self.require(name)
        except ToolNotFoundError as exc:
            ctx.logger.info("tool_not_found", tool=name)
            return ToolResponse.error(str(exc), code=ErrorCode.NOT_FOUND)
        return await handle_with(handler, raw, client=client, ctx=ctx)


def build_default_registry() -> ToolRegistry:
    from .accounts import ACCOUNT_HANDLERS
    from .contacts import CONTACT_HANDLERS
    from .conversations import CONVERSATION_HANDLERS
    from .inboxes import INBOX_HANDLERS
    from .tags import TAG_HANDLERS
    from .teammates import TEAMMATE_HANDLERS

    registry = ToolRegistry()
    for group in (
        CONVERSATION_HANDLERS,
        CONTACT_HANDLERS,
        TEAMMATE_HANDLERS,
        ACCOUNT_HANDLERS,
        TAG_HANDLERS,
        INBOX_HANDLERS,
    ):
        for handler in group:
            registry.register(handler)
    return registry


__all__ = ["ToolRegistry", "build_default_registry", "normalize_tool_name"]
