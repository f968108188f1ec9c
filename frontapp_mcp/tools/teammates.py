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


def _teammate(teammate: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": teammate.get("id"),
        "email": teammate.get("email"),
        "username": teammate.get("username"),
        "first_name": teammate.get("first_name"),
        "last_name": teammate.get("last_name"),
        "is_admin": teammate.get("is_admin"),
        "is_available": teammate.get("is_available"),
        "is_blocked": teammate.get("is_blocked"),
        "custom_fields": teammate.get("custom_fields"),
    }


class GetTeammatesHandler:
    name = "get_teammates"
    description = "Get a list of teammates from Frontapp"
    failure_message = "Failed to get teammates"
    input_schema = object_schema(PAGE_SCHEMA)

    def validate_args(self, raw: Mapping[str, Any]) -> PageArgs:
        return validate_page_args(raw)

    async def execute(self, args: PageArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        page = await client.get_teammates(args.params())
        teammates = [_teammate(teammate) for teammate in results(page)]
        return ToolResponse.success({"teammates": teammates, "pagination": pagination(page)})


@dataclass(slots=True, frozen=True)
class GetTeammateArgs:
    teammate_id: str


class GetTeammateHandler:
    name = "get_teammate"
    description = "Get a teammate from Frontapp"
    failure_message = "Failed to get teammate"
    input_schema = object_schema(
        {"teammate_id": {"type": "string", "description": "ID of the teammate"}},
        required=("teammate_id",),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> GetTeammateArgs:
        return GetTeammateArgs(teammate_id=require_string(raw, "teammate_id"))

    async def execute(self, args: GetTeammateArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        teammate = await client.get_teammate(args.teammate_id)
        payload = _teammate(teammate)
        payload["inboxes"] = related_link(teammate, "inboxes")
        payload["conversations"] = related_link(teammate, "conversations")
        return ToolResponse.success(payload)


TEAMMATE_HANDLERS = (GetTeammatesHandler(), GetTeammateHandler())

__all__ = [
    "GetTeammateHandler",
    "GetTeammatesHandler",
    "TEAMMATE_HANDLERS",
]
