from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from .base import object_schema
from .envelope import ToolResponse
from .formatting import epoch_to_iso, pagination, results
from .validation import PAGE_SCHEMA, PageArgs, require_string, validate_page_args

if TYPE_CHECKING:
    from frontapp_mcp.clients.frontapp import FrontappAPI
    from frontapp_mcp.core.context import RequestContext

_TAGGING_SCHEMA = object_schema(
    {
        "conversation_id": {"type": "string", "description": "ID of the conversation"},
        "tag_id": {"type": "string", "description": "ID of the tag"},
    },
    required=("conversation_id", "tag_id"),
)


class GetTagsHandler:
    name = "get_tags"
    description = "Get a list of tags from Frontapp"
    failure_message = "Failed to get tags"
    input_schema = object_schema(PAGE_SCHEMA)

    def validate_args(self, raw: Mapping[str, Any]) -> PageArgs:
        return validate_page_args(raw)

    async def execute(self, args: PageArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        page = await client.get_tags(args.params())
        tags = [
            {
                "id": tag.get("id"),
                "name": tag.get("name"),
                "highlight": tag.get("highlight"),
                "is_private": tag.get("is_private"),
                "created_at": epoch_to_iso(tag.get("created_at")),
                "updated_at": epoch_to_iso(tag.get("updated_at")),
            }
            for tag in results(page)
        ]
        return ToolResponse.success({"tags": tags, "pagination": pagination(page)})


@dataclass(slots=True, frozen=True)
class TaggingArgs:
    conversation_id: str
    tag_id: str


def _validate_tagging(raw: Mapping[str, Any]) -> TaggingArgs:
    return TaggingArgs(
        conversation_id=require_string(raw, "conversation_id"),
        tag_id=require_string(raw, "tag_id"),
    )


class ApplyTagHandler:
    name = "apply_tag"
    description = "Apply a tag to a conversation"
    failure_message = "Failed to apply tag"
    input_schema = _TAGGING_SCHEMA

    def validate_args(self, raw: Mapping[str, Any]) -> TaggingArgs:
        return _validate_tagging(raw)

    async def execute(self, args: TaggingArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        await client.apply_tag(args.conversation_id, args.tag_id)
        return ToolResponse.success(
            {"message": f"Tag {args.tag_id} applied to conversation {args.conversation_id} successfully"}
        )


class RemoveTagHandler:
    name = "remove_tag"
    description = "Remove a tag from a conversation"
    failure_message = "Failed to remove tag"
    input_schema = _TAGGING_SCHEMA

    def validate_args(self, raw: Mapping[str, Any]) -> TaggingArgs:
        return _validate_tagging(raw)

    async def execute(self, args: TaggingArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        await client.remove_tag(args.conversation_id, args.tag_id)
        return ToolResponse.success(
            {"message": f"Tag {args.tag_id} removed from conversation {args.conversation_id} successfully"}
        )


TAG_HANDLERS = (GetTagsHandler(), ApplyTagHandler(), RemoveTagHandler())

__all__ = ["ApplyTagHandler", "GetTagsHandler", "RemoveTagHandler", "TAG_HANDLERS", "TaggingArgs"]
