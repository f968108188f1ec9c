"""Conversation tools over the Frontapp conversations API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from .base import object_schema
from .envelope import ToolResponse
from .formatting import (
    assignee_summary,
    author_display,
    compact,
    epoch_to_iso,
    pagination,
    results,
    tag_refs,
)
from .validation import (
    optional_bool,
    optional_choice,
    optional_mapping,
    optional_positive_number,
    optional_string,
    optional_string_list,
    require_string,
)

if TYPE_CHECKING:
    from frontapp_mcp.clients.frontapp import FrontappAPI
    from frontapp_mcp.core.context import RequestContext

CONVERSATION_STATUSES = ("open", "archived", "spam", "deleted")

_CONVERSATION_ID = {"type": "string", "description": "ID of the conversation"}


def _conversation_summary(conversation: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": conversation.get("id"),
        "subject": conversation.get("subject") or "(No subject)",
        "status": conversation.get("status"),
        "assignee": assignee_summary(conversation.get("assignee")),
        "tags": tag_refs(conversation.get("tags")),
        "created_at": epoch_to_iso(conversation.get("created_at")),
    }


def _last_message(message: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not message:
        return None
    return {
        "author": author_display(message.get("author")),
        "text": message.get("text"),
        "created_at": epoch_to_iso(message.get("created_at")),
    }


def _message(message: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": message.get("id"),
        "type": message.get("type"),
        "is_inbound": message.get("is_inbound"),
        "created_at": epoch_to_iso(message.get("created_at")),
        "author": author_display(message.get("author")),
        "text": message.get("text"),
        "recipients": [
            {"handle": recipient.get("handle"), "role": recipient.get("role")}
            for recipient in message.get("recipients") or []
        ],
    }


@dataclass(slots=True, frozen=True)
class GetConversationsArgs:
    q: str | None = None
    inbox_id: str | None = None
    tag_id: str | None = None
    assignee_id: str | None = None
    status: str | None = None
    limit: int | float | None = None
    page_token: str | None = None


class GetConversationsHandler:
    name = "get_conversations"
    description = "Get a list of conversations from Frontapp"
    failure_message = "Failed to get conversations"
    input_schema = object_schema(
        {
            "q": {"type": "string", "description": "Search query"},
            "inbox_id": {"type": "string", "description": "Filter by inbox ID"},
            "tag_id": {"type": "string", "description": "Filter by tag ID"},
            "assignee_id": {"type": "string", "description": "Filter by assignee ID"},
            "status": {
                "type": "string",
                "enum": list(CONVERSATION_STATUSES),
                "description": "Filter conversations by status",
            },
            "limit": {"type": "number", "description": "Maximum number of conversations to return"},
            "page_token": {"type": "string", "description": "Token for pagination"},
        }
    )

    def validate_args(self, raw: Mapping[str, Any]) -> GetConversationsArgs:
        limit = optional_positive_number(raw, "limit")
        status = optional_choice(raw, "status", CONVERSATION_STATUSES)
        return GetConversationsArgs(
            q=optional_string(raw, "q"),
            inbox_id=optional_string(raw, "inbox_id"),
            tag_id=optional_string(raw, "tag_id"),
            assignee_id=optional_string(raw, "assignee_id"),
            status=status,
            limit=limit,
            page_token=optional_string(raw, "page_token"),
        )

    async def execute(
        self, args: GetConversationsArgs, *, client: "FrontappAPI", ctx: "RequestContext"
    ) -> ToolResponse:
        params = compact(
            {
                "q": args.q,
                "inbox_id": args.inbox_id,
                "tag_id": args.tag_id,
                "assignee_id": args.assignee_id,
                "status": args.status,
                "limit": args.limit,
                "page_token": args.page_token,
            }
        )
        page = await client.get_conversations(params)
        conversations = []
        for conversation in results(page):
            summary = _conversation_summary(conversation)
            summary["last_message"] = _last_message(conversation.get("last_message"))
            conversations.append(summary)
        return ToolResponse.success({"conversations": conversations, "pagination": pagination(page)})


@dataclass(slots=True, frozen=True)
class ConversationArgs:
    conversation_id: str


class GetConversationHandler:
    name = "get_conversation"
    description = "Get a conversation and its messages from Frontapp"
    failure_message = "Failed to get conversation"
    input_schema = object_schema({"conversation_id": _CONVERSATION_ID}, required=("conversation_id",))

    def validate_args(self, raw: Mapping[str, Any]) -> ConversationArgs:
        return ConversationArgs(conversation_id=require_string(raw, "conversation_id"))

    async def execute(self, args: ConversationArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        conversation = await client.get_conversation(args.conversation_id)
        messages = await client.get_conversation_messages(args.conversation_id)
        payload = _conversation_summary(conversation)
        payload["is_private"] = conversation.get("is_private")
        payload["messages"] = [_message(message) for message in results(messages)]
        return ToolResponse.success(payload)


@dataclass(slots=True, frozen=True)
class SendMessageArgs:
    conversation_id: str
    content: str
    author_id: str | None = None
    subject: str | None = None
    tags: tuple[str, ...] = ()
    archive: bool = False
    draft: bool | None = None


class SendMessageHandler:
    name = "send_message"
    description = "Send a message to a conversation"
    failure_message = "Failed to send message"
    input_schema = object_schema(
        {
            "conversation_id": _CONVERSATION_ID,
            "content": {"type": "string", "description": "Message body"},
            "author_id": {"type": "string", "description": "Teammate sending the message"},
            "subject": {"type": "string", "description": "Message subject"},
            "options": {
                "type": "object",
                "properties": {
                    "tags": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "Tags to apply to the conversation",
                    },
                    "archive": {"type": "boolean", "description": "Archive the conversation after sending"},
                    "draft": {"type": "boolean", "description": "Save as a draft instead of sending"},
                },
            },
        },
        required=("conversation_id", "content"),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> SendMessageArgs:
        conversation_id = require_string(raw, "conversation_id")
        content = require_string(raw, "content")
        author_id = optional_string(raw, "author_id")
        subject = optional_string(raw, "subject")
        options = optional_mapping(raw, "options") or {}
        tags = optional_string_list(options, "tags", label="options.tags")
        archive = optional_bool(options, "archive", label="options.archive")
        draft = optional_bool(options, "draft", label="options.draft")
        return SendMessageArgs(
            conversation_id=conversation_id,
            content=content,
            author_id=author_id,
            subject=subject,
            tags=tags or (),
            archive=bool(archive),
            draft=draft,
        )

    async def execute(self, args: SendMessageArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        message = compact(
            {
                "body": args.content,
                "type": "comment",
                "author_id": args.author_id or None,
                "subject": args.subject or None,
                "draft": args.draft,
            }
        )
        sent = await client.send_message(args.conversation_id, message)
        for tag_id in args.tags:
            await client.apply_tag(args.conversation_id, tag_id)
        if args.archive:
            await client.archive_conversation(args.conversation_id)
        ctx.logger.info(
            "message_sent",
            conversation_id=args.conversation_id,
            tags_applied=len(args.tags),
            archived=args.archive,
        )
        return ToolResponse.success(
            {
                "message_id": sent.get("id"),
                "conversation_id": args.conversation_id,
                "status": "sent",
            }
        )


@dataclass(slots=True, frozen=True)
class AddCommentArgs:
    conversation_id: str
    body: str
    author_id: str


class AddCommentHandler:
    name = "add_comment"
    description = "Add an internal comment to a conversation"
    failure_message = "Failed to add comment"
    input_schema = object_schema(
        {
            "conversation_id": _CONVERSATION_ID,
            "body": {"type": "string", "description": "Comment body"},
            "author_id": {"type": "string", "description": "Teammate writing the comment"},
        },
        required=("conversation_id", "body", "author_id"),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> AddCommentArgs:
        return AddCommentArgs(
            conversation_id=require_string(raw, "conversation_id"),
            body=require_string(raw, "body"),
            author_id=require_string(raw, "author_id"),
        )

    async def execute(self, args: AddCommentArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        comment = await client.add_comment(args.conversation_id, body=args.body, author_id=args.author_id)
        return ToolResponse.success(
            {
                "message": f"Comment added to conversation {args.conversation_id} successfully",
                "comment": {
                    "id": comment.get("id"),
                    "body": comment.get("body"),
                    "author": comment.get("author"),
                    "created_at": epoch_to_iso(comment.get("created_at")),
                },
            }
        )


class ArchiveConversationHandler:
    name = "archive_conversation"
    description = "Archive a conversation"
    failure_message = "Failed to archive conversation"
    input_schema = object_schema({"conversation_id": _CONVERSATION_ID}, required=("conversation_id",))

    def validate_args(self, raw: Mapping[str, Any]) -> ConversationArgs:
        return ConversationArgs(conversation_id=require_string(raw, "conversation_id"))

    async def execute(self, args: ConversationArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        await client.archive_conversation(args.conversation_id)
        return ToolResponse.success({"message": f"Conversation {args.conversation_id} archived successfully"})


@dataclass(slots=True, frozen=True)
class AssignConversationArgs:
    conversation_id: str
    assignee_id: str


class AssignConversationHandler:
    name = "assign_conversation"
    description = "Assign a conversation to a teammate"
    failure_message = "Failed to assign conversation"
    input_schema = object_schema(
        {
            "conversation_id": _CONVERSATION_ID,
            "assignee_id": {"type": "string", "description": "ID of the teammate to assign"},
        },
        required=("conversation_id", "assignee_id"),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> AssignConversationArgs:
        return AssignConversationArgs(
            conversation_id=require_string(raw, "conversation_id"),
            assignee_id=require_string(raw, "assignee_id"),
        )

    async def execute(
        self, args: AssignConversationArgs, *, client: "FrontappAPI", ctx: "RequestContext"
    ) -> ToolResponse:
        await client.assign_conversation(args.conversation_id, args.assignee_id)
        return ToolResponse.success(
            {
                "message": (
                    f"Conversation {args.conversation_id} assigned to teammate "
                    f"{args.assignee_id} successfully"
                )
            }
        )


CONVERSATION_HANDLERS = (
    GetConversationsHandler(),
    GetConversationHandler(),
    SendMessageHandler(),
    AddCommentHandler(),
    ArchiveConversationHandler(),
    AssignConversationHandler(),
)

__all__ = [
    "AddCommentHandler",
    "ArchiveConversationHandler",
    "AssignConversationHandler",
    "CONVERSATION_HANDLERS",
    "CONVERSATION_STATUSES",
    "GetConversationHandler",
    "GetConversationsHandler",
    "SendMessageHandler",
]
