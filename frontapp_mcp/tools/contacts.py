from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from .base import object_schema
from .envelope import ToolResponse
from .formatting import compact, epoch_to_iso, handle_refs, link_refs
from .validation import (
    optional_mapping,
    optional_string,
    require_any_field,
    require_string,
    validate_handles,
    validate_links,
)

if TYPE_CHECKING:
    from frontapp_mcp.clients.frontapp import FrontappAPI
    from frontapp_mcp.core.context import RequestContext

_HANDLES_SCHEMA = {
    "type": "array",
    "description": "Contact handles (email, phone, ...)",
    "items": {
        "type": "object",
        "properties": {"handle": {"type": "string"}, "source": {"type": "string"}},
        "required": ["handle", "source"],
    },
}
_LINKS_SCHEMA = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {"name": {"type": "string"}, "url": {"type": "string"}},
        "required": ["name", "url"],
    },
}
_CONTACT_FIELDS = ("name", "description", "handles", "links", "custom_fields")


def _contact_core(contact: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": contact.get("id"),
        "name": contact.get("name") or "(No name)",
        "description": contact.get("description") or "",
        "handles": handle_refs(contact.get("handles")),
        "links": link_refs(contact.get("links")),
    }


@dataclass(slots=True, frozen=True)
class GetContactArgs:
    contact_id: str


class GetContactHandler:
    name = "get_contact"
    description = "Get a contact from Frontapp"
    failure_message = "Failed to get contact"
    input_schema = object_schema(
        {"contact_id": {"type": "string", "description": "ID of the contact"}},
        required=("contact_id",),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> GetContactArgs:
        return GetContactArgs(contact_id=require_string(raw, "contact_id"))

    async def execute(self, args: GetContactArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        contact = await client.get_contact(args.contact_id)
        payload = _contact_core(contact)
        payload.update(
            avatar_url=contact.get("avatar_url"),
            is_spammer=contact.get("is_spammer"),
            groups=contact.get("groups"),
            custom_fields=contact.get("custom_fields"),
            created_at=epoch_to_iso(contact.get("created_at")),
            updated_at=epoch_to_iso(contact.get("updated_at")),
        )
        return ToolResponse.success(payload)


@dataclass(slots=True, frozen=True)
class ContactFields:
    name: str | None = None
    description: str | None = None
    handles: tuple[dict[str, str], ...] | None = None
    links: tuple[dict[str, str], ...] | None = None
    custom_fields: dict[str, Any] | None = None

    def to_body(self) -> dict[str, Any]:
        return compact(
            {
                "name": self.name,
                "description": self.description,
                "handles": list(self.handles) if self.handles is not None else None,
                "links": list(self.links) if self.links is not None else None,
                "custom_fields": self.custom_fields,
            }
        )


class CreateContactHandler:
    name = "create_contact"
    description = "Create a contact in Frontapp"
    failure_message = "Failed to create contact"
    input_schema = object_schema(
        {
            "handles": _HANDLES_SCHEMA,
            "name": {"type": "string"},
            "description": {"type": "string"},
            "links": _LINKS_SCHEMA,
            "custom_fields": {"type": "object"},
        },
        required=("handles",),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> ContactFields:
        handles = validate_handles(raw.get("handles"), required=True)
        return ContactFields(
            handles=handles,
            name=optional_string(raw, "name"),
            description=optional_string(raw, "description"),
            links=validate_links(raw.get("links")),
            custom_fields=optional_mapping(raw, "custom_fields"),
        )

    async def execute(self, args: ContactFields, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        body = args.to_body()
        # empty strings are not sent on create
        for key in ("name", "description"):
            if body.get(key) == "":
                body.pop(key)
        contact = await client.create_contact(body)
        payload = _contact_core(contact)
        payload["created_at"] = epoch_to_iso(contact.get("created_at"))
        return ToolResponse.success({"contact": payload, "message": "Contact created successfully"})


@dataclass(slots=True, frozen=True)
class UpdateContactArgs:
    contact_id: str
    fields: ContactFields


class UpdateContactHandler:
    name = "update_contact"
    description = "Update a contact in Frontapp"
    failure_message = "Failed to update contact"
    input_schema = object_schema(
        {
            "contact_id": {"type": "string", "description": "ID of the contact"},
            "name": {"type": "string"},
            "description": {"type": "string"},
            "handles": _HANDLES_SCHEMA,
            "links": _LINKS_SCHEMA,
            "custom_fields": {"type": "object"},
        },
        required=("contact_id",),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> UpdateContactArgs:
        contact_id = require_string(raw, "contact_id")
        require_any_field(raw, _CONTACT_FIELDS)
        fields = ContactFields(
            name=optional_string(raw, "name"),
            description=optional_string(raw, "description"),
            handles=validate_handles(raw.get("handles"), required=False),
            links=validate_links(raw.get("links")),
            custom_fields=optional_mapping(raw, "custom_fields"),
        )
        return UpdateContactArgs(contact_id=contact_id, fields=fields)

    async def execute(
        self, args: UpdateContactArgs, *, client: "FrontappAPI", ctx: "RequestContext"
    ) -> ToolResponse:
        contact = await client.update_contact(args.contact_id, args.fields.to_body())
        payload = _contact_core(contact)
        payload["updated_at"] = epoch_to_iso(contact.get("updated_at"))
        return ToolResponse.success({"contact": payload, "message": "Contact updated successfully"})


CONTACT_HANDLERS = (
    GetContactHandler(),
    CreateContactHandler(),
    UpdateContactHandler(),
)

__all__ = [
    "CONTACT_HANDLERS",
    "ContactFields",
    "CreateContactHandler",
    "GetContactHandler",
    "UpdateContactArgs",
    "UpdateContactHandler",
]
