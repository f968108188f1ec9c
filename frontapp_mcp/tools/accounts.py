from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from .base import object_schema
from .envelope import ToolResponse
from .formatting import compact, epoch_to_iso, pagination, related_link, results
from .validation import (
    optional_mapping,
    optional_non_empty_string_list,
    optional_positive_number,
    optional_string,
    require_any_field,
    require_string,
    require_string_list,
)

if TYPE_CHECKING:
    from frontapp_mcp.clients.frontapp import FrontappAPI
    from frontapp_mcp.core.context import RequestContext

_ACCOUNT_ID = {"type": "string", "description": "ID of the account"}
_DOMAINS = {"type": "array", "items": {"type": "string"}, "description": "Domains owned by the account"}
_ACCOUNT_FIELDS = ("name", "description", "domains", "external_id", "custom_fields")


def _account_core(account: Mapping[str, Any]) -> dict[str, Any]:
    return {
        "id": account.get("id"),
        "name": account.get("name"),
        "description": account.get("description") or "",
        "domains": account.get("domains"),
        "external_id": account.get("external_id"),
        "custom_fields": account.get("custom_fields"),
    }


@dataclass(slots=True, frozen=True)
class GetAccountsArgs:
    q: str | None = None
    limit: int | float | None = None
    page_token: str | None = None


class GetAccountsHandler:
    name = "get_accounts"
    description = "Get a list of accounts from Frontapp"
    failure_message = "Failed to get accounts"
    input_schema = object_schema(
        {
            "q": {"type": "string", "description": "Search query"},
            "limit": {"type": "number", "description": "Maximum number of accounts to return"},
            "page_token": {"type": "string", "description": "Token for pagination"},
        }
    )

    def validate_args(self, raw: Mapping[str, Any]) -> GetAccountsArgs:
        limit = optional_positive_number(raw, "limit")
        page_token = optional_string(raw, "page_token")
        return GetAccountsArgs(q=optional_string(raw, "q"), limit=limit, page_token=page_token)

    async def execute(self, args: GetAccountsArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        page = await client.get_accounts(compact({"q": args.q, "limit": args.limit, "page_token": args.page_token}))
        accounts = []
        for account in results(page):
            summary = _account_core(account)
            summary["created_at"] = epoch_to_iso(account.get("created_at"))
            summary["updated_at"] = epoch_to_iso(account.get("updated_at"))
            accounts.append(summary)
        return ToolResponse.success({"accounts": accounts, "pagination": pagination(page)})


@dataclass(slots=True, frozen=True)
class GetAccountArgs:
    account_id: str


class GetAccountHandler:
    name = "get_account"
    description = "Get an account from Frontapp"
    failure_message = "Failed to get account"
    input_schema = object_schema({"account_id": _ACCOUNT_ID}, required=("account_id",))

    def validate_args(self, raw: Mapping[str, Any]) -> GetAccountArgs:
        return GetAccountArgs(account_id=require_string(raw, "account_id"))

    async def execute(self, args: GetAccountArgs, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        account = await client.get_account(args.account_id)
        payload = _account_core(account)
        payload.update(
            created_at=epoch_to_iso(account.get("created_at")),
            updated_at=epoch_to_iso(account.get("updated_at")),
            contacts_url=related_link(account, "contacts"),
            conversations_url=related_link(account, "conversations"),
        )
        return ToolResponse.success(payload)


@dataclass(slots=True, frozen=True)
class AccountFields:
    name: str | None = None
    description: str | None = None
    domains: tuple[str, ...] | None = None
    external_id: str | None = None
    custom_fields: dict[str, Any] | None = None

    def to_body(self) -> dict[str, Any]:
        return compact(
            {
                "name": self.name,
                "description": self.description,
                "domains": list(self.domains) if self.domains is not None else None,
                "external_id": self.external_id,
                "custom_fields": self.custom_fields,
            }
        )


class CreateAccountHandler:
    name = "create_account"
    description = "Create an account in Frontapp"
    failure_message = "Failed to create account"
    input_schema = object_schema(
        {
            "name": {"type": "string", "description": "Name of the account"},
            "domains": _DOMAINS,
            "description": {"type": "string"},
            "external_id": {"type": "string"},
            "custom_fields": {"type": "object"},
        },
        required=("name", "domains"),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> AccountFields:
        name = require_string(raw, "name")
        domains = require_string_list(raw, "domains", item_label="domain")
        return AccountFields(
            name=name,
            domains=domains,
            description=optional_string(raw, "description"),
            external_id=optional_string(raw, "external_id"),
            custom_fields=optional_mapping(raw, "custom_fields"),
        )

    async def execute(self, args: AccountFields, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse:
        body = args.to_body()
        for key in ("description", "external_id"):
            if body.get(key) == "":
                body.pop(key)
        account = await client.create_account(body)
        payload = _account_core(account)
        payload["created_at"] = epoch_to_iso(account.get("created_at"))
        return ToolResponse.success({"account": payload, "message": "Account created successfully"})


@dataclass(slots=True, frozen=True)
class UpdateAccountArgs:
    account_id: str
    fields: AccountFields


class UpdateAccountHandler:
    name = "update_account"
    description = "Update an account in Frontapp"
    failure_message = "Failed to update account"
    input_schema = object_schema(
        {
            "account_id": _ACCOUNT_ID,
            "name": {"type": "string"},
            "description": {"type": "string"},
            "domains": _DOMAINS,
            "external_id": {"type": "string"},
            "custom_fields": {"type": "object"},
        },
        required=("account_id",),
    )

    def validate_args(self, raw: Mapping[str, Any]) -> UpdateAccountArgs:
        account_id = require_string(raw, "account_id")
        require_any_field(raw, _ACCOUNT_FIELDS)
        fields = AccountFields(
            name=optional_string(raw, "name"),
            description=optional_string(raw, "description"),
            domains=optional_non_empty_string_list(raw, "domains", item_label="domain"),
            external_id=optional_string(raw, "external_id"),
            custom_fields=optional_mapping(raw, "custom_fields"),
        )
        return UpdateAccountArgs(account_id=account_id, fields=fields)

    async def execute(
        self, args: UpdateAccountArgs, *, client: "FrontappAPI", ctx: "RequestContext"
    ) -> ToolResponse:
        account = await client.update_account(args.account_id, args.fields.to_body())
        payload = _account_core(account)
        payload["updated_at"] = epoch_to_iso(account.get("updated_at"))
        return ToolResponse.success({"account": payload, "message": "Account updated successfully"})


ACCOUNT_HANDLERS = (
    GetAccountsHandler(),
    GetAccountHandler(),
    CreateAccountHandler(),
    UpdateAccountHandler(),
)

__all__ = [
    "ACCOUNT_HANDLERS",
    "AccountFields",
    "CreateAccountHandler",
    "GetAccountHandler",
    "GetAccountsHandler",
    "UpdateAccountArgs",
    "UpdateAccountHandler",
]
