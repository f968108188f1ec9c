"""Field checks shared by every tool's ``validate_args``.

Each helper inspects one field and raises :class:`ToolValidationError` naming
that field on the first problem it finds. Optional fields treat ``None`` as
absent. None of the helpers mutate the arguments they are given.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from .exceptions import ToolValidationError


def ensure_arguments(raw: Any) -> Mapping[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise ToolValidationError("arguments must be an object")
    return raw


def require_string(args: Mapping[str, Any], field: str, *, label: str | None = None) -> str:
    name = label or field
    value = args.get(field)
    if value is None or value == "":
        raise ToolValidationError(f"{name} is required")
    if not isinstance(value, str):
        raise ToolValidationError(f"{name} must be a string")
    return value


def optional_string(args: Mapping[str, Any], field: str, *, label: str | None = None) -> str | None:
    value = args.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ToolValidationError(f"{label or field} must be a string")
    return value


def optional_positive_number(args: Mapping[str, Any], field: str) -> int | float | None:
    value = args.get(field)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ToolValidationError(f"{field} must be a positive number")
    if isinstance(value, float) and not math.isfinite(value):
        raise ToolValidationError(f"{field} must be a positive number")
    return value


def optional_choice(args: Mapping[str, Any], field: str, choices: Sequence[str]) -> str | None:
    value = args.get(field)
    if value is None:
        return None
    if value not in choices:
        raise ToolValidationError(f"{field} must be one of: {', '.join(choices)}")
    return value


def optional_bool(args: Mapping[str, Any], field: str, *, label: str | None = None) -> bool | None:
    value = args.get(field)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ToolValidationError(f"{label or field} must be a boolean")
    return value


def optional_string_list(
    args: Mapping[str, Any], field: str, *, label: str | None = None
) -> tuple[str, ...] | None:
    name = label or field
    value = args.get(field)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ToolValidationError(f"{name} must be an array")
    for item in value:
        if not isinstance(item, str):
            raise ToolValidationError(f"{name} must contain only strings")
    return tuple(value)


def require_string_list(args: Mapping[str, Any], field: str, *, item_label: str) -> tuple[str, ...]:
    value = args.get(field)
    if not isinstance(value, list) or not value:
        raise ToolValidationError(f"{field} is required and must be a non-empty array")
    return _string_items(value, item_label)


def optional_non_empty_string_list(
    args: Mapping[str, Any], field: str, *, item_label: str
) -> tuple[str, ...] | None:
    value = args.get(field)
    if value is None:
        return None
    if not isinstance(value, list) or not value:
        raise ToolValidationError(f"{field} must be a non-empty array")
    return _string_items(value, item_label)


def optional_mapping(args: Mapping[str, Any], field: str) -> dict[str, Any] | None:
    value = args.get(field)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ToolValidationError(f"{field} must be an object")
    return dict(value)


def validate_handles(value: Any, *, required: bool) -> tuple[dict[str, str], ...] | None:
    if value is None and not required:
        return None
    if required and (not isinstance(value, list) or not value):
        raise ToolValidationError("handles is required and must be a non-empty array")
    if not isinstance(value, list):
        raise ToolValidationError("handles must be an array")
    handles: list[dict[str, str]] = []
    for item in value:
        entry = item if isinstance(item, Mapping) else {}
        handle = entry.get("handle")
        source = entry.get("source")
        if not handle or not isinstance(handle, str):
            raise ToolValidationError("Each handle must have a handle property that is a string")
        if not source or not isinstance(source, str):
            raise ToolValidationError("Each handle must have a source property that is a string")
        handles.append({"handle": handle, "source": source})
    return tuple(handles)


def validate_links(value: Any) -> tuple[dict[str, str], ...] | None:
    if value is None:
        return None
    if not isinstance(value, list):
        raise ToolValidationError("links must be an array")
    links: list[dict[str, str]] = []
    for item in value:
        entry = item if isinstance(item, Mapping) else {}
        name = entry.get("name")
        url = entry.get("url")
        if not name or not isinstance(name, str):
            raise ToolValidationError("Each link must have a name property that is a string")
        if not url or not isinstance(url, str):
            raise ToolValidationError("Each link must have a url property that is a string")
        links.append({"name": name, "url": url})
    return tuple(links)


def require_any_field(args: Mapping[str, Any], fields: Iterable[str]) -> None:
    if not any(args.get(field) not in (None, "") for field in fields):
        raise ToolValidationError("At least one field to update must be provided")


@dataclass(slots=True, frozen=True)
class PageArgs:
    limit: int | float | None = None
    page_token: str | None = None

    def params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.limit is not None:
            params["limit"] = self.limit
        if self.page_token is not None:
            params["page_token"] = self.page_token
        return params


def validate_page_args(args: Mapping[str, Any]) -> PageArgs:
    limit = optional_positive_number(args, "limit")
    return PageArgs(limit=limit, page_token=optional_string(args, "page_token"))


PAGE_SCHEMA = {
    "limit": {"type": "number", "description": "Maximum number of results to return"},
    "page_token": {"type": "string", "description": "Token for pagination"},
}


def _string_items(values: list[Any], item_label: str) -> tuple[str, ...]:
    for item in values:
        if not isinstance(item, str):
            raise ToolValidationError(f"Each {item_label} must be a string")
    return tuple(values)


__all__ = [
    "PAGE_SCHEMA",
    "PageArgs",
    "ensure_arguments",
    "optional_bool",
    "optional_choice",
    "optional_mapping",
    "optional_non_empty_string_list",
    "optional_positive_number",
    "optional_string",
    "optional_string_list",
    "require_any_field",
    "require_string",
    "require_string_list",
    "validate_handles",
    "validate_links",
    "validate_page_args",
]
