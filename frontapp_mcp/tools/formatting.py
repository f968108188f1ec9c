from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping


def epoch_to_iso(value: Any) -> str | None:
    """Render Frontapp epoch seconds as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected epoch seconds, got {type(value).__name__}")
    moment = datetime.fromtimestamp(value, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def author_display(author: Mapping[str, Any] | None) -> str:
    if not author:
        return "Unknown"
    if author.get("is_teammate"):
        first = author.get("first_name") or ""
        last = author.get("last_name") or ""
        return f"{first} {last}".strip()
    return author.get("email") or "Unknown"


def assignee_summary(assignee: Mapping[str, Any] | None) -> dict[str, Any] | None:
    if not assignee:
        return None
    return {
        "id": assignee.get("id"),
        "name": f"{assignee.get('first_name') or ''} {assignee.get('last_name') or ''}".strip(),
    }


def tag_refs(tags: Any) -> list[dict[str, Any]]:
    return [{"id": tag.get("id"), "name": tag.get("name")} for tag in tags or []]


def handle_refs(handles: Any) -> list[dict[str, Any]]:
    return [{"handle": item.get("handle"), "source": item.get("source")} for item in handles or []]


def link_refs(links: Any) -> list[dict[str, Any]]:
    return [{"name": item.get("name"), "url": item.get("url")} for item in links or []]


def related_link(resource: Mapping[str, Any], name: str) -> Any:
    links = resource.get("_links") or {}
    related = links.get("related") or {}
    return related.get(name)


def compact(values: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in values.items() if value is not None}


def results(page: Mapping[str, Any]) -> list[Mapping[str, Any]]:
    return list(page.get("_results") or [])


def pagination(page: Mapping[str, Any]) -> dict[str, Any]:
    meta = page.get("_pagination") or {}
    return {"next_page_token": meta.get("next")}


__all__ = [
    "assignee_summary",
    "author_display",
    "compact",
    "epoch_to_iso",
    "handle_refs",
    "link_refs",
    "pagination",
    "related_link",
    "results",
    "tag_refs",
]
