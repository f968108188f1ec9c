"""Async binding for the Frontapp core API."""
from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Protocol

import httpx
from tenacity import AsyncRetrying, retry_if_exception, stop_after_attempt, wait_exponential

from frontapp_mcp.core.config import FrontappSettings
from frontapp_mcp.core.logging import get_logger
from frontapp_mcp.tools.exceptions import ExternalCallError

logger = get_logger(name=__name__)

JSON = Dict[str, Any]


class FrontappAPIError(ExternalCallError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, status_code=status_code, payload=payload)
        self.retryable = retryable


class FrontappAPI(Protocol):
    """Operations the tool handlers need from the Frontapp API."""

    async def get_conversations(self, params: Optional[Mapping[str, Any]] = None) -> JSON: ...

    async def get_conversation(self, conversation_id: str) -> JSON: ...

    async def get_conversation_messages(self, conversation_id: str) -> JSON: ...

    async def send_message(self, conversation_id: str, data: Mapping[str, Any]) -> JSON: ...

    async def add_comment(self, conversation_id: str, *, body: str, author_id: str) -> JSON: ...

    async def archive_conversation(self, conversation_id: str) -> JSON: ...

    async def assign_conversation(self, conversation_id: str, assignee_id: str) -> JSON: ...

    async def get_contact(self, contact_id: str) -> JSON: ...

    async def create_contact(self, data: Mapping[str, Any]) -> JSON: ...

    async def update_contact(self, contact_id: str, data: Mapping[str, Any]) -> JSON: ...

    async def get_teammates(self, params: Optional[Mapping[str, Any]] = None) -> JSON: ...

    async def get_teammate(self, teammate_id: str) -> JSON: ...

    async def get_accounts(self, params: Optional[Mapping[str, Any]] = None) -> JSON: ...

    async def get_account(self, account_id: str) -> JSON: ...

    async def create_account(self, data: Mapping[str, Any]) -> JSON: ...

    async def update_account(self, account_id: str, data: Mapping[str, Any]) -> JSON: ...

    async def get_tags(self, params: Optional[Mapping[str, Any]] = None) -> JSON: ...

    async def apply_tag(self, conversation_id: str, tag_id: str) -> JSON: ...

    async def remove_tag(self, conversation_id: str, tag_id: str) -> JSON: ...

    async def get_inboxes(self, params: Optional[Mapping[str, Any]] = None) -> JSON: ...

    async def get_inbox(self, inbox_id: str) -> JSON: ...


class _ResponseCache:
    """TTL cache bounded to ``max_entries``; the oldest entry is evicted first."""

    def __init__(self, ttl_seconds: float, max_entries: int) -> None:
        self._ttl = max(0.0, float(ttl_seconds))
        self._max_entries = max(1, int(max_entries))
        self._entries: Dict[str, tuple[float, JSON]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> JSON | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if time.monotonic() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: JSON) -> None:
        if self._ttl <= 0:
            return
        now = time.monotonic()
        self._entries.pop(key, None)
        if len(self._entries) >= self._max_entries:
            self._prune(now)
        while len(self._entries) >= self._max_entries:
            oldest = next(iter(self._entries))
            del self._entries[oldest]
            logger.debug("frontapp_cache_evicted", key=oldest)
        self._entries[key] = (now + self._ttl, value)

    def invalidate(self, *keys: str) -> None:
        for key in keys:
            self._entries.pop(key, None)

    def _prune(self, now: float) -> None:
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, FrontappAPIError) and exc.retryable


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, Mapping):
        error = body.get("_error")
        if isinstance(error, Mapping):
            return str(error.get("message") or error.get("title") or response.reason_phrase)
        if body.get("message"):
            return str(body["message"])
    return response.reason_phrase


class FrontappClient:
    """Frontapp API client with retries, 429 handling and cached reference reads."""

    def __init__(
        self,
        settings: FrontappSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            headers={
                "Authorization": f"Bearer {settings.api_key.get_secret_value()}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=settings.timeout_seconds,
            transport=transport,
        )
        self._max_retries = settings.max_retries
        self._backoff = settings.retry_backoff_seconds
        self._cache = _ResponseCache(settings.cache_ttl_seconds, settings.cache_max_entries)
        self._sleep = sleep

    async def aclose(self) -> None:
        await self._client.aclose()

    # Conversations

    async def get_conversations(self, params: Optional[Mapping[str, Any]] = None) -> JSON:
        return await self._request("GET", "/conversations", params=params)

    async def get_conversation(self, conversation_id: str) -> JSON:
        return await self._request("GET", f"/conversations/{conversation_id}")

    async def get_conversation_messages(self, conversation_id: str) -> JSON:
        return await self._request("GET", f"/conversations/{conversation_id}/messages")

    async def send_message(self, conversation_id: str, data: Mapping[str, Any]) -> JSON:
        return await self._request("POST", f"/conversations/{conversation_id}/messages", json=dict(data))

    async def add_comment(self, conversation_id: str, *, body: str, author_id: str) -> JSON:
        return await self._request(
            "POST",
            f"/conversations/{conversation_id}/comments",
            json={"author_id": author_id, "body": body},
        )

    async def archive_conversation(self, conversation_id: str) -> JSON:
        return await self._request("PATCH", f"/conversations/{conversation_id}", json={"archived": True})

    async def assign_conversation(self, conversation_id: str, assignee_id: str) -> JSON:
        return await self._request(
            "PATCH", f"/conversations/{conversation_id}", json={"assignee_id": assignee_id}
        )

    # Contacts

    async def get_contact(self, contact_id: str) -> JSON:
        return await self._request("GET", f"/contacts/{contact_id}")

    async def create_contact(self, data: Mapping[str, Any]) -> JSON:
        return await self._request("POST", "/contacts", json=dict(data))

    async def update_contact(self, contact_id: str, data: Mapping[str, Any]) -> JSON:
        return await self._request("PATCH", f"/contacts/{contact_id}", json=dict(data))

    # Teammates

    async def get_teammates(self, params: Optional[Mapping[str, Any]] = None) -> JSON:
        return await self._cached_get("frontapp:teammates", "/teammates", params=params)

    async def get_teammate(self, teammate_id: str) -> JSON:
        return await self._cached_get(f"frontapp:teammate:{teammate_id}", f"/teammates/{teammate_id}")

    # Accounts

    async def get_accounts(self, params: Optional[Mapping[str, Any]] = None) -> JSON:
        return await self._cached_get("frontapp:accounts", "/accounts", params=params)

    async def get_account(self, account_id: str) -> JSON:
        return await self._cached_get(f"frontapp:account:{account_id}", f"/accounts/{account_id}")

    async def create_account(self, data: Mapping[str, Any]) -> JSON:
        account = await self._request("POST", "/accounts", json=dict(data))
        self._cache.invalidate("frontapp:accounts")
        return account

    async def update_account(self, account_id: str, data: Mapping[str, Any]) -> JSON:
        account = await self._request("PATCH", f"/accounts/{account_id}", json=dict(data))
        self._cache.invalidate("frontapp:accounts", f"frontapp:account:{account_id}")
        return account

    # Tags

    async def get_tags(self, params: Optional[Mapping[str, Any]] = None) -> JSON:
        return await self._cached_get("frontapp:tags", "/tags", params=params)

    async def apply_tag(self, conversation_id: str, tag_id: str) -> JSON:
        return await self._request("POST", f"/conversations/{conversation_id}/tags", json={"tag_ids": [tag_id]})

    async def remove_tag(self, conversation_id: str, tag_id: str) -> JSON:
        return await self._request(
            "DELETE", f"/conversations/{conversation_id}/tags", json={"tag_ids": [tag_id]}
        )

    # Inboxes

    async def get_inboxes(self, params: Optional[Mapping[str, Any]] = None) -> JSON:
        return await self._cached_get("frontapp:inboxes", "/inboxes", params=params)

    async def get_inbox(self, inbox_id: str) -> JSON:
        return await self._cached_get(f"frontapp:inbox:{inbox_id}", f"/inboxes/{inbox_id}")

    async def _cached_get(
        self,
        cache_key: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
    ) -> JSON:
        # filtered or paginated reads always go to the API
        if params:
            return await self._request("GET", path, params=params)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("frontapp_cache_hit", key=cache_key)
            return cached
        payload = await self._request("GET", path)
        self._cache.set(cache_key, payload)
        return payload

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> JSON:
        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_retryable),
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(multiplier=self._backoff, min=self._backoff, max=30),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                number = attempt.retry_state.attempt_number
                if number > 1:
                    logger.info("frontapp_request_retry", method=method, path=path, attempt=number)
                return await self._send(method, path, params=params, json=json)
        raise FrontappAPIError(f"Frontapp request {method} {path} exhausted retries")  # pragma: no cover

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
    ) -> JSON:
        logger.info("frontapp_request", method=method, path=path)
        request_params = dict(params) if params else None
        try:
            response = await self._client.request(method, path, params=request_params, json=json)
        except httpx.HTTPError as exc:
            logger.warning("frontapp_network_error", method=method, path=path, error=str(exc))
            raise FrontappAPIError(f"Network error calling Frontapp: {exc}", retryable=True) from exc

        status_code = response.status_code
        if status_code == 429:
            delay = self._retry_after(response)
            logger.info("frontapp_rate_limited", method=method, path=path, delay_seconds=delay)
            await self._sleep(delay)
            raise FrontappAPIError(
                "Frontapp rate limit exceeded",
                status_code=status_code,
                retryable=True,
            )
        if status_code >= 400:
            detail = _error_detail(response)
            logger.warning(
                "frontapp_api_error",
                method=method,
                path=path,
                status=status_code,
                detail=detail,
            )
            raise FrontappAPIError(
                f"Frontapp API returned {status_code}: {detail}",
                status_code=status_code,
                payload=_safe_json(response),
                retryable=status_code >= 500,
            )
        if status_code == 204 or not response.content:
            return {}
        body = _safe_json(response)
        if body is None:
            raise FrontappAPIError("Frontapp returned a malformed JSON payload", status_code=status_code)
        if not isinstance(body, dict):
            return {"_results": body}
        return body

    def _retry_after(self, response: httpx.Response) -> float:
        header = response.headers.get("retry-after")
        if header:
            try:
                return max(0.0, float(header))
            except ValueError:
                pass
        return max(0.0, self._backoff)


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


__all__ = ["FrontappAPI", "FrontappAPIError", "FrontappClient"]
