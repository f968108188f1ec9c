from __future__ import annotations

import hmac

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader

from ..dependencies import get_app_settings
from .config import Settings

API_KEY_HEADER = "X-API-Key"

api_key_scheme = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


class InvalidAPIKeyError(HTTPException):
    def __init__(self) -> None:
        super().__init__(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


async def require_api_key(
    api_key: str | None = Depends(api_key_scheme),
    settings: Settings = Depends(get_app_settings),
) -> None:
    """Reject the request unless the configured API key is presented.

    No key configured means the tools surface is open.
    """
    expected = settings.api.api_key.get_secret_value() if settings.api.api_key is not None else ""
    if not expected:
        return
    if not api_key or not hmac.compare_digest(api_key.encode(), expected.encode()):
        raise InvalidAPIKeyError()


__all__ = ["API_KEY_HEADER", "InvalidAPIKeyError", "api_key_scheme", "require_api_key"]
