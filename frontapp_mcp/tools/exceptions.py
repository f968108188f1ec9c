from __future__ import annotations

from typing import Any


class ToolError(RuntimeError):
    """Base class for tooling-related failures."""


class ToolValidationError(ToolError, ValueError):
    """Raised when caller-supplied tool arguments fail a structural or type check."""


class ExternalCallError(ToolError):
    """Raised when a call against the external conversation API fails."""

    def __init__(self, message: str, *, status_code: int | None = None, payload: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ToolNotFoundError(ToolError):
    """Raised when a requested tool cannot be resolved."""


__all__ = [
    "ExternalCallError",
    "ToolError",
    "ToolNotFoundError",
    "ToolValidationError",
]
