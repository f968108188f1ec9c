"""Frontapp tools exposed over HTTP and MCP."""

from .base import ToolDescriptor, ToolHandler, describe, handle_with
from .envelope import ErrorCode, ToolResponse
from .exceptions import ExternalCallError, ToolError, ToolNotFoundError, ToolValidationError
from .registry import ToolRegistry, build_default_registry

__all__ = [
    "ErrorCode",
    "ExternalCallError",
    "ToolDescriptor",
    "ToolError",
    "ToolHandler",
    "ToolNotFoundError",
    "ToolRegistry",
    "ToolResponse",
    "ToolValidationError",
    "build_default_registry",
    "describe",
    "handle_with",
]
