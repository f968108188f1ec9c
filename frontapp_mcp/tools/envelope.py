"""Uniform success/error envelope returned by every tool call.

Wire shape::

    {"status": "success", "data": <payload>}
    {"status": "error", "message": "<text>", "code": "<ErrorCode>"}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal


class ErrorCode(str, Enum):
    VALIDATION = "validation_error"
    EXTERNAL = "external_error"
    INTERNAL = "internal_error"
    NOT_FOUND = "tool_not_found"


@dataclass(slots=True, frozen=True)
class ToolResponse:
    status: Literal["success", "error"]
    data: Any = None
    message: str | None = None
    code: ErrorCode | None = None

    def __post_init__(self) -> None:
        if self.status == "success":
            if self.message is not None or self.code is not None:
                raise ValueError("success envelopes carry no error message")
        elif self.status == "error":
            if not isinstance(self.message, str) or self.data is not None:
                raise ValueError("error envelopes carry a message and no payload")
            if self.code is None:
                object.__setattr__(self, "code", ErrorCode.INTERNAL)
        else:
            raise ValueError(f"unknown envelope status: {self.status!r}")

    @classmethod
    def success(cls, payload: Any) -> "ToolResponse":
        return cls(status="success", data=payload)

    @classmethod
    def error(cls, message: str, *, code: ErrorCode = ErrorCode.INTERNAL) -> "ToolResponse":
        return cls(status="error", message=str(message), code=ErrorCode(code))

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    def to_dict(self) -> dict[str, Any]:
        if self.is_error:
            return {"status": "error", "message": self.message, "code": ErrorCode(self.code).value}
        return {"status": "success", "data": self.data}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, default=str)


success = ToolResponse.success
error = ToolResponse.error

__all__ = ["ErrorCode", "ToolResponse", "error", "success"]
