from __future__ import annotations

import json

import pytest

from frontapp_mcp.tools.envelope import ErrorCode, ToolResponse, error, success


def test_success_envelope_carries_payload_only() -> None:
    response = success({"id": "cnv_1"})

    assert response.status == "success"
    assert response.is_error is False
    assert response.to_dict() == {"status": "success", "data": {"id": "cnv_1"}}


def test_error_envelope_defaults_to_internal_code() -> None:
    response = error("boom")

    assert response.is_error is True
    assert response.code is ErrorCode.INTERNAL
    assert response.to_dict() == {"status": "error", "message": "boom", "code": "internal_error"}


def test_error_envelope_accepts_code_value() -> None:
    response = ToolResponse.error("conversation_id is required", code=ErrorCode.VALIDATION)

    assert json.loads(response.to_json()) == {
        "status": "error",
        "message": "conversation_id is required",
        "code": "validation_error",
    }


def test_envelope_rejects_mixed_variants() -> None:
    with pytest.raises(ValueError):
        ToolResponse(status="success", data={}, message="nope")
    with pytest.raises(ValueError):
        ToolResponse(status="error", data={"x": 1}, message="nope")
    with pytest.raises(ValueError):
        ToolResponse(status="pending")  # type: ignore[arg-type]


def test_envelope_is_immutable() -> None:
    response = success({"id": 1})
    with pytest.raises(AttributeError):
        response.status = "error"  # type: ignore[misc]
