"""Validate-then-execute contract shared by every tool.

A handler is any object satisfying :class:`ToolHandler`; :func:`handle_with`
is the one place that runs the two phases and turns every failure into an
error envelope.
"""

from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

from frontapp_mcp.core.metrics import record_tool_outcome

from .envelope import ErrorCode, ToolResponse
from .exceptions import ExternalCallError, ToolValidationError
from .validation import ensure_arguments

if TYPE_CHECKING:
    from frontapp_mcp.clients.frontapp import FrontappAPI
    from frontapp_mcp.core.context import RequestContext


@runtime_checkable
class ToolHandler(Protocol):
    name: str
    description: str
    failure_message: str
    input_schema: Mapping[str, Any]

    def validate_args(self, raw: Mapping[str, Any]) -> Any: ...

    async def execute(self, args: Any, *, client: "FrontappAPI", ctx: "RequestContext") -> ToolResponse: ...


@dataclass(slots=True, frozen=True)
class ToolDescriptor:
    name: str
    description: str
    input_schema: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": dict(self.input_schema),
        }


def describe(handler: ToolHandler) -> ToolDescriptor:
    return ToolDescriptor(
        name=handler.name,
        description=handler.description,
        input_schema=handler.input_schema,
    )


def object_schema(properties: Mapping[str, Any], *, required: tuple[str, ...] = ()) -> dict[str, Any]:
    schema: dict[str, Any] = {"type": "object", "properties": dict(properties)}
    if required:
        schema["required"] = list(required)
    return schema


async def handle_with(
    handler: ToolHandler,
    raw: Any,
    *,
    client: "FrontappAPI",
    ctx: "RequestContext",
) -> ToolResponse:
    """Run ``handler`` against ``raw`` arguments and always return an envelope."""
    started = perf_counter()
    log = ctx.logger.bind(tool=handler.name)
    response = await _run(handler, raw, client=client, ctx=ctx, log=log)
    outcome = response.code.value if response.is_error and response.code else "success"
    record_tool_outcome(tool=handler.name, outcome=outcome, seconds=perf_counter() - started)
    return response


async def _run(handler: ToolHandler, raw: Any, *, client: "FrontappAPI", ctx: "RequestContext", log) -> ToolResponse:
    try:
        args = handler.validate_args(ensure_arguments(raw))
    except ToolValidationError as exc:
        log.info("tool_validation_failed", error=str(exc))
        return ToolResponse.error(str(exc), code=ErrorCode.VALIDATION)
    except Exception as exc:
        log.exception("tool_validation_crashed", error=str(exc))
        return ToolResponse.error(f"{handler.failure_message}: {exc}", code=ErrorCode.INTERNAL)

    try:
        response = await handler.execute(args, client=client, ctx=ctx)
    except ExternalCallError as exc:
        log.warning(
            "tool_external_call_failed",
            error=str(exc),
            status_code=exc.status_code,
        )
        return ToolResponse.error(f"{handler.failure_message}: {exc}", code=ErrorCode.EXTERNAL)
    except Exception as exc:
        log.exception("tool_execution_failed", error=str(exc))
        return ToolResponse.error(f"{handler.failure_message}: {exc}", code=ErrorCode.INTERNAL)

    if not isinstance(response, ToolResponse):
        log.error("tool_invalid_response", returned=type(response).__name__)
        return ToolResponse.error(
            f"{handler.failure_message}: handler returned {type(response).__name__}",
            code=ErrorCode.INTERNAL,
        )
    log.info("tool_completed", status=response.status)
    return response


__all__ = ["ToolDescriptor", "ToolHandler", "describe", "handle_with", "object_schema"]
