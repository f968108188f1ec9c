from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import perf_counter
from typing import Any

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from .logging import get_logger
from .metrics import MetricsTracker, observe_http_request

REQUEST_CONTEXT_STATE_KEY = "request_context"


def generate_request_id() -> str:
    return str(uuid.uuid4())


@dataclass(slots=True, frozen=True)
class RequestContext:
    """Per-call bundle of identifier, start time and scoped logger.

    Created when a call starts and passed explicitly to every function on the
    call path that needs to log; it is never shared between calls.
    """

    request_id: str
    logger: structlog.stdlib.BoundLogger
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    clock_start: float = field(default_factory=perf_counter)

    @classmethod
    def new(cls, *, request_id: str | None = None, **bindings: Any) -> "RequestContext":
        identifier = request_id or generate_request_id()
        scoped = get_logger(name="request", request_id=identifier, **bindings)
        return cls(request_id=identifier, logger=scoped)

    def elapsed_ms(self) -> float:
        return (perf_counter() - self.clock_start) * 1000.0


def complete_request(
    tracker: MetricsTracker,
    ctx: RequestContext,
    *,
    failed: bool,
    **fields: Any,
) -> float:
    """Record the terminal accounting for one call and return its elapsed milliseconds."""
    elapsed = ctx.elapsed_ms()
    tracker.record_request(elapsed, failed=failed)
    log = ctx.logger.warning if failed else ctx.logger.info
    log("request_completed", duration_ms=round(elapsed, 3), failed=failed, **fields)
    return elapsed


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request id, expose a scoped context and account for every response."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        tracker: MetricsTracker,
        header_name: str = "X-Request-ID",
    ) -> None:
        super().__init__(app)
        self._tracker = tracker
        self._header_name = header_name

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        ctx = RequestContext.new(method=request.method, path=request.url.path)
        setattr(request.state, REQUEST_CONTEXT_STATE_KEY, ctx)

        status_code = 500
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                ctx.logger.exception("request_unhandled_error", error=str(exc))
                response = JSONResponse(
                    {"status": "error", "message": "Internal server error"},
                    status_code=500,
                )
            status_code = response.status_code
            response.headers[self._header_name] = ctx.request_id
            return response
        finally:
            elapsed = complete_request(
                self._tracker,
                ctx,
                failed=status_code >= 400,
                status=status_code,
                client_ip=(request.client.host if request.client else None),
            )
            observe_http_request(method=request.method, status_code=status_code, seconds=elapsed / 1000.0)


__all__ = [
    "REQUEST_CONTEXT_STATE_KEY",
    "RequestContext",
    "RequestContextMiddleware",
    "complete_request",
    "generate_request_id",
]
