from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..core.config import Settings
from ..core.context import RequestContext
from ..core.metrics import MetricsTracker
from ..dependencies import get_app_settings, get_metrics_tracker, get_request_context

router = APIRouter(prefix="/health", tags=["health"])

LOGS_PLACEHOLDER = (
    "Logs endpoint is a placeholder. Log lines are emitted as JSON to the process output stream."
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _error(message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> JSONResponse:
    return JSONResponse({"status": "error", "message": message}, status_code=status_code)


def build_health_payload(settings: Settings, *, started_at: float | None) -> dict[str, Any]:
    uptime = time.monotonic() - started_at if started_at is not None else 0.0
    return {
        "status": "ok",
        "timestamp": _now_iso(),
        "version": settings.version,
        "environment": settings.environment,
        "uptime_seconds": round(max(0.0, uptime), 3),
    }


@router.get("")
async def healthcheck(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    ctx: RequestContext = Depends(get_request_context),
) -> Any:
    try:
        return build_health_payload(settings, started_at=getattr(request.app.state, "started_at", None))
    except Exception as exc:
        ctx.logger.exception("health_check_failed", error=str(exc))
        return _error("Health check failed")


@router.get("/metrics")
async def metrics_snapshot(
    tracker: MetricsTracker = Depends(get_metrics_tracker),
    ctx: RequestContext = Depends(get_request_context),
) -> Any:
    try:
        return tracker.snapshot().to_payload()
    except Exception as exc:
        ctx.logger.exception("metrics_snapshot_failed", error=str(exc))
        return _error("Failed to get metrics")


@router.get("/logs")
async def recent_logs(
    settings: Settings = Depends(get_app_settings),
    ctx: RequestContext = Depends(get_request_context),
) -> Any:
    if settings.is_production:
        ctx.logger.info("logs_endpoint_blocked")
        return _error("Endpoint disabled in production", status.HTTP_403_FORBIDDEN)
    return {"status": "ok", "message": LOGS_PLACEHOLDER}


__all__ = ["build_health_payload", "router"]
