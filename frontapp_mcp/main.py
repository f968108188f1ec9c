from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from .api.health import router as health_router
from .api.tools import router as tools_router
from .clients.frontapp import FrontappAPI, FrontappClient
from .core.config import ConfigurationError, Settings, get_settings, validate_settings
from .core.context import RequestContextMiddleware
from .core.logging import configure_logging, get_logger
from .core.metrics import MetricsTracker, log_metrics_periodically
from .tools.registry import ToolRegistry, build_default_registry

logger = get_logger(name=__name__)


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        {"status": "error", "message": str(exc.detail)},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        {"status": "error", "message": "Invalid request body", "code": "validation_error"},
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def create_app(
    settings: Settings | None = None,
    *,
    client: FrontappAPI | None = None,
    tracker: MetricsTracker | None = None,
    registry: ToolRegistry | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.observability.log_level)

    tracker = tracker or MetricsTracker(window=settings.observability.response_time_window)
    registry = registry or build_default_registry()
    owns_client = client is None
    if client is None:
        client = FrontappClient(settings.frontapp)

    @asynccontextmanager
    async def app_lifespan(app: FastAPI):
        app.state.started_at = time.monotonic()
        interval = settings.observability.metrics_log_interval_seconds
        task: asyncio.Task[None] | None = None
        if interval > 0:
            task = asyncio.create_task(log_metrics_periodically(tracker, interval))
        logger.info(
            "application_started",
            environment=settings.environment,
            version=settings.version,
            tools=len(registry),
        )
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                with suppress(asyncio.CancelledError):  # pragma: no cover - managed shutdown
                    await task
            if owns_client and isinstance(client, FrontappClient):
                await client.aclose()
            logger.info("application_stopped")

    app = FastAPI(title="Frontapp MCP Server", version=settings.version, lifespan=app_lifespan)
    app.state.settings = settings
    app.state.metrics_tracker = tracker
    app.state.tool_registry = registry
    app.state.frontapp_client = client
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.server.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        RequestContextMiddleware,
        tracker=tracker,
        header_name=settings.observability.request_id_header,
    )
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.include_router(health_router)
    app.include_router(tools_router)

    if settings.observability.prometheus_enabled:

        @app.get("/metrics", tags=["observability"])
        async def metrics() -> Response:
            return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for warning in _startup_warnings(settings):
        logger.warning("configuration_warning", detail=warning)
    return app


def _startup_warnings(settings: Settings) -> list[str]:
    try:
        return validate_settings(settings)
    except ConfigurationError as exc:
        # server.py refuses to start; an app built directly still serves health
        return [str(exc)]


app = create_app()

__all__ = ["app", "create_app"]
