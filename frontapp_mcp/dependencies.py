from __future__ import annotations

from fastapi import Request

from .clients.frontapp import FrontappAPI
from .core.config import Settings
from .core.context import REQUEST_CONTEXT_STATE_KEY, RequestContext
from .core.metrics import MetricsTracker
from .tools.registry import ToolRegistry


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_metrics_tracker(request: Request) -> MetricsTracker:
    return request.app.state.metrics_tracker


def get_tool_registry(request: Request) -> ToolRegistry:
    return request.app.state.tool_registry


def get_frontapp_client(request: Request) -> FrontappAPI:
    return request.app.state.frontapp_client


def get_request_context(request: Request) -> RequestContext:
    ctx = getattr(request.state, REQUEST_CONTEXT_STATE_KEY, None)
    if ctx is None:
        # reached without the middleware (e.g. a bare router under test)
        ctx = RequestContext.new(method=request.method, path=request.url.path)
        setattr(request.state, REQUEST_CONTEXT_STATE_KEY, ctx)
    return ctx


__all__ = [
    "get_app_settings",
    "get_frontapp_client",
    "get_metrics_tracker",
    "get_request_context",
    "get_tool_registry",
]
