"""Serve the tool registry over the Model Context Protocol on stdio.

Each ``call_tool`` request gets its own :class:`RequestContext` and is
accounted in the same :class:`MetricsTracker` shape as HTTP requests; a call
counts as failed when it produces an error envelope, which is also flagged
with ``isError`` on the result. Logs go to stderr since stdout carries the
protocol.
"""

from __future__ import annotations

import sys
from typing import Any

from dotenv import load_dotenv
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from .. import __version__
from ..clients.frontapp import FrontappAPI, FrontappClient
from ..core.config import ConfigurationError, get_settings, validate_settings
from ..core.context import RequestContext, complete_request
from ..core.logging import configure_logging, get_logger
from ..core.metrics import MetricsTracker
from ..tools.registry import ToolRegistry, build_default_registry

SERVER_NAME = "frontapp-mcp-server"

logger = get_logger(name=__name__)


def list_tools(registry: ToolRegistry) -> list[Tool]:
    return [
        Tool(
            name=descriptor.name,
            description=descriptor.description,
            inputSchema=dict(descriptor.input_schema),
        )
        for descriptor in registry.descriptors()
    ]


async def call_tool(
    name: str,
    arguments: Any,
    *,
    registry: ToolRegistry,
    client: FrontappAPI,
    tracker: MetricsTracker,
) -> CallToolResult:
    ctx = RequestContext.new(transport="mcp", tool=name)
    failed = True
    try:
        response = await registry.dispatch(name, arguments, client=client, ctx=ctx)
        failed = response.is_error
        return CallToolResult(
            content=[TextContent(type="text", text=response.to_json())],
            isError=response.is_error,
        )
    finally:
        complete_request(tracker, ctx, failed=failed)


def build_mcp_server(
    *,
    registry: ToolRegistry,
    client: FrontappAPI,
    tracker: MetricsTracker,
) -> Server:
    app = Server(SERVER_NAME, version=__version__)

    @app.list_tools()
    async def _list_tools() -> list[Tool]:
        return list_tools(registry)

    # arguments are checked by each handler so bad input still yields an envelope
    @app.call_tool(validate_input=False)
    async def _call_tool(name: str, arguments: dict) -> CallToolResult:
        return await call_tool(name, arguments, registry=registry, client=client, tracker=tracker)

    return app


async def main() -> None:
    load_dotenv()
    settings = get_settings()
    configure_logging(settings.observability.log_level, stream=sys.stderr)
    try:
        warnings = validate_settings(settings)
    except ConfigurationError as exc:
        logger.error("mcp_server_config_invalid", error=str(exc))
        raise SystemExit(1) from exc
    for warning in warnings:
        logger.warning("configuration_warning", detail=warning)

    registry = build_default_registry()
    tracker = MetricsTracker(window=settings.observability.response_time_window)
    client = FrontappClient(settings.frontapp)
    app = build_mcp_server(registry=registry, client=client, tracker=tracker)
    logger.info("mcp_server_starting", name=SERVER_NAME, version=__version__, tools=len(registry))
    try:
        async with stdio_server() as (read_stream, write_stream):
            await app.run(read_stream, write_stream, app.create_initialization_options())
    finally:
        await client.aclose()
        logger.info("mcp_server_stopped", **tracker.snapshot().model_dump())


__all__ = ["SERVER_NAME", "build_mcp_server", "call_tool", "list_tools", "main"]
