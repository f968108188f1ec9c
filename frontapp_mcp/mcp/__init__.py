"""MCP stdio transport for the Frontapp tools."""

from .server import SERVER_NAME, build_mcp_server, call_tool, list_tools

__all__ = ["SERVER_NAME", "build_mcp_server", "call_tool", "list_tools"]
