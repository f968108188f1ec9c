"""Frontapp MCP: Frontapp conversation tools exposed over MCP and HTTP."""

__version__ = "1.0.0"
