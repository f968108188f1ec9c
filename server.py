"""Frontapp MCP HTTP server entry point."""

import os
import sys

import uvicorn
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from frontapp_mcp.core.config import ConfigurationError, get_settings, validate_settings  # noqa: E402

if __name__ == "__main__":
    settings = get_settings()
    try:
        validate_settings(settings)
    except ConfigurationError as exc:
        print(f"Failed to start Frontapp MCP server: {exc}", file=sys.stderr)
        sys.exit(1)

    host = os.getenv("API_HOST", settings.server.host)
    port = int(os.getenv("API_PORT", settings.server.port))
    debug = os.getenv("DEBUG", "false").lower() == "true"

    print(f"Starting Frontapp MCP API server on {host}:{port}")
    uvicorn.run("frontapp_mcp.main:app", host=host, port=port, reload=debug)
