"""Setup script for the Frontapp MCP package."""

from setuptools import setup, find_packages

setup(
    name="frontapp-mcp",
    version="1.0.0",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "httpx>=0.27",
        "tenacity>=8.2",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "structlog>=24.1",
        "prometheus-client>=0.19",
        "python-dotenv>=1.0",
        "mcp>=1.20,<2",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    description="Frontapp MCP - tool handlers, request context and health endpoints for the Frontapp API",
    author="Frontapp MCP Team",
)
