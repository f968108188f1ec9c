from __future__ import annotations

import uuid

import httpx
import pytest
from fastapi.testclient import TestClient

from frontapp_mcp.core.metrics import MetricsTracker
from frontapp_mcp.main import create_app
from tests.helpers.stubs import StubFrontappClient, make_settings


class BrokenTracker(MetricsTracker):
    def snapshot(self):  # type: ignore[override]
        raise RuntimeError("snapshot unavailable")


def test_health_reports_liveness(api_client: TestClient) -> None:
    response = api_client.get("/health")

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["environment"] == "test"
    assert payload["timestamp"].endswith("Z")
    assert payload["uptime_seconds"] >= 0


def test_every_response_carries_a_request_id(api_client: TestClient) -> None:
    first = api_client.get("/health")
    second = api_client.get("/health/missing")

    first_id = first.headers["X-Request-ID"]
    assert uuid.UUID(first_id)
    assert second.status_code == 404
    assert second.headers["X-Request-ID"] != first_id
    assert second.json() == {"status": "error", "message": "Not Found"}


def test_metrics_after_tool_calls(api_client: TestClient, stub_client: StubFrontappClient) -> None:
    for _ in range(5):
        ok = api_client.post("/tools/archive_conversation", json={"arguments": {"conversation_id": "cnv_1"}})
        assert ok.status_code == 200
    for _ in range(2):
        failed = api_client.post("/tools/archive_conversation", json={"arguments": {}})
        assert failed.status_code == 400

    response = api_client.get("/health/metrics")

    assert response.status_code == 200
    payload = response.json()
    assert payload["requestCount"] >= 7
    assert payload["errorCount"] >= 2
    assert payload["errorCount"] <= payload["requestCount"]
    assert payload["responseTimeStats"]["count"] >= 7
    assert set(payload) == {"requestCount", "errorCount", "averageResponseTime", "responseTimeStats"}
    assert len(stub_client.called("archive_conversation")) == 5


def test_metrics_failure_is_reported_as_500() -> None:
    app = create_app(make_settings(), client=StubFrontappClient(), tracker=BrokenTracker())

    with TestClient(app) as client:
        response = client.get("/health/metrics")

    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Failed to get metrics"}
    assert "X-Request-ID" in response.headers


def test_logs_endpoint_placeholder_outside_production(api_client: TestClient) -> None:
    response = api_client.get("/health/logs")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_logs_endpoint_disabled_in_production() -> None:
    app = create_app(make_settings(environment="production"), client=StubFrontappClient())

    with TestClient(app) as client:
        response = client.get("/health/logs")

    assert response.status_code == 403
    assert response.json() == {"status": "error", "message": "Endpoint disabled in production"}


def test_unhandled_route_error_becomes_structured_500() -> None:
    app = create_app(make_settings(), client=StubFrontappClient())

    @app.get("/explode")
    async def explode() -> None:
        raise RuntimeError("kaboom")

    with TestClient(app) as client:
        response = client.get("/explode")

    assert response.status_code == 500
    assert response.json() == {"status": "error", "message": "Internal server error"}
    assert response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_prometheus_endpoint_exposes_series() -> None:
    app = create_app(make_settings(), client=StubFrontappClient())
    transport = httpx.ASGITransport(app=app)
    try:
        async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
            await client.get("/health")
            response = await client.get("/metrics")
    finally:
        await transport.aclose()

    assert response.status_code == 200
    assert response.headers.get("content-type", "").startswith("text/plain")
    assert "frontapp_mcp_http_requests_total" in response.text
