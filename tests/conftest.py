from __future__ import annotations

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from frontapp_mcp.core.config import Settings
from frontapp_mcp.core.metrics import MetricsTracker
from frontapp_mcp.main import create_app
from tests.helpers.stubs import StubFrontappClient, make_settings


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def stub_client() -> StubFrontappClient:
    return StubFrontappClient()


@pytest.fixture
def tracker() -> MetricsTracker:
    return MetricsTracker(window=100)


@pytest.fixture
def api_client(settings: Settings, stub_client: StubFrontappClient, tracker: MetricsTracker) -> Iterator[TestClient]:
    app = create_app(settings, client=stub_client, tracker=tracker)
    with TestClient(app) as client:
        yield client
