from __future__ import annotations

import math

import pytest
from prometheus_client import REGISTRY

from frontapp_mcp.core.metrics import MetricsTracker, observe_http_request, record_tool_outcome


def test_snapshot_of_empty_tracker() -> None:
    payload = MetricsTracker().snapshot().to_payload()

    assert payload == {
        "requestCount": 0,
        "errorCount": 0,
        "averageResponseTime": 0.0,
        "responseTimeStats": {"min": 0.0, "max": 0.0, "stdDev": 0.0, "count": 0},
    }


def test_snapshot_statistics() -> None:
    tracker = MetricsTracker()
    for value in (10, 20, 30):
        tracker.record_request(value, failed=False)
    tracker.record_request(40, failed=True)

    snapshot = tracker.snapshot()

    assert snapshot.request_count == 4
    assert snapshot.error_count == 1
    assert snapshot.average_response_time == pytest.approx(25.0)
    assert snapshot.response_time_stats.min == 10
    assert snapshot.response_time_stats.max == 40
    assert snapshot.response_time_stats.std_dev == pytest.approx(math.sqrt(125.0))
    assert snapshot.response_time_stats.count == 4


def test_response_time_window_is_bounded() -> None:
    tracker = MetricsTracker(window=3)
    for value in range(10):
        tracker.add_response_time(value)

    stats = tracker.snapshot().response_time_stats
    assert stats.count == 3
    assert stats.min == 7


def test_invalid_samples_are_clamped() -> None:
    tracker = MetricsTracker()
    tracker.add_response_time(-5)
    tracker.add_response_time(float("nan"))

    assert tracker.snapshot().response_time_stats.max == 0.0


def test_snapshot_is_a_copy() -> None:
    tracker = MetricsTracker()
    before = tracker.snapshot()
    tracker.record_request(5, failed=True)

    assert before.request_count == 0
    with pytest.raises(Exception):
        before.request_count = 99  # type: ignore[misc]


def test_counters_are_monotonic_and_errors_bounded() -> None:
    tracker = MetricsTracker()
    previous = tracker.snapshot()
    for index in range(50):
        tracker.record_request(index, failed=index % 3 == 0)
        current = tracker.snapshot()
        assert current.request_count >= previous.request_count
        assert current.error_count >= previous.error_count
        assert current.error_count <= current.request_count
        previous = current


def test_reset_clears_state() -> None:
    tracker = MetricsTracker()
    tracker.record_request(5, failed=True)
    tracker.reset()

    assert tracker.snapshot().request_count == 0


def test_window_must_be_positive() -> None:
    with pytest.raises(ValueError):
        MetricsTracker(window=0)


def test_prometheus_series_are_recorded() -> None:
    before = REGISTRY.get_sample_value(
        "frontapp_mcp_tool_calls_total", {"tool": "metrics_probe", "outcome": "success"}
    ) or 0.0
    record_tool_outcome(tool="metrics_probe", outcome="success", seconds=0.01)
    observe_http_request(method="get", status_code=503, seconds=0.2)

    after = REGISTRY.get_sample_value("frontapp_mcp_tool_calls_total", {"tool": "metrics_probe", "outcome": "success"})
    assert after == before + 1
    assert REGISTRY.get_sample_value("frontapp_mcp_http_requests_total", {"method": "GET", "outcome": "error"}) >= 1
