from __future__ import annotations

import asyncio
import math
from collections import deque

from prometheus_client import Counter, Histogram
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .logging import get_logger

logger = get_logger(name=__name__)

HTTP_REQUESTS_TOTAL = Counter(
    "frontapp_mcp_http_requests_total",
    "HTTP requests handled by the API grouped by method and outcome",
    labelnames=("method", "outcome"),
)

HTTP_REQUEST_LATENCY_SECONDS = Histogram(
    "frontapp_mcp_http_request_latency_seconds",
    "End-to-end latency of HTTP requests",
    labelnames=("method",),
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, float("inf")),
)

TOOL_CALLS_TOTAL = Counter(
    "frontapp_mcp_tool_calls_total",
    "Tool invocations grouped by tool and envelope outcome",
    labelnames=("tool", "outcome"),
)

TOOL_LATENCY_SECONDS = Histogram(
    "frontapp_mcp_tool_latency_seconds",
    "Latency distribution for tool invocations",
    labelnames=("tool",),
)


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ResponseTimeStats(_SnapshotModel):
    min: float = 0.0
    max: float = 0.0
    std_dev: float = 0.0
    count: int = 0


class MetricsSnapshot(_SnapshotModel):
    """Point-in-time copy of the tracker state; response times are milliseconds."""

    request_count: int = 0
    error_count: int = 0
    average_response_time: float = 0.0
    response_time_stats: ResponseTimeStats = ResponseTimeStats()

    def to_payload(self) -> dict[str, object]:
        return self.model_dump(by_alias=True)


class MetricsTracker:
    """Process-wide request/error counters plus a bounded window of response times.

    Every mutation is a plain in-memory update with no suspension point, so
    concurrent requests on one event loop cannot interleave inside them.
    """

    def __init__(self, *, window: int = 1000) -> None:
        if window < 1:
            raise ValueError("window must be at least 1")
        self._request_count = 0
        self._error_count = 0
        self._response_times: deque[float] = deque(maxlen=window)

    @property
    def window(self) -> int:
        return self._response_times.maxlen or 0

    def increment_request_count(self) -> None:
        self._request_count += 1

    def increment_error_count(self) -> None:
        self._error_count += 1

    def add_response_time(self, elapsed_ms: float) -> None:
        value = float(elapsed_ms)
        if math.isnan(value) or value < 0:
            value = 0.0
        self._response_times.append(value)

    def record_request(self, elapsed_ms: float, *, failed: bool) -> None:
        # request count first keeps errorCount <= requestCount
        self.add_response_time(elapsed_ms)
        self.increment_request_count()
        if failed:
            self.increment_error_count()

    def snapshot(self) -> MetricsSnapshot:
        samples = tuple(self._response_times)
        count = len(samples)
        if count:
            mean = sum(samples) / count
            variance = sum((sample - mean) ** 2 for sample in samples) / count
            stats = ResponseTimeStats(
                min=min(samples),
                max=max(samples),
                std_dev=math.sqrt(variance),
                count=count,
            )
        else:
            mean = 0.0
            stats = ResponseTimeStats()
        return MetricsSnapshot(
            request_count=self._request_count,
            error_count=self._error_count,
            average_response_time=mean,
            response_time_stats=stats,
        )

    def reset(self) -> None:
        self._request_count = 0
        self._error_count = 0
        self._response_times.clear()


def observe_http_request(*, method: str, status_code: int, seconds: float) -> None:
    outcome = "error" if status_code >= 400 else "success"
    HTTP_REQUESTS_TOTAL.labels(method=method.upper(), outcome=outcome).inc()
    HTTP_REQUEST_LATENCY_SECONDS.labels(method=method.upper()).observe(max(0.0, seconds))


def record_tool_outcome(*, tool: str, outcome: str, seconds: float) -> None:
    TOOL_CALLS_TOTAL.labels(tool=tool, outcome=outcome).inc()
    TOOL_LATENCY_SECONDS.labels(tool=tool).observe(max(0.0, seconds))


async def log_metrics_periodically(tracker: MetricsTracker, interval_seconds: float) -> None:
    interval = max(1.0, float(interval_seconds))
    while True:
        await asyncio.sleep(interval)
        try:
            logger.info("application_metrics", **tracker.snapshot().model_dump())
        except Exception as exc:  # pragma: no cover - background error logging
            logger.exception("application_metrics_failed", error=str(exc))


__all__ = [
    "HTTP_REQUESTS_TOTAL",
    "HTTP_REQUEST_LATENCY_SECONDS",
    "TOOL_CALLS_TOTAL",
    "TOOL_LATENCY_SECONDS",
    "MetricsSnapshot",
    "MetricsTracker",
    "ResponseTimeStats",
    "log_metrics_periodically",
    "observe_http_request",
    "record_tool_outcome",
]
