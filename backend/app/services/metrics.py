"""Prometheus metrics for the HTTP surface and language-model calls."""

import time

from fastapi import Request
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

registry = CollectorRegistry()

http_requests_total = Counter(
    "http_requests_total",
    "HTTP requests handled",
    ["method", "path", "status"],
    registry=registry,
)
http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "path"],
    registry=registry,
)
llm_calls_total = Counter(
    "llm_calls_total",
    "Language model calls by purpose and outcome",
    ["purpose", "outcome"],
    registry=registry,
)
background_write_failures_total = Counter(
    "background_write_failures_total",
    "Post-response persistence writes that failed",
    ["kind"],
    registry=registry,
)


def _route_path(request: Request) -> str:
    # Templated path keeps label cardinality bounded (/record/{record_id})
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


async def metrics_middleware(request: Request, call_next):
    """Count and time every request."""
    start = time.perf_counter()
    response = await call_next(request)
    path = _route_path(request)
    http_request_duration_seconds.labels(request.method, path).observe(time.perf_counter() - start)
    http_requests_total.labels(request.method, path, str(response.status_code)).inc()
    return response


def render_metrics() -> tuple[bytes, str]:
    """Prometheus text exposition and its content type."""
    return generate_latest(registry), CONTENT_TYPE_LATEST
