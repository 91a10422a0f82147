"""Prometheus instruments for HTTP traffic, API errors and Store queries."""

from __future__ import annotations

import time
from collections.abc import Callable

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    Counter,
    Histogram,
    generate_latest,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

REQUEST_COUNTER = Counter(
    "folio_request_total",
    "Total HTTP requests",
    ["method", "route", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "folio_request_duration_seconds",
    "HTTP request latency",
    ["method", "route"],
)
API_ERRORS = Counter(
    "folio_api_errors_total",
    "Error envelopes returned by the API, by error code",
    ["code"],
)
STORE_QUERY_LATENCY = Histogram(
    "folio_store_query_duration_seconds",
    "Store query latency",
    ["operation", "table"],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)
STORE_ERRORS = Counter(
    "folio_store_errors_total",
    "Store queries that raised, by SQLSTATE-like code",
    ["operation", "table", "code"],
)

UNMATCHED_ROUTE = "unmatched"
SKIP_PATHS = frozenset({"/metrics"})


def _route_label(request: Request) -> str:
    # Route templates only; raw paths would make one series per slug
    route = request.scope.get("route")
    return getattr(route, "path", UNMATCHED_ROUTE)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Count and time every request by method and route template."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in SKIP_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        route = _route_label(request)
        REQUEST_COUNTER.labels(request.method, route, response.status_code).inc()
        REQUEST_LATENCY.labels(request.method, route).observe(
            time.perf_counter() - start
        )
        return response


def metrics_response() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
