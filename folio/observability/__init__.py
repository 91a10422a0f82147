"""Logging, metrics and tracing wiring."""

from __future__ import annotations

from folio.observability.logging import ApiContext, configure_logging
from folio.observability.metrics import MetricsMiddleware, metrics_response

__all__ = [
    "ApiContext",
    "MetricsMiddleware",
    "configure_logging",
    "metrics_response",
]
