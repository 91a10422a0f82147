from __future__ import annotations

import logging
import time
from logging.config import dictConfig

from asgi_correlation_id.context import correlation_id
from pythonjsonlogger import jsonlogger
from starlette.requests import Request

api_logger = logging.getLogger("folio.api")


class CorrelationIdFilter(logging.Filter):
    """Attach the current request correlation ID to each log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = correlation_id.get() or "unknown"
        return True


def configure_logging(level: str = "INFO") -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"with_correlation": {"()": CorrelationIdFilter}},
            "formatters": {
                "json": {
                    "()": jsonlogger.JsonFormatter,
                    "fmt": (
                        "%(asctime)s %(levelname)s %(name)s "
                        "%(message)s %(correlation_id)s"
                    ),
                }
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "formatter": "json",
                    "filters": ["with_correlation"],
                }
            },
            "root": {"handlers": ["default"], "level": level},
            "loggers": {
                "uvicorn.error": {
                    "handlers": ["default"],
                    "level": level,
                    "propagate": False,
                },
                "uvicorn.access": {
                    "handlers": ["default"],
                    "level": level,
                    "propagate": False,
                },
            },
        }
    )


class ApiContext:
    """Per-request bookkeeping for the api_success / api_error log records."""

    def __init__(self, request: Request) -> None:
        self.method = request.method
        self.path = request.url.path
        self.started_at = time.perf_counter()

    @property
    def duration_ms(self) -> float:
        return round((time.perf_counter() - self.started_at) * 1000, 2)

    def log_success(self, status: int = 200) -> None:
        api_logger.info(
            "api_success",
            extra={
                "method": self.method,
                "path": self.path,
                "status": status,
                "duration_ms": self.duration_ms,
            },
        )

    def log_error(self, code: str, status: int, error: BaseException) -> None:
        api_logger.error(
            "api_error",
            exc_info=error,
            extra={
                "method": self.method,
                "path": self.path,
                "code": code,
                "status": status,
                "duration_ms": self.duration_ms,
            },
        )
