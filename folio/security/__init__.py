"""Security façade for rate limiting and headers middleware."""

from folio.middleware.security import SecurityHeadersMiddleware  # noqa: F401

from .rate_limit import POSTS_RATE_LIMIT, SEARCH_RATE_LIMIT, limiter  # noqa: F401

__all__ = [
    "POSTS_RATE_LIMIT",
    "SEARCH_RATE_LIMIT",
    "SecurityHeadersMiddleware",
    "limiter",
]
