"""
FastAPI Application - folio blog API
"""

from __future__ import annotations

import logging
import secrets
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from folio.config import settings
from folio.database import Base, engine, get_db
from folio.models import post as _post_models  # noqa: F401 - needed for metadata
from folio.observability.logging import configure_logging
from folio.observability.metrics import API_ERRORS, MetricsMiddleware, metrics_response
from folio.observability.tracing import configure_tracing
from folio.routers.posts import router as posts_router
from folio.routers.search import router as search_router
from folio.schemas.api import api_error, error_code_for
from folio.security import SecurityHeadersMiddleware, limiter

logger = logging.getLogger(__name__)


# ==========================================
# Database Initialization
# ==========================================
def init_database() -> None:
    Base.metadata.create_all(bind=engine)


# ==========================================
# Application Lifespan
# ==========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting folio", extra={"environment": settings.environment})
    if settings.auto_create_tables:
        init_database()
    yield
    logger.info("Shutting down folio")


configure_logging(settings.log_level.upper())


# ==========================================
# Exception handlers
# ==========================================
def error_response(
    code: str, message: str, status_code: int, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Render the error envelope and count it by code."""
    API_ERRORS.labels(code).inc()
    return JSONResponse(api_error(code, message), status_code=status_code, headers=headers)


async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return error_response(
        "RATE_LIMITED",
        "Rate limit exceeded. Please retry shortly.",
        status.HTTP_429_TOO_MANY_REQUESTS,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTPException (including ApiError) as the JSON envelope."""
    return error_response(
        error_code_for(exc),
        str(exc.detail),
        exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    issues = exc.errors()
    message = "Invalid request."
    if issues:
        loc = ".".join(str(part) for part in issues[0].get("loc", ()) if part != "query")
        message = f"{loc}: {issues[0]['msg']}" if loc else issues[0]["msg"]
    return error_response("INVALID_QUERY", message, status.HTTP_400_BAD_REQUEST)


# ==========================================
# FastAPI Application
# ==========================================
app = FastAPI(
    title="folio",
    description="Post search and series navigation API",
    version="1.0.0",
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    openapi_url=None if settings.is_production else "/openapi.json",
)
# Order: compression → rate-limit/metrics → security → correlation id
app.add_middleware(GZipMiddleware, minimum_size=1000)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(MetricsMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(CorrelationIdMiddleware, header_name="X-Request-ID")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
if settings.allowed_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["Accept", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
    )
# Optional tracing
if settings.enable_tracing and settings.otlp_endpoint:
    configure_tracing(
        app,
        engine,
        settings.service_name,
        settings.otlp_endpoint,
        settings.otlp_headers,
    )


# ==========================================
# Health & readiness
# ==========================================
@app.get("/healthz", tags=["system"], summary="Health check", response_model=dict)
def health_check(db: Session = Depends(get_db)) -> dict:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="unhealthy"
        )
    if settings.is_production:
        return {"status": "healthy"}
    return {"status": "healthy", "database": "connected", "version": app.version}


@app.get("/readyz", tags=["system"], summary="Readiness check", response_model=dict)
def readiness_check(db: Session = Depends(get_db)) -> dict:
    try:
        db.execute(text("SELECT 1 FROM posts LIMIT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Readiness check failed: %s", exc.__class__.__name__)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="not ready"
        )
    return {"status": "ready"}


# ==========================================
# Metrics (Protected with HTTP Basic Auth)
# ==========================================
security = HTTPBasic(auto_error=False)


def verify_metrics_auth(
    credentials: HTTPBasicCredentials | None = Depends(security),
) -> None:
    """Verify HTTP Basic Auth credentials when a metrics password is configured."""
    if not settings.metrics_password:
        return

    if credentials is None or not (
        secrets.compare_digest(credentials.username, settings.metrics_username)
        and secrets.compare_digest(credentials.password, settings.metrics_password)
    ):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )


@app.get("/metrics", include_in_schema=False)
def metrics(_: None = Depends(verify_metrics_auth)):
    """Prometheus metrics endpoint."""
    return metrics_response()


# ==========================================
# Routers
# ==========================================
app.include_router(search_router)
app.include_router(posts_router)
