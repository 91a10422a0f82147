from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

# No-op until configure_tracing installs a provider
tracer = trace.get_tracer("folio.store")

_configured = False


def parse_otlp_headers(raw: str | None) -> dict[str, str] | None:
    """Parse ``key=value,key=value`` OTLP header strings."""
    if not raw:
        return None
    result: dict[str, str] = {}
    for pair in (item.strip() for item in raw.split(",")):
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            continue
        result[key.strip()] = value.strip()
    return result or None


def configure_tracing(
    app, engine, service_name: str, endpoint: str | None, headers: str | None
) -> bool:
    """Install an OTLP exporter and instrument FastAPI and SQLAlchemy.

    Returns True when tracing was configured by this call.
    """
    global _configured
    if _configured or not endpoint:
        return False

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(
        BatchSpanProcessor(
            OTLPSpanExporter(endpoint=endpoint, headers=parse_otlp_headers(headers))
        )
    )
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app)
    SQLAlchemyInstrumentor().instrument(engine=engine)
    _configured = True
    return True
