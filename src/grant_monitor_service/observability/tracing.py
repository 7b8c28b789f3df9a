"""OpenTelemetry tracing for similarity resolution."""

from __future__ import annotations

import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from grant_monitor_core.config.settings import Settings

logger = structlog.get_logger()

# Module-level tracer; set by configure_tracing(), None while disabled.
_tracer: Any = None


def configure_tracing(settings: Settings) -> None:
    """Configure OpenTelemetry tracing based on settings.

    All OTEL imports are deferred so the default configuration never loads them.
    """
    global _tracer

    if settings.otel_exporter == "none":
        _tracer = None
        return

    # Deferred imports, only loaded when tracing is enabled
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider

    resource = Resource.create({"service.name": settings.otel_service_name})
    provider = TracerProvider(resource=resource)

    if settings.otel_exporter == "console":
        from opentelemetry.sdk.trace.export import (
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )

        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    elif settings.otel_exporter == "otlp":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        exporter = OTLPSpanExporter(endpoint=settings.otel_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer("grant-monitor")
    logger.info("tracing_configured", exporter=settings.otel_exporter)


def disable_tracing() -> None:
    """Reset the module tracer (used by tests and shutdown)."""
    global _tracer
    _tracer = None


def get_tracer() -> Any:  # noqa: ANN401
    """Return the configured tracer, or None when tracing is disabled."""
    return _tracer


@asynccontextmanager
async def trace_similarity_request(
    cluster_id: str, threshold: float, limit: int
) -> AsyncGenerator[Any, None]:
    """Root span for one resolution. Yields the span (or None if disabled)."""
    if _tracer is None:
        yield None
        return

    with _tracer.start_as_current_span("similarity.resolve") as span:
        span.set_attribute("similarity.cluster_id", cluster_id)
        span.set_attribute("similarity.threshold", threshold)
        span.set_attribute("similarity.limit", limit)
        yield span


@asynccontextmanager
async def trace_strategy(strategy: str) -> AsyncGenerator[Any, None]:
    """Span around one ranking tier; records status and duration."""
    if _tracer is None:
        yield None
        return

    with _tracer.start_as_current_span(f"similarity.strategy.{strategy}") as span:
        span.set_attribute("strategy.name", strategy)
        start = time.monotonic()
        try:
            yield span
            span.set_attribute("strategy.status", "ok")
        except Exception as exc:
            span.set_attribute("strategy.status", "error")
            span.set_attribute("strategy.error", str(exc))
            raise
        finally:
            span.set_attribute(
                "strategy.duration_seconds", round(time.monotonic() - start, 3)
            )
