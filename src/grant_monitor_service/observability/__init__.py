"""Observability: structured logging and tracing."""

from grant_monitor_service.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
)
from grant_monitor_service.observability.tracing import (
    configure_tracing,
    disable_tracing,
    get_tracer,
    trace_similarity_request,
    trace_strategy,
)

__all__ = [
    "bind_request_context",
    "clear_request_context",
    "configure_logging",
    "configure_tracing",
    "disable_tracing",
    "get_tracer",
    "trace_similarity_request",
    "trace_strategy",
]
