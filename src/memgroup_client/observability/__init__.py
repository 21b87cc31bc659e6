"""Observability: structured logging and tracing."""

from memgroup_client.observability.logging import (
    bind_client_context,
    clear_client_context,
    configure_logging,
    group_log_context,
)
from memgroup_client.observability.tracing import (
    configure_tracing,
    configure_tracing_with_exporter,
    disable_tracing,
    get_tracer,
    traced_operation,
)

__all__ = [
    "bind_client_context",
    "clear_client_context",
    "configure_logging",
    "configure_tracing",
    "configure_tracing_with_exporter",
    "disable_tracing",
    "get_tracer",
    "group_log_context",
    "traced_operation",
]
