"""OpenTelemetry tracing for cache operations."""

from __future__ import annotations

import time
from collections.abc import Callable
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar

import structlog

if TYPE_CHECKING:
    from memgroup_core.config.settings import Settings

logger = structlog.get_logger()

# Module-level tracer, set by configure_tracing(); None while disabled.
_tracer: Any = None

P = ParamSpec("P")
R = TypeVar("R")


def configure_tracing(settings: Settings) -> None:
    """Configure OpenTelemetry tracing based on settings.

    OTEL imports are deferred so the client never loads them unless an
    exporter is selected.
    """
    global _tracer

    if settings.otel_exporter == "none":
        _tracer = None
        return

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
    _tracer = trace.get_tracer("memgroup")
    logger.info("tracing_configured", exporter=settings.otel_exporter)


def configure_tracing_with_exporter(service_name: str, exporter: Any) -> None:
    """Route spans synchronously to the given exporter.

    Does not touch the global tracer provider, so it can be called
    repeatedly (e.g. once per test).
    """
    global _tracer

    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import SimpleSpanProcessor

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(SimpleSpanProcessor(exporter))
    _tracer = provider.get_tracer("memgroup")


def disable_tracing() -> None:
    """Turn span creation off."""
    global _tracer
    _tracer = None


def get_tracer() -> Any:
    """Return the active tracer, or None when tracing is disabled."""
    return _tracer


def traced_operation(name: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator that wraps a cache operation in an OTEL span.

    Noop when tracing is disabled (_tracer is None).
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        @wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            if _tracer is None:
                return fn(*args, **kwargs)

            with _tracer.start_as_current_span(f"cache.{name}") as span:
                span.set_attribute("cache.operation", name)
                start = time.monotonic()
                try:
                    result = fn(*args, **kwargs)
                    span.set_attribute("cache.status", "ok")
                    return result
                except Exception as exc:
                    span.set_attribute("cache.status", "error")
                    span.set_attribute("cache.error", type(exc).__name__)
                    raise
                finally:
                    elapsed = time.monotonic() - start
                    span.set_attribute("cache.duration_seconds", round(elapsed, 4))

        return wrapper

    return decorator
