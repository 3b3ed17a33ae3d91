"""OpenTelemetry tracing utilities for the stage engine."""

from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

tracer = trace.get_tracer("tripstage", "0.1.0")


def _attribute_value(value: Any) -> str | int | float | bool:
    if isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


@contextmanager
def trace_operation(name: str, attributes: dict[str, Any] | None = None):
    """Context manager for tracing operations."""
    with tracer.start_as_current_span(name) as span:
        if attributes:
            set_span_attributes(span, attributes)
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def set_span_attributes(span: Span, attributes: dict[str, Any]) -> None:
    """Set multiple attributes on a span, skipping empty values."""
    for key, value in attributes.items():
        if value is None:
            continue
        span.set_attribute(key, _attribute_value(value))


def record_side_effect_failure(error: Exception, hook: str) -> None:
    """Record a listener failure on the current span without failing it."""
    span = trace.get_current_span()
    span.record_exception(error)
    span.set_attribute("side_effect.failed_hook", hook)
