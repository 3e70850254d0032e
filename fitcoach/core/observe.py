"""OpenTelemetry integration for plan generation observability.

Spans wrap each pipeline run; telemetry events land on the current span.
Without an OpenTelemetry SDK configured the API hands out non-recording
spans, so every call here is safe to make unconditionally.
"""

import contextlib
from typing import Any

from loguru import logger
from opentelemetry import trace as otel_trace
from opentelemetry.trace import Status, StatusCode

from fitcoach.core.telemetry import LoguruTelemetry

_TRACER_NAME = "fitcoach"


def _span_attributes(metadata: dict[str, Any] | None) -> dict[str, str | int | float | bool]:
    """Coerce metadata into OpenTelemetry attribute values."""
    attributes: dict[str, str | int | float | bool] = {}
    for key, value in (metadata or {}).items():
        if value is None:
            continue
        if isinstance(value, (str, int, float, bool)):
            attributes[key] = value
        else:
            attributes[key] = str(value)
    return attributes


class _ObserveSDK:
    """Thin wrapper that lets tracing be switched on and off at startup."""

    def __init__(self) -> None:
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def init(self, enabled: bool = False) -> None:
        """Enable or disable span creation.

        Args:
            enabled: Whether tracing is enabled
        """
        self._enabled = enabled
        if not enabled:
            logger.info("Observe tracing is disabled")
            return
        logger.info("Observe tracing enabled", tracer=_TRACER_NAME)

    def trace(self, name: str, metadata: dict[str, Any] | None = None) -> Any:
        """Create a trace span.

        Args:
            name: Trace name
            metadata: Optional metadata dictionary

        Returns:
            Context manager for the trace span
        """
        if not self._enabled:
            return contextlib.nullcontext()

        try:
            tracer = otel_trace.get_tracer(_TRACER_NAME)
            return tracer.start_as_current_span(name, attributes=_span_attributes(metadata))
        except Exception as e:
            logger.debug(f"Failed to create trace span: {e}")
            return contextlib.nullcontext()


_observe = _ObserveSDK()


def init(enabled: bool = False) -> None:
    """Initialize tracing (called once at startup).

    Args:
        enabled: Whether tracing is enabled
    """
    _observe.init(enabled=enabled)


def trace(name: str, metadata: dict[str, Any] | None = None) -> Any:
    """Create a trace span.

    Args:
        name: Trace name (e.g., "plan.generate.meal")
        metadata: Optional metadata dictionary

    Returns:
        Context manager for the trace span

    Example:
        with observe.trace("plan.generate.meal", metadata={"language": "ar"}):
            plan = await pipeline.generate_meal_plan(request)
    """
    return _observe.trace(name, metadata)


class ObserveTelemetry(LoguruTelemetry):
    """Telemetry sink that records events on the active OpenTelemetry span.

    Everything is also logged through loguru so nothing is lost when no
    span is recording.
    """

    def record_event(self, name: str, level: str = "INFO", **attributes: Any) -> None:
        super().record_event(name, level=level, **attributes)
        span = otel_trace.get_current_span()
        span.add_event(name, attributes={"level": level, **_span_attributes(attributes)})

    def record_error(self, name: str, error: BaseException, **attributes: Any) -> None:
        super().record_error(name, error, **attributes)
        span = otel_trace.get_current_span()
        span.record_exception(error, attributes={"event": name, **_span_attributes(attributes)})
        span.set_status(Status(StatusCode.ERROR, f"{name}: {type(error).__name__}"))


def get_default_telemetry() -> LoguruTelemetry:
    """Telemetry sink matching the tracing configuration."""
    if _observe.enabled:
        return ObserveTelemetry()
    return LoguruTelemetry()
