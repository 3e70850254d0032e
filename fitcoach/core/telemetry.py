"""Advisory telemetry side channel.

Telemetry sinks receive breadcrumbs about plan generation (token usage,
retries, exhaustion, validation drift). Sinks are injected into the
pipeline so tests can capture events without a live backend. Every call
goes through ``emit_safely``: a failing sink never fails the caller.
"""

from collections.abc import Callable
from typing import Any, Protocol

from loguru import logger


class Telemetry(Protocol):
    """Interface for telemetry collectors."""

    def record_event(self, name: str, level: str = "INFO", **attributes: Any) -> None: ...

    def record_error(self, name: str, error: BaseException, **attributes: Any) -> None: ...


class LoguruTelemetry:
    """Default sink: structured loguru records."""

    def record_event(self, name: str, level: str = "INFO", **attributes: Any) -> None:
        logger.log(level, f"telemetry: {name}", event=name, **attributes)

    def record_error(self, name: str, error: BaseException, **attributes: Any) -> None:
        logger.error(
            f"telemetry: {name}",
            event=name,
            error_type=type(error).__name__,
            error_message=str(error),
            **attributes,
        )


class RecordingTelemetry:
    """In-memory sink, handy for tests and the CLI's --show-telemetry flag."""

    def __init__(self) -> None:
        self.events: list[dict[str, Any]] = []
        self.errors: list[dict[str, Any]] = []

    def record_event(self, name: str, level: str = "INFO", **attributes: Any) -> None:
        self.events.append({"name": name, "level": level, **attributes})

    def record_error(self, name: str, error: BaseException, **attributes: Any) -> None:
        self.errors.append({"name": name, "error": error, **attributes})

    def names(self) -> list[str]:
        return [event["name"] for event in self.events] + [error["name"] for error in self.errors]


def emit_safely(emit: Callable[..., None], *args: Any, **kwargs: Any) -> None:
    """Invoke a telemetry method, swallowing any failure.

    Args:
        emit: Bound sink method (record_event / record_error)
        *args: Positional arguments for the sink
        **kwargs: Keyword arguments for the sink
    """
    try:
        emit(*args, **kwargs)
    except Exception as e:
        logger.debug(f"Telemetry sink failed: {type(e).__name__}: {e}")


def truncate_payload(payload: object, limit: int = 500) -> str:
    """Render a payload for diagnostics, truncated to ``limit`` characters."""
    text = payload if isinstance(payload, str) else repr(payload)
    if len(text) <= limit:
        return text
    return f"{text[:limit]}... [truncated {len(text) - limit} chars]"
