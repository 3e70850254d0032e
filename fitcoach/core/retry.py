"""Exponential backoff retry for async operations.

Delays grow as base * multiplier**(attempt - 1), capped at ``max_delay``,
with full jitter: the actual sleep is uniform in [0, capped delay]. Full
jitter keeps concurrent requests that fail together from retrying in
lockstep against the shared provider rate limit.
"""

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from loguru import logger

from fitcoach.core.telemetry import LoguruTelemetry, Telemetry, emit_safely

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff configuration.

    Attributes:
        max_attempts: Total attempts including the first one
        base_delay: Delay before the second attempt, in seconds
        multiplier: Growth factor between consecutive delays
        max_delay: Upper bound for any single delay, in seconds
        jitter: Apply full jitter to each delay
    """

    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 5.0
    jitter: bool = True

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("Retry delays must be non-negative")
        if self.multiplier < 1:
            raise ValueError(f"multiplier must be at least 1, got {self.multiplier}")

    def capped_delay(self, attempt: int) -> float:
        """Delay ceiling after the given (1-based) failed attempt."""
        return min(self.base_delay * self.multiplier ** (attempt - 1), self.max_delay)

    def delay_for(self, attempt: int, rng: Callable[[float, float], float] = random.uniform) -> float:
        """Actual delay to sleep after the given failed attempt."""
        ceiling = self.capped_delay(attempt)
        if not self.jitter:
            return ceiling
        return rng(0.0, ceiling)


class RetryExhaustedError(Exception):
    """Raised when every attempt allowed by the policy has failed.

    Attributes:
        operation_name: Name of the retried operation
        last_error: Exception raised by the final attempt
        attempts: Number of attempts made
    """

    def __init__(self, operation_name: str, last_error: BaseException, attempts: int) -> None:
        self.operation_name = operation_name
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Operation '{operation_name}' failed after {attempts} attempts: {type(last_error).__name__}: {last_error}")


def _always_retry(_error: BaseException) -> bool:
    return True


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    operation_name: str = "operation",
    should_retry: Callable[[BaseException], bool] = _always_retry,
    telemetry: Telemetry | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run ``operation`` until it succeeds or the policy is exhausted.

    Errors for which ``should_retry`` returns False propagate immediately,
    unwrapped. Cancellation is never retried.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        policy: Backoff policy (defaults to 3 attempts, 1s base, 5s cap)
        operation_name: Name used in logs and telemetry
        should_retry: Predicate deciding whether an error is retryable
        telemetry: Sink for retry/exhaustion events
        sleep: Awaitable sleep function (injected in tests)

    Returns:
        Result of the first successful attempt

    Raises:
        RetryExhaustedError: If every attempt failed with a retryable error
    """
    policy = policy or RetryPolicy()
    telemetry = telemetry or LoguruTelemetry()

    attempt = 0
    while True:
        attempt += 1
        try:
            result = await operation()
        except Exception as e:
            if not should_retry(e):
                logger.warning(
                    "Non-retryable error, giving up",
                    operation=operation_name,
                    attempt=attempt,
                    error_type=type(e).__name__,
                )
                raise

            if attempt >= policy.max_attempts:
                raise _exhausted(operation_name, e, attempt, telemetry) from e

            delay = policy.delay_for(attempt)
            emit_safely(
                telemetry.record_event,
                "retry.attempt",
                level="WARNING",
                operation=operation_name,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                delay_seconds=round(delay, 3),
                error_type=type(e).__name__,
                error_message=str(e),
            )
            logger.warning(
                "Retrying after transient error",
                operation=operation_name,
                attempt=attempt,
                max_attempts=policy.max_attempts,
                delay_seconds=round(delay, 3),
                error_type=type(e).__name__,
            )
            await sleep(delay)
        else:
            if attempt > 1:
                logger.info("Operation succeeded after retry", operation=operation_name, attempt=attempt)
            return result


def _exhausted(
    operation_name: str,
    last_error: BaseException,
    attempts: int,
    telemetry: Telemetry,
) -> RetryExhaustedError:
    """Report an exhausted retry budget and build the error to raise."""
    exhausted = RetryExhaustedError(operation_name, last_error, attempts)
    emit_safely(
        telemetry.record_error,
        "retry.exhausted",
        exhausted,
        operation=operation_name,
        attempts=attempts,
        last_error_type=type(last_error).__name__,
        last_error_message=str(last_error),
    )
    logger.error(
        "Retry budget exhausted",
        operation=operation_name,
        attempts=attempts,
        last_error_type=type(last_error).__name__,
    )
    return exhausted
