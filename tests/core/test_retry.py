import pytest

from fitcoach.core.retry import RetryExhaustedError, RetryPolicy, with_retry
from fitcoach.core.telemetry import RecordingTelemetry


class Flaky:
    """Fails ``failures`` times with ``error``, then returns ``result``."""

    def __init__(self, failures: int, error: Exception, result: str = "ok"):
        self.failures = failures
        self.error = error
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return self.result


def test_capped_delay_grows_exponentially_up_to_cap():
    policy = RetryPolicy(base_delay=1.0, multiplier=2.0, max_delay=5.0)

    assert [policy.capped_delay(attempt) for attempt in range(1, 6)] == [1.0, 2.0, 4.0, 5.0, 5.0]


def test_delay_without_jitter_is_the_ceiling():
    policy = RetryPolicy(jitter=False)

    assert policy.delay_for(1) == 1.0
    assert policy.delay_for(3) == 4.0


def test_jittered_delay_stays_within_ceiling():
    policy = RetryPolicy()

    for attempt in range(1, 5):
        for _ in range(50):
            assert 0.0 <= policy.delay_for(attempt) <= policy.capped_delay(attempt)


def test_jitter_draws_from_zero_to_ceiling():
    policy = RetryPolicy()
    seen = []

    policy.delay_for(2, rng=lambda low, high: seen.append((low, high)) or high)

    assert seen == [(0.0, 2.0)]


def test_policy_requires_at_least_one_attempt():
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=0)


@pytest.mark.asyncio
async def test_with_retry_returns_first_success(fake_sleep, sleeps):
    operation = Flaky(failures=0, error=TimeoutError())

    result = await with_retry(operation, sleep=fake_sleep)

    assert result == "ok"
    assert operation.calls == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_with_retry_recovers_after_transient_failures(fake_sleep, sleeps):
    operation = Flaky(failures=2, error=TimeoutError("slow"))
    telemetry = RecordingTelemetry()

    result = await with_retry(
        operation,
        RetryPolicy(jitter=False),
        operation_name="flaky",
        telemetry=telemetry,
        sleep=fake_sleep,
    )

    assert result == "ok"
    assert operation.calls == 3
    assert sleeps == [1.0, 2.0]
    assert [event["name"] for event in telemetry.events] == ["retry.attempt", "retry.attempt"]
    assert telemetry.events[0]["attempt"] == 1
    assert telemetry.events[0]["error_type"] == "TimeoutError"
    assert telemetry.errors == []


@pytest.mark.asyncio
async def test_with_retry_gives_up_after_max_attempts(fake_sleep, sleeps):
    error = ConnectionError("down")
    operation = Flaky(failures=10, error=error)
    telemetry = RecordingTelemetry()

    with pytest.raises(RetryExhaustedError) as exc_info:
        await with_retry(operation, RetryPolicy(max_attempts=3), operation_name="always-down", telemetry=telemetry, sleep=fake_sleep)

    assert exc_info.value.attempts == 3
    assert exc_info.value.last_error is error
    assert exc_info.value.__cause__ is error
    assert operation.calls == 3
    assert len(sleeps) == 2
    assert all(0.0 <= delay <= 5.0 for delay in sleeps)
    assert [e["name"] for e in telemetry.errors] == ["retry.exhausted"]


@pytest.mark.asyncio
async def test_non_retryable_error_propagates_without_sleeping(fake_sleep, sleeps):
    error = PermissionError("no")
    operation = Flaky(failures=10, error=error)

    with pytest.raises(PermissionError):
        await with_retry(operation, should_retry=lambda e: not isinstance(e, PermissionError), sleep=fake_sleep)

    assert operation.calls == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_failing_telemetry_does_not_break_retry(fake_sleep):
    class BrokenTelemetry:
        def record_event(self, name, level="INFO", **attributes):
            raise RuntimeError("sink down")

        def record_error(self, name, error, **attributes):
            raise RuntimeError("sink down")

    operation = Flaky(failures=1, error=TimeoutError())

    assert await with_retry(operation, telemetry=BrokenTelemetry(), sleep=fake_sleep) == "ok"


@pytest.mark.asyncio
async def test_single_attempt_policy_exhausts_without_sleeping(fake_sleep, sleeps):
    error = TimeoutError("slow")
    operation = Flaky(failures=10, error=error)
    telemetry = RecordingTelemetry()

    with pytest.raises(RetryExhaustedError) as exc_info:
        await with_retry(operation, RetryPolicy(max_attempts=1), telemetry=telemetry, sleep=fake_sleep)

    assert exc_info.value.attempts == 1
    assert exc_info.value.last_error is error
    assert operation.calls == 1
    assert sleeps == []
    assert telemetry.errors[0]["attempts"] == 1
