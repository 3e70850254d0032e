import pytest

from fitcoach.planning.errors import GenerationExhaustedError, ProviderFatalError, ProviderTransientError
from fitcoach.planning.llm.generator import ConstrainedGenerator
from fitcoach.planning.llm.prompts import PromptPair
from fitcoach.planning.schemas import MealPlan
from fitcoach.services.llm.types import GenerationSettings

PROMPT = PromptPair(system="system prompt", user="user prompt")
SETTINGS = GenerationSettings(temperature=0.7, max_tokens=6000, max_attempts=3)


@pytest.mark.asyncio
async def test_generate_returns_output_on_first_attempt(stub_provider, telemetry, fake_sleep, sleeps, meal_plan_document):
    plan = MealPlan.model_validate(meal_plan_document)
    provider = stub_provider([plan])
    generator = ConstrainedGenerator(provider, telemetry=telemetry, sleep=fake_sleep)

    result = await generator.generate(PROMPT, MealPlan, SETTINGS, plan_kind="meal")

    assert result.output is plan
    assert result.attempts == 1
    assert result.usage.total_tokens == 300
    assert result.model_name == "stub-model"
    assert sleeps == []
    assert provider.calls[0]["system"] == "system prompt"
    assert provider.calls[0]["user"] == "user prompt"
    assert provider.calls[0]["output_type"] is MealPlan
    assert provider.calls[0]["settings"] is SETTINGS

    generated = [e for e in telemetry.events if e["name"] == "plan.generated"]
    assert len(generated) == 1
    assert generated[0]["total_tokens"] == 300
    assert generated[0]["attempts"] == 1


@pytest.mark.asyncio
async def test_transient_failure_is_retried(stub_provider, telemetry, fake_sleep, sleeps, meal_plan_document):
    plan = MealPlan.model_validate(meal_plan_document)
    provider = stub_provider([ProviderTransientError("rate limited"), plan])
    generator = ConstrainedGenerator(provider, telemetry=telemetry, sleep=fake_sleep)

    result = await generator.generate(PROMPT, MealPlan, SETTINGS, plan_kind="meal")

    assert result.output is plan
    assert result.attempts == 2
    assert len(provider.calls) == 2
    assert len(sleeps) == 1
    assert 0.0 <= sleeps[0] <= 1.0
    assert "retry.attempt" in telemetry.names()


@pytest.mark.asyncio
async def test_retry_ceiling_raises_generation_exhausted(stub_provider, telemetry, fake_sleep, sleeps):
    provider = stub_provider([ProviderTransientError("timeout")])
    generator = ConstrainedGenerator(provider, telemetry=telemetry, sleep=fake_sleep)

    with pytest.raises(GenerationExhaustedError) as exc_info:
        await generator.generate(PROMPT, MealPlan, SETTINGS, plan_kind="meal")

    assert exc_info.value.attempts == 3
    assert exc_info.value.plan_kind == "meal"
    assert isinstance(exc_info.value.last_error, ProviderTransientError)
    assert len(provider.calls) == 3
    assert len(sleeps) == 2
    assert 0.0 <= sleeps[0] <= 1.0
    assert 0.0 <= sleeps[1] <= 2.0
    assert "retry.exhausted" in telemetry.names()
    assert "plan.generated" not in telemetry.names()


@pytest.mark.asyncio
async def test_fatal_error_short_circuits(stub_provider, telemetry, fake_sleep, sleeps):
    provider = stub_provider([ProviderFatalError("invalid api key")])
    generator = ConstrainedGenerator(provider, telemetry=telemetry, sleep=fake_sleep)

    with pytest.raises(ProviderFatalError):
        await generator.generate(PROMPT, MealPlan, SETTINGS, plan_kind="meal")

    assert len(provider.calls) == 1
    assert sleeps == []
    assert "retry.attempt" not in telemetry.names()


@pytest.mark.asyncio
async def test_raw_timeout_is_classified_as_transient(stub_provider, fake_sleep, meal_plan_document):
    plan = MealPlan.model_validate(meal_plan_document)
    provider = stub_provider([TimeoutError("read timed out"), plan])
    generator = ConstrainedGenerator(provider, sleep=fake_sleep)

    result = await generator.generate(PROMPT, MealPlan, SETTINGS)

    assert result.attempts == 2


@pytest.mark.asyncio
async def test_unknown_error_is_fatal(stub_provider, fake_sleep, sleeps):
    original = KeyError("surprise")
    provider = stub_provider([original])
    generator = ConstrainedGenerator(provider, sleep=fake_sleep)

    with pytest.raises(ProviderFatalError) as exc_info:
        await generator.generate(PROMPT, MealPlan, SETTINGS)

    assert exc_info.value.original_error is original
    assert exc_info.value.__cause__ is original
    assert len(provider.calls) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_attempt_ceiling_follows_settings(stub_provider, fake_sleep, sleeps):
    provider = stub_provider([ProviderTransientError("timeout")])
    generator = ConstrainedGenerator(provider, sleep=fake_sleep)

    with pytest.raises(GenerationExhaustedError) as exc_info:
        await generator.generate(PROMPT, MealPlan, GenerationSettings(max_attempts=1))

    assert exc_info.value.attempts == 1
    assert len(provider.calls) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_backoff_is_capped(stub_provider, fake_sleep, sleeps):
    provider = stub_provider([ProviderTransientError("timeout")])
    generator = ConstrainedGenerator(provider, base_delay=1.0, max_delay=5.0, sleep=fake_sleep)

    with pytest.raises(GenerationExhaustedError):
        await generator.generate(PROMPT, MealPlan, GenerationSettings(max_attempts=6))

    assert len(sleeps) == 5
    assert all(0.0 <= delay <= 5.0 for delay in sleeps)
