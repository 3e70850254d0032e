"""Constrained Generator.

Obtains a schema-constrained object from the provider. Transient provider
failures are retried through ``with_retry``; fatal ones short-circuit on
the first attempt. Retry mechanics stay in fitcoach.core.retry.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic

from loguru import logger

from fitcoach.core.retry import RetryExhaustedError, RetryPolicy, with_retry
from fitcoach.core.telemetry import LoguruTelemetry, Telemetry, emit_safely
from fitcoach.planning.errors import GenerationExhaustedError, ProviderError
from fitcoach.planning.llm.logging_helpers import log_llm_request, log_llm_response
from fitcoach.planning.llm.prompts import PromptPair
from fitcoach.services.llm.provider import classify_provider_error
from fitcoach.services.llm.types import (
    GenerationSettings,
    OutputT,
    StructuredCompletionProvider,
    TokenUsage,
)


@dataclass(frozen=True)
class GenerationResult(Generic[OutputT]):
    """Provider output plus call accounting.

    Attributes:
        output: Schema-constrained object (still untrusted until re-validated)
        usage: Token usage of the successful attempt
        attempts: Attempts made, including the successful one
        model_name: Model that produced the output
    """

    output: OutputT
    usage: TokenUsage
    attempts: int
    model_name: str


def _is_retryable(error: BaseException) -> bool:
    return isinstance(error, ProviderError) and error.retryable


class ConstrainedGenerator:
    """Invokes the provider under a strict output schema with bounded retries."""

    def __init__(
        self,
        provider: StructuredCompletionProvider,
        telemetry: Telemetry | None = None,
        base_delay: float = 1.0,
        max_delay: float = 5.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.provider = provider
        self.telemetry = telemetry or LoguruTelemetry()
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._sleep = sleep

    def _policy(self, settings: GenerationSettings) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=settings.max_attempts,
            base_delay=self.base_delay,
            multiplier=2.0,
            max_delay=self.max_delay,
        )

    async def generate(
        self,
        prompt: PromptPair,
        output_type: type[OutputT],
        settings: GenerationSettings,
        plan_kind: str = "plan",
    ) -> GenerationResult[OutputT]:
        """Generate one object conforming to ``output_type``.

        Args:
            prompt: System and user prompts
            output_type: Pydantic model the provider must produce
            settings: Temperature, output size, attempt ceiling, timeout
            plan_kind: Label used in logs and telemetry

        Returns:
            GenerationResult with the provider output and usage

        Raises:
            ProviderFatalError: On auth/config errors (after exactly one attempt)
            GenerationExhaustedError: When every attempt failed transiently
        """
        operation_name = f"generate-{plan_kind}-plan"
        attempts = 0

        async def _attempt():
            nonlocal attempts
            attempts += 1
            log_llm_request(
                context=operation_name,
                system_prompt=prompt.system,
                user_prompt=prompt.user,
                attempt=attempts,
            )
            try:
                completion = await self.provider.complete(prompt.system, prompt.user, output_type, settings)
            except Exception as e:
                classified = classify_provider_error(e)
                if classified is e:
                    raise
                raise classified from e
            log_llm_response(context=operation_name, output=completion.output, attempt=attempts)
            return completion

        try:
            completion = await with_retry(
                _attempt,
                self._policy(settings),
                operation_name=operation_name,
                should_retry=_is_retryable,
                telemetry=self.telemetry,
                sleep=self._sleep,
            )
        except RetryExhaustedError as e:
            raise GenerationExhaustedError(plan_kind, e.last_error, e.attempts) from e.last_error

        emit_safely(
            self.telemetry.record_event,
            "plan.generated",
            plan_kind=plan_kind,
            provider=getattr(self.provider, "name", type(self.provider).__name__),
            model=completion.model_name,
            attempts=attempts,
            input_tokens=completion.usage.input_tokens,
            output_tokens=completion.usage.output_tokens,
            total_tokens=completion.usage.total_tokens,
        )
        logger.info(
            "Plan generated by provider",
            plan_kind=plan_kind,
            attempts=attempts,
            total_tokens=completion.usage.total_tokens,
        )
        return GenerationResult(
            output=completion.output,
            usage=completion.usage,
            attempts=attempts,
            model_name=completion.model_name,
        )
