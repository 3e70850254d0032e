"""pydantic-ai backed structured completion provider.

The agent runs with ``output_type`` set to the plan model, so the provider
is asked to constrain its own output to the schema. Provider and transport
exceptions are mapped onto ProviderTransientError / ProviderFatalError.
"""

import httpx
import openai
from loguru import logger
from pydantic import ValidationError
from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior, UserError

from fitcoach.config.settings import settings
from fitcoach.planning.errors import ProviderError, ProviderFatalError, ProviderTransientError
from fitcoach.services.llm.model import get_model
from fitcoach.services.llm.types import Completion, GenerationSettings, OutputT, TokenUsage

RETRYABLE_STATUS_CODES = frozenset({408, 409, 425, 429})


def _is_retryable_status(status_code: int | None) -> bool:
    if status_code is None:
        return False
    return status_code in RETRYABLE_STATUS_CODES or status_code >= 500


def classify_provider_error(error: BaseException) -> ProviderError:
    """Map a provider/transport exception onto the retry taxonomy.

    Unknown exceptions are treated as fatal: retrying an error we do not
    understand only burns the shared rate limit.
    """
    if isinstance(error, ProviderError):
        return error

    if isinstance(error, UserError):
        return ProviderFatalError(f"Provider configuration error: {error}", error)

    if isinstance(error, ModelHTTPError):
        message = f"Provider HTTP {error.status_code} from {error.model_name}"
        if _is_retryable_status(error.status_code):
            return ProviderTransientError(message, error)
        return ProviderFatalError(message, error)

    if isinstance(error, (UnexpectedModelBehavior, ValidationError)):
        return ProviderTransientError(f"Malformed provider output: {error}", error)

    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ProviderFatalError(f"Provider rejected credentials: {error}", error)

    if isinstance(error, openai.RateLimitError):
        return ProviderTransientError(f"Provider rate limit: {error}", error)

    if isinstance(error, openai.APIStatusError):
        if _is_retryable_status(error.status_code):
            return ProviderTransientError(f"Provider HTTP {error.status_code}: {error}", error)
        return ProviderFatalError(f"Provider HTTP {error.status_code}: {error}", error)

    if isinstance(error, (openai.APIConnectionError, httpx.TimeoutException, httpx.TransportError, TimeoutError, ConnectionError)):
        return ProviderTransientError(f"Provider unreachable: {type(error).__name__}: {error}", error)

    return ProviderFatalError(f"Unexpected provider error: {type(error).__name__}: {error}", error)


class PydanticAIProvider:
    """Structured completions through a pydantic-ai Agent."""

    def __init__(self, provider: str | None = None, model_name: str | None = None) -> None:
        self.name = provider or settings.llm_provider
        self.model_name = model_name or settings.plan_model
        self._model = None

    def _get_model(self):
        if self._model is None:
            self._model = get_model(self.name, self.model_name)
        return self._model

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        output_type: type[OutputT],
        settings: GenerationSettings,
    ) -> Completion[OutputT]:
        """Run one structured completion.

        Raises:
            ProviderTransientError: For timeouts, rate limits, 5xx and malformed output
            ProviderFatalError: For auth/config errors and anything unrecognized
        """
        try:
            agent = Agent(
                model=self._get_model(),
                system_prompt=system_prompt,
                output_type=output_type,
            )
            model_settings = {"temperature": settings.temperature, "max_tokens": settings.max_tokens}
            if settings.timeout is not None:
                model_settings["timeout"] = settings.timeout
            result = await agent.run(user_prompt, model_settings=model_settings)
        except Exception as e:
            classified = classify_provider_error(e)
            logger.debug(
                "Provider call failed",
                provider=self.name,
                model=self.model_name,
                error_type=type(e).__name__,
                retryable=classified.retryable,
            )
            if classified is e:
                raise
            raise classified from e

        usage = result.usage()
        return Completion(
            output=result.output,
            usage=TokenUsage(
                input_tokens=usage.input_tokens or 0,
                output_tokens=usage.output_tokens or 0,
                requests=usage.requests or 1,
            ),
            model_name=self.model_name,
        )
