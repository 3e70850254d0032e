"""LLM model abstraction for consistent model access across the application."""

from openai import AsyncOpenAI
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider

from fitcoach.config.settings import settings
from fitcoach.planning.errors import ProviderFatalError

SUPPORTED_PROVIDERS = ("openrouter", "openai")


def get_model(provider: str, model_name: str) -> OpenAIChatModel:
    """Build a pydantic-ai model for an OpenAI-compatible endpoint.

    Raises:
        ProviderFatalError: If the provider is unknown or no API key is configured
    """
    if provider not in SUPPORTED_PROVIDERS:
        raise ProviderFatalError(f"Unsupported LLM provider: {provider}")

    if not settings.openrouter_api_key:
        raise ProviderFatalError("OPENROUTER_API_KEY is not configured")

    default_headers: dict[str, str] = {}
    if provider == "openrouter":
        default_headers = {"HTTP-Referer": settings.app_url, "X-Title": "FitCoach"}

    client = AsyncOpenAI(
        api_key=settings.openrouter_api_key,
        base_url=settings.llm_base_url,
        default_headers=default_headers,
        # Retries are owned by fitcoach.core.retry
        max_retries=0,
    )
    return OpenAIChatModel(model_name, provider=OpenAIProvider(openai_client=client))
