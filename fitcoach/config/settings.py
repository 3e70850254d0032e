from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LLM_BASE_URL = "https://openrouter.ai/api/v1"


class Settings(BaseSettings):
    openrouter_api_key: str = Field(default="", validation_alias="OPENROUTER_API_KEY")
    llm_provider: str = Field(default="openrouter", validation_alias="LLM_PROVIDER")
    llm_base_url: str = Field(default=DEFAULT_LLM_BASE_URL, validation_alias="LLM_BASE_URL")
    plan_model: str = Field(default="deepseek/deepseek-chat", validation_alias="PLAN_MODEL")
    plan_temperature: float = Field(default=0.7, validation_alias="PLAN_TEMPERATURE")
    plan_max_tokens: int = Field(default=6000, validation_alias="PLAN_MAX_TOKENS")
    plan_max_attempts: int = Field(default=3, validation_alias="PLAN_MAX_ATTEMPTS")
    plan_request_timeout: float = Field(
        default=120.0,
        validation_alias="PLAN_REQUEST_TIMEOUT",
        description="Per-attempt provider timeout in seconds",
    )
    retry_base_delay: float = Field(default=1.0, validation_alias="RETRY_BASE_DELAY")
    retry_max_delay: float = Field(default=5.0, validation_alias="RETRY_MAX_DELAY")
    app_url: str = Field(
        default="http://localhost:3000",  # Sent as HTTP-Referer to OpenRouter
        validation_alias="APP_URL",
    )
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: str = Field(default="", validation_alias="LOG_FILE")
    observe_enabled: bool = Field(
        default=False,
        validation_alias="OBSERVE_ENABLED",
        description="Record telemetry as OpenTelemetry span events",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("plan_max_attempts")
    @classmethod
    def validate_max_attempts(cls, value: int) -> int:
        if value < 1:
            logger.warning(f"PLAN_MAX_ATTEMPTS must be at least 1, got {value}. Using 1.")
            return 1
        return value

    @field_validator("plan_temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        if not 0.0 <= value <= 2.0:
            logger.warning(f"PLAN_TEMPERATURE must be within [0, 2], got {value}. Defaulting to 0.7.")
            return 0.7
        return value

    @field_validator("openrouter_api_key")
    @classmethod
    def validate_api_key(cls, value: str) -> str:
        """Warn when the provider key is missing.

        Prompt building and validation work without it; plan generation
        fails fast with ProviderFatalError.
        """
        if not value:
            logger.warning(
                "⚠️ OPENROUTER_API_KEY is not set. Plan generation will not work. "
                "Set it in .env file or environment variables."
            )
        return value


settings = Settings()
