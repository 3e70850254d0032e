"""Helper functions for logging LLM requests and responses."""

from __future__ import annotations

from loguru import logger
from pydantic import BaseModel


def log_llm_request(
    context: str,
    system_prompt: str,
    user_prompt: str,
    attempt: int | None = None,
) -> None:
    """Log the actual prompt submitted to LLM.

    Args:
        context: Context description (e.g., "generate-meal-plan")
        system_prompt: System prompt sent to LLM
        user_prompt: User prompt sent to LLM
        attempt: Optional attempt number for retries
    """
    extra_data: dict[str, str | int] = {
        "system_prompt": system_prompt,
        "user_prompt": user_prompt,
    }
    if attempt is not None:
        extra_data["attempt"] = attempt

    logger.bind(**extra_data).debug(f"LLM Request: {context} - PROMPT SUBMITTED")


def log_llm_response(
    context: str,
    output: object,
    attempt: int | None = None,
) -> None:
    """Log a summary of the structured output returned by the LLM.

    Args:
        context: Context description (e.g., "generate-meal-plan")
        output: Parsed output object
        attempt: Optional attempt number for retries
    """
    extra_data: dict[str, str | int] = {"output_type": type(output).__name__}
    if attempt is not None:
        extra_data["attempt"] = attempt

    if isinstance(output, BaseModel):
        weekly_plan = getattr(output, "weekly_plan", None)
        if isinstance(weekly_plan, dict):
            extra_data["days"] = len(weekly_plan)
        extra_data["fields"] = ", ".join(type(output).model_fields)

    logger.bind(**extra_data).debug(f"LLM Response: {context} - OUTPUT RECEIVED")
