"""Canonical plan generation error types.

Every pipeline failure reaches the caller as one of these. The pipeline
never substitutes an empty or partial plan.

- ProviderTransientError: timeout, rate limit, 5xx, malformed output (retried)
- ProviderFatalError: auth/config/bad request (never retried)
- GenerationExhaustedError: retry budget consumed
- PlanValidationError: provider output failed independent re-validation
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from fitcoach.planning.validation import ValidationIssue


class PlanGenerationError(RuntimeError):
    """Base exception for plan generation failures."""

    pass


class ProviderError(PlanGenerationError):
    """Base exception for failures reported by the LLM provider.

    Attributes:
        original_error: Provider or transport exception that caused the failure
    """

    retryable: bool = False

    def __init__(self, message: str, original_error: BaseException | None = None) -> None:
        self.original_error = original_error
        super().__init__(message)


class ProviderTransientError(ProviderError):
    """Raised for provider failures that may succeed on another attempt."""

    retryable = True


class ProviderFatalError(ProviderError):
    """Raised for authentication and configuration failures (no retry)."""

    retryable = False


# Callers name this failure class ProviderConfigError
ProviderConfigError = ProviderFatalError


class GenerationExhaustedError(PlanGenerationError):
    """Raised when the retry budget is consumed without a usable result.

    Attributes:
        last_error: Exception raised by the final attempt
        attempts: Number of attempts made
    """

    def __init__(self, plan_kind: str, last_error: BaseException, attempts: int) -> None:
        self.plan_kind = plan_kind
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"{plan_kind} plan generation failed after {attempts} attempts: {type(last_error).__name__}: {last_error}")


class PlanValidationError(PlanGenerationError):
    """Raised when generated output fails independent schema re-validation.

    Attributes:
        plan_kind: "meal" or "workout"
        issues: Every field-level issue found
    """

    def __init__(self, plan_kind: str, issues: list[ValidationIssue]) -> None:
        self.plan_kind = plan_kind
        self.issues = issues
        summary = "; ".join(f"{issue.path}: {issue.message}" for issue in issues[:5])
        if len(issues) > 5:
            summary += f"; ... ({len(issues) - 5} more)"
        super().__init__(f"Invalid {plan_kind} plan structure ({len(issues)} issues): {summary}")
