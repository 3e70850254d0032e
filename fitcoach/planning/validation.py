"""Response Validator.

Re-checks provider output against the plan schemas before anything else
trusts it. The provider's structured-output mode is treated as best
effort: its output crosses a trust boundary and is always validated here.

Accepts a mapping, a plan model, or a raw completion string (markdown code
fences are stripped before JSON parsing). Reports every field-level issue,
never mutates its input and never touches the network.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from fitcoach.core.telemetry import LoguruTelemetry, Telemetry, emit_safely, truncate_payload
from fitcoach.planning.errors import PlanValidationError
from fitcoach.planning.schemas import MealPlan, PlanModel, WorkoutPlan

PlanT = TypeVar("PlanT", bound=PlanModel)

ROOT_PATH = "(root)"
MAX_REPORTED_ISSUES = 5

_FENCE_PATTERN = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


@dataclass(frozen=True)
class ValidationIssue:
    """A single schema violation.

    Attributes:
        path: Dotted location, e.g. "weeklyPlan.monday.meals.0.ingredients"
        message: Human-readable description
        code: Machine-readable error type (pydantic error type or "json_invalid")
    """

    path: str
    message: str
    code: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class ValidationOutcome(Generic[PlanT]):
    """Valid(plan) or Invalid(issues); a control-flow value, never persisted."""

    plan: PlanT | None = None
    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @classmethod
    def valid(cls, plan: PlanT) -> "ValidationOutcome[PlanT]":
        return cls(plan=plan)

    @classmethod
    def invalid(cls, issues: list[ValidationIssue]) -> "ValidationOutcome[PlanT]":
        if not issues:
            raise ValueError("An invalid outcome needs at least one issue")
        return cls(issues=tuple(issues))

    @property
    def is_valid(self) -> bool:
        return self.plan is not None and not self.issues

    @property
    def paths(self) -> list[str]:
        return [issue.path for issue in self.issues]

    def unwrap(self, plan_kind: str) -> PlanT:
        """Return the plan or raise PlanValidationError with every issue."""
        if self.plan is None or self.issues:
            raise PlanValidationError(plan_kind, list(self.issues))
        return self.plan


def clean_ai_response(raw: str) -> str:
    """Strip markdown code fences models add despite being told not to."""
    return _FENCE_PATTERN.sub("", raw).strip()


def _format_loc(loc: tuple[int | str, ...]) -> str:
    if not loc:
        return ROOT_PATH
    return ".".join(str(part) for part in loc)


def issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """Flatten a pydantic ValidationError into issues, one per violation."""
    return [
        ValidationIssue(path=_format_loc(tuple(detail["loc"])), message=detail["msg"], code=detail["type"])
        for detail in error.errors(include_url=False)
    ]


def _to_validation_input(payload: Any) -> tuple[Any, list[ValidationIssue]]:
    """Normalize a payload to plain data, or report why it cannot be."""
    if isinstance(payload, PlanModel):
        return payload.to_document(), []
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", by_alias=True, exclude_unset=True), []
    if isinstance(payload, (str, bytes)):
        text = payload.decode("utf-8", errors="replace") if isinstance(payload, bytes) else payload
        cleaned = clean_ai_response(text)
        try:
            return json.loads(cleaned), []
        except json.JSONDecodeError as e:
            return None, [
                ValidationIssue(
                    path=ROOT_PATH,
                    message=f"Failed to parse plan JSON from AI response: {e.msg} (line {e.lineno}, column {e.colno})",
                    code="json_invalid",
                )
            ]
    return payload, []


def validate_plan(
    payload: Any,
    plan_model: type[PlanT],
    plan_kind: str,
    telemetry: Telemetry | None = None,
) -> ValidationOutcome[PlanT]:
    """Validate a payload against a plan schema.

    Args:
        payload: Mapping, plan model instance, or raw completion string
        plan_model: MealPlan or WorkoutPlan
        plan_kind: "meal" or "workout", used in diagnostics
        telemetry: Sink for validation failures

    Returns:
        ValidationOutcome with the parsed plan or every issue found
    """
    data, issues = _to_validation_input(payload)
    stage = "json-parse"
    if not issues:
        stage = "schema"
        try:
            plan = plan_model.model_validate(data)
        except PydanticValidationError as e:
            issues = issues_from_pydantic(e)
        else:
            return ValidationOutcome.valid(plan)

    failure = PlanValidationError(plan_kind, issues)
    emit_safely(
        (telemetry or LoguruTelemetry()).record_error,
        "plan.validation_failed",
        failure,
        plan_kind=plan_kind,
        stage=stage,
        issue_count=len(issues),
        issues=[str(issue) for issue in issues[:MAX_REPORTED_ISSUES]],
        payload=truncate_payload(payload),
    )
    logger.warning(
        "Plan failed validation",
        plan_kind=plan_kind,
        stage=stage,
        issue_count=len(issues),
    )
    return ValidationOutcome.invalid(issues)


def validate_meal_plan(payload: Any, telemetry: Telemetry | None = None) -> ValidationOutcome[MealPlan]:
    return validate_plan(payload, MealPlan, "meal", telemetry)


def validate_workout_plan(payload: Any, telemetry: Telemetry | None = None) -> ValidationOutcome[WorkoutPlan]:
    return validate_plan(payload, WorkoutPlan, "workout", telemetry)
