"""Inputs to plan generation.

A GenerationRequest is assembled per call from profile, assessment and
check-in storage. The pipeline only reads it.
"""

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Language(StrEnum):
    EN = "en"
    AR = "ar"


class ExperienceLevel(StrEnum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class PlanKind(StrEnum):
    MEAL = "meal"
    WORKOUT = "workout"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class SubjectProfile(_Record):
    id: str
    full_name: str | None = None
    language: Language = Language.EN


class Assessment(_Record):
    goals: str | None = None
    current_weight: float | None = Field(None, gt=0, description="kg")
    height: float | None = Field(None, gt=0, description="cm")
    experience_level: ExperienceLevel | None = None

    food_preferences: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    dietary_restrictions: list[str] = Field(default_factory=list)

    schedule_availability: dict[str, Any] | list[Any] | str | None = None
    medical_conditions: list[str] = Field(default_factory=list)
    injuries: list[str] = Field(default_factory=list)
    exercise_history: str | None = None

    @field_validator(
        "food_preferences",
        "allergies",
        "dietary_restrictions",
        "medical_conditions",
        "injuries",
        mode="before",
    )
    @classmethod
    def none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value


class CheckIn(_Record):
    id: str | None = None
    weight: float | None = Field(None, gt=0)
    energy_level: int | None = Field(None, ge=1, le=10)
    sleep_quality: int | None = Field(None, ge=1, le=10)
    dietary_adherence: int | None = Field(None, ge=1, le=10)
    workout_performance: str | None = None
    new_injuries: str | None = None
    notes: str | None = None


class GenerationRequest(_Record):
    profile: SubjectProfile
    assessment: Assessment
    check_in: CheckIn | None = None
    language: Language = Language.EN
    plan_duration_days: int = Field(7, gt=0)
    coach_guidelines: list[str] = Field(
        default_factory=list,
        description="Coach knowledge-base excerpts relevant to this subject",
    )
