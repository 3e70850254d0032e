"""Workout plan document schema.

Rest days (``restDay: true``) carry no exercise content: main exercises,
warmup and cooldown may be empty or omitted and duration may be 0.
Training days need a positive duration, warmup and cooldown blocks,
target muscles and at least one main exercise. Exercises that a rest day
does include are still validated item by item.
"""

from pydantic import Field, StrictBool, ValidationInfo, field_validator

from fitcoach.planning.schemas.base import (
    DayName,
    NonEmptyStr,
    NonNegativeNumber,
    PlanModel,
    PositiveInt,
    PositiveNumber,
)


class TimedExercise(PlanModel):
    """Warmup or cooldown movement, timed in seconds."""

    name: NonEmptyStr
    duration: PositiveNumber = Field(..., description="seconds")
    instructions: list[NonEmptyStr] = Field(..., min_length=1)


class ExerciseBlock(PlanModel):
    exercises: list[TimedExercise] = Field(default_factory=list)


class WorkoutExercise(PlanModel):
    name: NonEmptyStr
    sets: PositiveInt
    reps: NonEmptyStr = Field(..., description="Free format, e.g. '10-12' or '30 seconds'")
    rest: NonNegativeNumber = Field(..., description="seconds")
    target_muscles: list[NonEmptyStr] = Field(..., min_length=1)
    notes: str | None = None
    equipment: str | None = None


def _is_rest_day(info: ValidationInfo) -> bool:
    # rest_day is declared first so it is already validated here
    return info.data.get("rest_day") is True


class DailyWorkout(PlanModel):
    rest_day: StrictBool | None = None
    workout_name: NonEmptyStr
    duration: NonNegativeNumber = Field(..., description="minutes")
    target_muscles: list[str] | None = Field(None, validate_default=True)
    warmup: ExerciseBlock | None = Field(None, validate_default=True)
    exercises: list[WorkoutExercise] | None = Field(None, validate_default=True)
    cooldown: ExerciseBlock | None = Field(None, validate_default=True)

    @field_validator("duration")
    @classmethod
    def duration_positive_on_training_day(cls, value: float, info: ValidationInfo) -> float:
        if value <= 0 and not _is_rest_day(info):
            raise ValueError("Workout duration must be positive (minutes) on a training day")
        return value

    @field_validator("target_muscles", "warmup", "cooldown")
    @classmethod
    def required_on_training_day(cls, value: object, info: ValidationInfo) -> object:
        if value is None and not _is_rest_day(info):
            raise ValueError(f"{info.field_name} is required on a training day")
        return value

    @field_validator("exercises")
    @classmethod
    def exercises_on_training_day(
        cls, value: list[WorkoutExercise] | None, info: ValidationInfo
    ) -> list[WorkoutExercise] | None:
        if not value and not _is_rest_day(info):
            raise ValueError("At least one exercise is required on a training day")
        return value

    @property
    def is_rest_day(self) -> bool:
        return self.rest_day is True


class WorkoutPlan(PlanModel):
    weekly_plan: dict[DayName, DailyWorkout] = Field(..., min_length=1)
    progression_notes: str
    safety_tips: list[NonEmptyStr] = Field(..., min_length=1)

    @property
    def days(self) -> list[str]:
        return list(self.weekly_plan)

    def training_days(self) -> list[str]:
        return [day for day, workout in self.weekly_plan.items() if not workout.is_rest_day]
