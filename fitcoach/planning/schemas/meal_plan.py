"""Meal plan document schema.

The same models drive structured output from the provider and the
independent re-validation of whatever the provider returns.
"""

from enum import StrEnum

from pydantic import Field

from fitcoach.planning.schemas.base import (
    DayName,
    MacroTotals,
    NonEmptyStr,
    NonNegativeNumber,
    PlanModel,
    PositiveNumber,
)


class MealType(StrEnum):
    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


class Meal(PlanModel):
    name: NonEmptyStr
    meal_type: MealType = Field(..., alias="type")
    time: NonEmptyStr = Field(..., description="Local time, e.g. 08:00")
    calories: PositiveNumber
    protein: NonNegativeNumber
    carbs: NonNegativeNumber
    fat: NonNegativeNumber
    ingredients: list[NonEmptyStr] = Field(..., min_length=1)
    instructions: list[NonEmptyStr] = Field(..., min_length=1)
    alternatives: list[str] | None = None


class DailyMealPlan(PlanModel):
    meals: list[Meal] = Field(..., min_length=1)
    daily_totals: MacroTotals


class MealPlan(PlanModel):
    weekly_plan: dict[DayName, DailyMealPlan] = Field(..., min_length=1)
    weekly_totals: MacroTotals
    notes: str

    @property
    def days(self) -> list[str]:
        return list(self.weekly_plan)

    def meal_count(self) -> int:
        return sum(len(day.meals) for day in self.weekly_plan.values())
