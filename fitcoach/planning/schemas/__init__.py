"""Plan document schemas shared by structured output and re-validation."""

from fitcoach.planning.schemas.base import MacroTotals, PlanModel
from fitcoach.planning.schemas.meal_plan import DailyMealPlan, Meal, MealPlan, MealType
from fitcoach.planning.schemas.workout_plan import (
    DailyWorkout,
    ExerciseBlock,
    TimedExercise,
    WorkoutExercise,
    WorkoutPlan,
)

__all__ = [
    "DailyMealPlan",
    "DailyWorkout",
    "ExerciseBlock",
    "MacroTotals",
    "Meal",
    "MealPlan",
    "MealType",
    "PlanModel",
    "TimedExercise",
    "WorkoutExercise",
    "WorkoutPlan",
]
