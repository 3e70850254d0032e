"""Prompt Builder for meal and workout plan generation.

Pure functions: a GenerationRequest in, a (system, user) prompt pair out.
Missing optional data renders as an explicit "None" so the model never
confuses "not provided" with "nothing to report", and the strings
"undefined"/"null" never reach the prompt.
"""

import json
from dataclasses import dataclass
from typing import Any

from fitcoach.planning.llm.language import get_language_rules
from fitcoach.planning.request import CheckIn, GenerationRequest, PlanKind

NONE_PLACEHOLDER = "None"
_MISSING_MARKERS = {"null", "undefined", "none", "n/a"}


@dataclass(frozen=True)
class PromptPair:
    system: str
    user: str


MEAL_SYSTEM_PROMPT = """You are an expert nutritionist and meal planning AI specializing in {cuisine_focus}. Your task is to create personalized meal plans based on user profiles, assessments, and progress data.

IMPORTANT GUIDELINES:
1. Consider food preferences, allergies, and dietary restrictions
2. Balance macronutrients appropriately for the user's goals
3. Provide realistic, achievable meal plans with locally available ingredients
4. Include specific measurements and clear instructions
5. Suggest alternatives for flexibility
6. Every meal needs positive calories, non-negative macros, at least one ingredient and at least one instruction step
7. Return ONLY valid JSON, no markdown formatting or code blocks"""

WORKOUT_SYSTEM_PROMPT = """You are an expert personal trainer and workout planning AI. Your task is to create personalized workout plans based on user profiles, assessments, and progress data.

IMPORTANT GUIDELINES:
1. Consider experience level and fitness goals
2. Account for any injuries or medical conditions
3. Respect the user's schedule availability
4. Progress exercises appropriately
5. Include warm-up and cool-down on every training day
6. Mark days without training with "restDay": true; rest days need no exercises
7. Provide clear, safe instructions
8. Return ONLY valid JSON, no markdown formatting or code blocks"""

MEAL_PLAN_STRUCTURE = """{
  "weeklyPlan": {
    "monday": {
      "meals": [
        {
          "name": "Meal name",
          "type": "breakfast|lunch|dinner|snack",
          "time": "HH:MM",
          "calories": 500,
          "protein": 30,
          "carbs": 50,
          "fat": 15,
          "ingredients": ["ingredient 1", "ingredient 2"],
          "instructions": ["step 1", "step 2"],
          "alternatives": ["alternative option"]
        }
      ],
      "dailyTotals": {
        "calories": 2000,
        "protein": 150,
        "carbs": 200,
        "fat": 60
      }
    }
  },
  "weeklyTotals": {
    "calories": 14000,
    "protein": 1050,
    "carbs": 1400,
    "fat": 420
  },
  "notes": "General notes and tips for the week"
}"""

WORKOUT_PLAN_STRUCTURE = """{
  "weeklyPlan": {
    "monday": {
      "workoutName": "Upper Body Strength",
      "duration": 45,
      "targetMuscles": ["chest", "back", "shoulders"],
      "warmup": {
        "exercises": [
          {
            "name": "Exercise name",
            "duration": 60,
            "instructions": ["step 1", "step 2"]
          }
        ]
      },
      "exercises": [
        {
          "name": "Exercise name",
          "sets": 3,
          "reps": "10-12",
          "rest": 60,
          "notes": "Optional notes",
          "targetMuscles": ["chest"],
          "equipment": "dumbbells"
        }
      ],
      "cooldown": {
        "exercises": [
          {
            "name": "Stretch name",
            "duration": 30,
            "instructions": ["step 1"]
          }
        ]
      },
      "restDay": false
    }
  },
  "progressionNotes": "How to progress each week",
  "safetyTips": ["tip 1", "tip 2"]
}"""


def _text(value: Any) -> str:
    if value is None:
        return NONE_PLACEHOLDER
    text = str(value).strip()
    if not text or text.lower() in _MISSING_MARKERS:
        return NONE_PLACEHOLDER
    return text


def _number(value: float | int | None, unit: str = "") -> str:
    if value is None:
        return NONE_PLACEHOLDER
    return f"{value:g}{unit}"


def _scale(value: int | None) -> str:
    return NONE_PLACEHOLDER if value is None else f"{value}/10"


def _is_missing(value: Any) -> bool:
    return _text(value) == NONE_PLACEHOLDER


def _items(values: list[str]) -> str:
    cleaned = [v.strip() for v in values if not _is_missing(v)]
    return ", ".join(cleaned) if cleaned else NONE_PLACEHOLDER


def _prune(value: Any) -> Any:
    """Drop missing entries from nested schedule data; None if nothing is left."""
    if isinstance(value, dict):
        pruned = {k: v for k, v in ((k, _prune(v)) for k, v in value.items()) if v is not None}
        return pruned or None
    if isinstance(value, list):
        pruned = [v for v in (_prune(item) for item in value) if v is not None]
        return pruned or None
    if isinstance(value, str):
        return None if _is_missing(value) else value.strip()
    return value


def _schedule(value: dict[str, Any] | list[Any] | str | None) -> str:
    pruned = _prune(value)
    if pruned is None:
        return NONE_PLACEHOLDER
    if isinstance(pruned, str):
        return pruned
    return json.dumps(pruned, ensure_ascii=False, default=str)


def _profile_block(request: GenerationRequest) -> str:
    assessment = request.assessment
    level = assessment.experience_level.value if assessment.experience_level else None
    return (
        f"GOALS: {_text(assessment.goals)}\n"
        f"CURRENT WEIGHT: {_number(assessment.current_weight, 'kg')}\n"
        f"HEIGHT: {_number(assessment.height, 'cm')}\n"
        f"EXPERIENCE LEVEL: {_text(level)}"
    )


def _check_in_block(check_in: CheckIn | None, kind: PlanKind) -> str:
    if check_in is None:
        return f"RECENT PROGRESS: {NONE_PLACEHOLDER} (no check-in submitted yet)"

    lines = [
        "RECENT PROGRESS (latest check-in):",
        f"- Current Weight: {_number(check_in.weight, 'kg')}",
        f"- Energy Level: {_scale(check_in.energy_level)}",
        f"- Sleep Quality: {_scale(check_in.sleep_quality)}",
    ]
    if kind == PlanKind.MEAL:
        lines.append(f"- Dietary Adherence: {_scale(check_in.dietary_adherence)}")
    else:
        lines.append(f"- Workout Performance: {_text(check_in.workout_performance)}")
    lines.append(f"- New Injuries: {_text(check_in.new_injuries)}")
    lines.append(f"- Notes: {_text(check_in.notes)}")
    return "\n".join(lines)


def _system_prompt(template: str, request: GenerationRequest, kind: PlanKind) -> str:
    rules = get_language_rules(request.language)
    parts = [template.format(cuisine_focus=rules.cuisine_focus)]

    requirements = rules.requirements_for(kind)
    if requirements:
        parts.append(requirements)

    guidelines = [g.strip() for g in request.coach_guidelines if g and g.strip()]
    if guidelines:
        parts.append("COACH'S TRAINING PHILOSOPHY & GUIDELINES:\n" + "\n\n".join(guidelines))

    return "\n\n".join(parts)


def build_meal_plan_prompt(request: GenerationRequest) -> PromptPair:
    """Build the system and user prompts for a meal plan.

    Args:
        request: Subject data, target language and plan duration

    Returns:
        PromptPair with the rendered prompts
    """
    rules = get_language_rules(request.language)
    assessment = request.assessment

    user = f"""Create a {request.plan_duration_days}-day meal plan {rules.output_directive} for a user with the following profile:

{_profile_block(request)}

DIETARY PREFERENCES:
- Food Preferences: {_items(assessment.food_preferences)}
- Allergies: {_items(assessment.allergies)}
- Dietary Restrictions: {_items(assessment.dietary_restrictions)}

{_check_in_block(request.check_in, PlanKind.MEAL)}

Return a JSON object with this exact structure:
{MEAL_PLAN_STRUCTURE}"""

    return PromptPair(system=_system_prompt(MEAL_SYSTEM_PROMPT, request, PlanKind.MEAL), user=user)


def build_workout_plan_prompt(request: GenerationRequest) -> PromptPair:
    """Build the system and user prompts for a workout plan.

    Args:
        request: Subject data, target language and plan duration

    Returns:
        PromptPair with the rendered prompts
    """
    rules = get_language_rules(request.language)
    assessment = request.assessment

    user = f"""Create a {request.plan_duration_days}-day workout plan {rules.output_directive} for a user with the following profile:

{_profile_block(request)}

SCHEDULE AVAILABILITY: {_schedule(assessment.schedule_availability)}

MEDICAL CONSIDERATIONS:
- Medical Conditions: {_items(assessment.medical_conditions)}
- Injuries: {_items(assessment.injuries)}
- Exercise History: {_text(assessment.exercise_history)}

{_check_in_block(request.check_in, PlanKind.WORKOUT)}

Return a JSON object with this exact structure:
{WORKOUT_PLAN_STRUCTURE}"""

    return PromptPair(system=_system_prompt(WORKOUT_SYSTEM_PROMPT, request, PlanKind.WORKOUT), user=user)


def build_plan_prompt(request: GenerationRequest, kind: PlanKind) -> PromptPair:
    if kind == PlanKind.MEAL:
        return build_meal_plan_prompt(request)
    return build_workout_plan_prompt(request)
