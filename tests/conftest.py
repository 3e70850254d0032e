"""Root conftest for all tests.

Shared plan documents, requests and a scripted provider. Nothing here
touches the network: the provider is a stub and sleeps are recorded
instead of awaited.
"""

import copy

import pytest

from fitcoach.core.telemetry import RecordingTelemetry
from fitcoach.planning.request import GenerationRequest
from fitcoach.services.llm.types import Completion, TokenUsage

MEAL_PLAN_DOCUMENT = {
    "weeklyPlan": {
        "monday": {
            "meals": [
                {
                    "name": "Oats with berries",
                    "type": "breakfast",
                    "time": "08:00",
                    "calories": 450,
                    "protein": 20,
                    "carbs": 60,
                    "fat": 12,
                    "ingredients": ["60g oats", "100g berries", "200ml milk"],
                    "instructions": ["Cook oats in milk", "Top with berries"],
                    "alternatives": ["Greek yogurt with granola"],
                },
                {
                    "name": "Grilled chicken salad",
                    "type": "lunch",
                    "time": "13:00",
                    "calories": 600,
                    "protein": 45,
                    "carbs": 30,
                    "fat": 25,
                    "ingredients": ["150g chicken breast", "mixed greens", "olive oil"],
                    "instructions": ["Grill chicken", "Toss with greens and oil"],
                },
            ],
            "dailyTotals": {"calories": 1050, "protein": 65, "carbs": 90, "fat": 37},
        },
        "tuesday": {
            "meals": [
                {
                    "name": "Lentil soup",
                    "type": "dinner",
                    "time": "19:00",
                    "calories": 520,
                    "protein": 28,
                    "carbs": 70,
                    "fat": 10,
                    "ingredients": ["200g red lentils", "1 onion", "cumin"],
                    "instructions": ["Simmer lentils with onion", "Blend and season"],
                }
            ],
            "dailyTotals": {"calories": 520, "protein": 28, "carbs": 70, "fat": 10},
        },
    },
    "weeklyTotals": {"calories": 1570, "protein": 93, "carbs": 160, "fat": 47},
    "notes": "Drink at least 2 liters of water per day.",
}

WORKOUT_PLAN_DOCUMENT = {
    "weeklyPlan": {
        "monday": {
            "workoutName": "Upper Body Strength",
            "duration": 45,
            "targetMuscles": ["chest", "back"],
            "warmup": {
                "exercises": [
                    {"name": "Arm circles", "duration": 60, "instructions": ["Circle arms forward", "Then backward"]}
                ]
            },
            "exercises": [
                {
                    "name": "Push-ups",
                    "sets": 3,
                    "reps": "10-12",
                    "rest": 60,
                    "targetMuscles": ["chest"],
                    "equipment": "bodyweight",
                },
                {
                    "name": "Dumbbell rows",
                    "sets": 3,
                    "reps": "12",
                    "rest": 60,
                    "notes": "Keep back flat",
                    "targetMuscles": ["back"],
                    "equipment": "dumbbells",
                },
            ],
            "cooldown": {
                "exercises": [{"name": "Chest stretch", "duration": 30, "instructions": ["Hold against a wall"]}]
            },
            "restDay": False,
        },
        "tuesday": {
            "workoutName": "Rest and recovery",
            "duration": 0,
            "exercises": [],
            "restDay": True,
        },
    },
    "progressionNotes": "Add one rep per set each week.",
    "safetyTips": ["Stop if you feel sharp pain", "Stay hydrated"],
}

REQUEST_DATA = {
    "profile": {"id": "user-1", "full_name": "Sam Taylor", "language": "en"},
    "assessment": {
        "goals": "Lose fat and build strength",
        "current_weight": 82.5,
        "height": 178,
        "experience_level": "intermediate",
        "food_preferences": ["chicken", "lentils"],
        "allergies": ["peanuts"],
        "dietary_restrictions": [],
        "schedule_availability": {"monday": "evening", "thursday": "morning"},
        "medical_conditions": [],
        "injuries": ["left knee"],
        "exercise_history": "Gym twice a week for a year",
    },
    "check_in": {
        "id": "checkin-1",
        "weight": 81.0,
        "energy_level": 7,
        "sleep_quality": 6,
        "dietary_adherence": 8,
        "workout_performance": "Improved squat depth",
        "new_injuries": None,
        "notes": "Busy week at work",
    },
    "language": "en",
    "plan_duration_days": 7,
}


class StubProvider:
    """Provider that replays scripted outcomes, one per call.

    Each outcome is either an exception instance (raised) or an output
    object (returned as the completion output).
    """

    name = "stub"

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def complete(self, system_prompt, user_prompt, output_type, settings):
        self.calls.append({"system": system_prompt, "user": user_prompt, "output_type": output_type, "settings": settings})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        return Completion(output=outcome, usage=TokenUsage(input_tokens=100, output_tokens=200), model_name="stub-model")


@pytest.fixture
def meal_plan_document():
    return copy.deepcopy(MEAL_PLAN_DOCUMENT)


@pytest.fixture
def workout_plan_document():
    return copy.deepcopy(WORKOUT_PLAN_DOCUMENT)


@pytest.fixture
def request_data():
    return copy.deepcopy(REQUEST_DATA)


@pytest.fixture
def generation_request(request_data):
    return GenerationRequest.model_validate(request_data)


@pytest.fixture
def arabic_request(request_data):
    request_data["language"] = "ar"
    request_data["profile"]["language"] = "ar"
    return GenerationRequest.model_validate(request_data)


@pytest.fixture
def telemetry():
    return RecordingTelemetry()


@pytest.fixture
def stub_provider():
    """Factory for scripted providers."""
    return StubProvider


@pytest.fixture
def sleeps():
    """Recorded sleep durations; pair with the ``fake_sleep`` fixture."""
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep
