"""Language-specific prompt rules.

Each supported language maps to the instruction blocks injected into the
system and user prompts. Adding a language is a new table entry.
"""

from dataclasses import dataclass

from fitcoach.planning.request import Language, PlanKind


@dataclass(frozen=True)
class LanguageRules:
    """Prompt fragments for one target language.

    Attributes:
        display_name: Language name as used in prompt text
        cuisine_focus: Cuisine the nutritionist persona specializes in
        output_directive: Short phrase appended to "Create a N-day plan ..."
        meal_requirements: System-prompt block for meal plans ("" for none)
        workout_requirements: System-prompt block for workout plans ("" for none)
    """

    display_name: str
    cuisine_focus: str
    output_directive: str
    meal_requirements: str = ""
    workout_requirements: str = ""

    def requirements_for(self, kind: PlanKind) -> str:
        return self.meal_requirements if kind == PlanKind.MEAL else self.workout_requirements


_ARABIC_MEAL_REQUIREMENTS = """ARABIC LANGUAGE REQUIREMENTS:
- EVERY text field in the JSON output MUST be written in Arabic. This applies to every string value, not just the overall response.
- Meal names MUST be in Arabic (e.g., "بيض مخفوق بالسبانخ" not "Scrambled Eggs with Spinach")
- Ingredients MUST be in Arabic (e.g., "٣ بيضات" not "3 eggs")
- Instructions MUST be in Arabic
- Alternatives MUST be in Arabic
- Notes MUST be in Arabic
- Only JSON keys and the meal "type" values (breakfast, lunch, dinner, snack) stay in English
- Focus on Egyptian/Middle Eastern cuisine and locally available ingredients
- Use Arabic numerals or spelled-out Arabic numbers inside text fields"""

_ARABIC_WORKOUT_REQUIREMENTS = """ARABIC LANGUAGE REQUIREMENTS:
- EVERY text field in the JSON output MUST be written in Arabic. This applies to every string value, not just the overall response.
- Exercise names MUST be in Arabic (e.g., "تمرين الضغط" not "Push-ups")
- Workout names MUST be in Arabic (e.g., "تمارين الجزء العلوي" not "Upper Body")
- Muscle group names MUST be in Arabic (e.g., "الصدر، الظهر" not "chest, back")
- Instructions MUST be in Arabic
- Exercise notes, progression notes and safety tips MUST be in Arabic
- Equipment names MUST be in Arabic
- The "reps" text MUST be in Arabic (e.g., "١٠-١٢" or "٣٠ ثانية")
- Only JSON keys stay in English"""

LANGUAGE_RULES: dict[Language, LanguageRules] = {
    Language.EN: LanguageRules(
        display_name="English",
        cuisine_focus="international cuisine",
        output_directive="in English",
    ),
    Language.AR: LanguageRules(
        display_name="Arabic",
        cuisine_focus="Middle Eastern and Egyptian cuisine",
        output_directive="ENTIRELY IN ARABIC LANGUAGE (every name, ingredient, instruction and note)",
        meal_requirements=_ARABIC_MEAL_REQUIREMENTS,
        workout_requirements=_ARABIC_WORKOUT_REQUIREMENTS,
    ),
}


def get_language_rules(language: Language | str) -> LanguageRules:
    """Look up prompt rules, falling back to English for unknown languages."""
    try:
        return LANGUAGE_RULES[Language(language)]
    except (KeyError, ValueError):
        return LANGUAGE_RULES[Language.EN]
