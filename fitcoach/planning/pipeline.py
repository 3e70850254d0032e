"""Plan generation pipeline.

Prompt Builder -> Constrained Generator -> Response Validator -> caller.

One sequential chain per request with no shared mutable state, so
concurrent requests need no locking. Nothing is persisted here: the
caller receives a validated plan or a typed error and owns storage,
superseding older plans and user-facing messaging.
"""

from dataclasses import dataclass
from typing import Generic

from loguru import logger

from fitcoach.config.settings import settings as app_settings
from fitcoach.core.observe import get_default_telemetry, trace
from fitcoach.core.telemetry import Telemetry
from fitcoach.planning.llm.generator import ConstrainedGenerator
from fitcoach.planning.llm.prompts import build_plan_prompt
from fitcoach.planning.request import GenerationRequest, Language, PlanKind
from fitcoach.planning.schemas import MealPlan, PlanModel, WorkoutPlan
from fitcoach.planning.validation import validate_plan
from fitcoach.services.llm.provider import PydanticAIProvider
from fitcoach.services.llm.types import GenerationSettings, OutputT, StructuredCompletionProvider, TokenUsage

PLAN_MODELS: dict[PlanKind, type[PlanModel]] = {
    PlanKind.MEAL: MealPlan,
    PlanKind.WORKOUT: WorkoutPlan,
}


@dataclass(frozen=True)
class GeneratedPlan(Generic[OutputT]):
    """A validated plan and how it was obtained."""

    kind: PlanKind
    plan: OutputT
    usage: TokenUsage
    attempts: int
    model_name: str


def settings_from_config() -> GenerationSettings:
    return GenerationSettings(
        temperature=app_settings.plan_temperature,
        max_tokens=app_settings.plan_max_tokens,
        max_attempts=app_settings.plan_max_attempts,
        timeout=app_settings.plan_request_timeout,
    )


class PlanGenerationPipeline:
    """Builds prompts, generates, and re-validates meal and workout plans."""

    def __init__(
        self,
        provider: StructuredCompletionProvider | None = None,
        telemetry: Telemetry | None = None,
        settings: GenerationSettings | None = None,
        generator: ConstrainedGenerator | None = None,
    ) -> None:
        self.telemetry = telemetry or get_default_telemetry()
        self.settings = settings or settings_from_config()
        if generator is None:
            if provider is None:
                provider = PydanticAIProvider()
            generator = ConstrainedGenerator(
                provider,
                telemetry=self.telemetry,
                base_delay=app_settings.retry_base_delay,
                max_delay=app_settings.retry_max_delay,
            )
        self.generator = generator

    async def generate(self, request: GenerationRequest, kind: PlanKind) -> GeneratedPlan:
        """Run the full pipeline for one request.

        Raises:
            ProviderFatalError: Provider auth/config failure
            GenerationExhaustedError: Transient failures consumed the retry budget
            PlanValidationError: Provider output failed re-validation (never retried)
        """
        plan_model = PLAN_MODELS[kind]
        metadata = {
            "plan_kind": kind.value,
            "subject_id": request.profile.id,
            "language": request.language.value,
            "plan_duration_days": request.plan_duration_days,
            "has_check_in": request.check_in is not None,
        }

        with trace(f"plan.generate.{kind.value}", metadata=metadata):
            logger.info("Generating plan", **metadata)
            prompt = build_plan_prompt(request, kind)
            result = await self.generator.generate(prompt, plan_model, self.settings, plan_kind=kind.value)
            outcome = validate_plan(result.output, plan_model, kind.value, self.telemetry)
            plan = outcome.unwrap(kind.value)

        logger.info(
            "Plan generated and validated",
            plan_kind=kind.value,
            subject_id=request.profile.id,
            days=len(plan.weekly_plan),
            attempts=result.attempts,
        )
        return GeneratedPlan(
            kind=kind,
            plan=plan,
            usage=result.usage,
            attempts=result.attempts,
            model_name=result.model_name,
        )

    async def generate_meal_plan(self, request: GenerationRequest) -> GeneratedPlan[MealPlan]:
        return await self.generate(request, PlanKind.MEAL)

    async def generate_workout_plan(self, request: GenerationRequest) -> GeneratedPlan[WorkoutPlan]:
        return await self.generate(request, PlanKind.WORKOUT)


USER_FACING_MESSAGES: dict[Language, str] = {
    Language.EN: "We couldn't generate your plan right now. Please try again.",
    Language.AR: "تعذّر إنشاء خطتك الآن. يرجى المحاولة مرة أخرى.",
}


def user_facing_message(error: BaseException, language: Language | str = Language.EN) -> str:
    """Generic failure text for end users; internal diagnostics stay in telemetry."""
    try:
        lang = Language(language)
    except ValueError:
        lang = Language.EN
    logger.debug("Rendering generic plan failure message", error_type=type(error).__name__, language=lang.value)
    return USER_FACING_MESSAGES[lang]
