"""Coach suggestions and log analysis via an LLM, behind the rate gate."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

from pydantic import BaseModel

from nutrimind.domain.models import DailyLog, MealType, UserGoals, UserProfile
from nutrimind.domain.progress import DailyProgress
from nutrimind.domain.suggestions import (
    CoachSuggestion,
    ExerciseAnalysis,
    FoodAnalysis,
)
from nutrimind.services.notices import NoticeBoard
from nutrimind.services.rate_gate import (
    ANALYZE_EXERCISE_KEY,
    ANALYZE_FOOD_KEY,
    SUGGESTION_KEY,
    RateLimitedCallGate,
)

_logger = logging.getLogger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

SUGGESTION_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "positiveFood": _STRING_LIST,
        "positiveExercise": _STRING_LIST,
        "cautionFood": _STRING_LIST,
        "immediateAction": {"type": "string"},
        "motivationalMessage": {"type": "string"},
        "hydrationTip": {"type": "string"},
        "nextMealSuggestion": {
            "anyOf": [
                {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string"},
                        "calories": {
                            "anyOf": [
                                {"type": "integer", "minimum": 0},
                                {"type": "null"},
                            ]
                        },
                        "reason": {"anyOf": [{"type": "string"}, {"type": "null"}]},
                    },
                    "required": ["name", "calories", "reason"],
                    "additionalProperties": False,
                },
                {"type": "null"},
            ]
        },
    },
    "required": [
        "positiveFood",
        "positiveExercise",
        "cautionFood",
        "immediateAction",
        "motivationalMessage",
        "hydrationTip",
        "nextMealSuggestion",
    ],
    "additionalProperties": False,
}

FOOD_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "calories": {"type": "number", "minimum": 0},
                    "protein": {"type": "number", "minimum": 0},
                    "carbs": {"type": "number", "minimum": 0},
                    "fat": {"type": "number", "minimum": 0},
                    "serving_quantity": {"type": "number", "minimum": 0},
                    "serving_unit": {"type": "string"},
                },
                "required": [
                    "name",
                    "calories",
                    "protein",
                    "carbs",
                    "fat",
                    "serving_quantity",
                    "serving_unit",
                ],
                "additionalProperties": False,
            },
        }
    },
    "required": ["items"],
    "additionalProperties": False,
}

EXERCISE_ANALYSIS_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"type": "string"},
        "duration": {"type": "number", "exclusiveMinimum": 0},
        "calories_burned": {"type": "number", "minimum": 0},
    },
    "required": ["name", "duration", "calories_burned"],
    "additionalProperties": False,
}


class SuggestionClient(Protocol):
    """Interface for structured LLM completions."""

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        response_model: type[ResponseT],
    ) -> ResponseT:
        """Return the completion validated as ``response_model``."""


@dataclass(frozen=True)
class SuggestionContext:
    """Inputs the coach needs to comment on the current day."""

    profile: UserProfile
    goals: UserGoals
    log: DailyLog
    progress: DailyProgress


@dataclass
class SuggestionService:
    """Debounced coach suggestions plus on-demand food/exercise analysis."""

    client: SuggestionClient
    gate: RateLimitedCallGate
    notices: NoticeBoard
    model: str
    reasoning_effort: str | None = None
    store: bool = False
    debounce_seconds: float = 3.0
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    latest: CoachSuggestion | None = None
    _timer: "asyncio.Task[CoachSuggestion | None] | None" = field(
        default=None, repr=False
    )

    def schedule(self, context: SuggestionContext) -> None:
        """Fetch a suggestion once changes have settled for ``debounce_seconds``."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._debounced(context))

    async def wait_scheduled(self) -> CoachSuggestion | None:
        """Wait for the pending debounced fetch, if any."""
        if self._timer is None:
            return None
        try:
            return await self._timer
        except asyncio.CancelledError:
            return None

    async def fetch_now(self, context: SuggestionContext) -> CoachSuggestion | None:
        """Fetch a suggestion immediately, still respecting the cooldown."""
        raw = await self._guarded_call(
            SUGGESTION_KEY,
            prompt=_suggestion_prompt(context),
            schema_name="coach_suggestion",
            schema=SUGGESTION_SCHEMA,
            model_type=CoachSuggestion,
            failure="Couldn't refresh your coach suggestion.",
        )
        if isinstance(raw, CoachSuggestion):
            self.latest = raw
            return raw
        return None

    async def analyze_food(
        self, description: str, meal_type: MealType
    ) -> FoodAnalysis | None:
        """Extract foods and macros from a free-text meal description."""
        prompt = (
            f"Identify the foods in this {meal_type.value.lower()} description and "
            "estimate calories and grams of protein, carbs and fat for each: "
            f"{description}"
        )
        result = await self._guarded_call(
            ANALYZE_FOOD_KEY,
            prompt=prompt,
            schema_name="food_analysis",
            schema=FOOD_ANALYSIS_SCHEMA,
            model_type=FoodAnalysis,
            failure="Sorry, I couldn't analyze that food.",
        )
        return result if isinstance(result, FoodAnalysis) else None

    async def analyze_exercise(self, description: str) -> ExerciseAnalysis | None:
        """Estimate duration and calories burned for an exercise description."""
        prompt = (
            "Estimate the duration in minutes and calories burned for this "
            f"exercise: {description}"
        )
        result = await self._guarded_call(
            ANALYZE_EXERCISE_KEY,
            prompt=prompt,
            schema_name="exercise_analysis",
            schema=EXERCISE_ANALYSIS_SCHEMA,
            model_type=ExerciseAnalysis,
            failure="Sorry, I couldn't analyze that exercise.",
        )
        return result if isinstance(result, ExerciseAnalysis) else None

    def close(self) -> None:
        """Cancel a pending debounced fetch."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()

    async def _debounced(self, context: SuggestionContext) -> CoachSuggestion | None:
        await self.sleep(self.debounce_seconds)
        return await self.fetch_now(context)

    async def _guarded_call(  # noqa: PLR0913
        self,
        key: str,
        *,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        model_type: type[ResponseT],
        failure: str,
    ) -> ResponseT | None:
        check = self.gate.check_cooldown(key)
        if not check.can_call:
            self.notices.post(check.message or "Please wait a moment.", level="info")
            return None
        self.gate.record_call(key)
        try:
            return await self.client.complete(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                prompt=prompt,
                schema_name=schema_name,
                schema=schema,
                response_model=model_type,
            )
        except Exception:
            _logger.exception("Suggestion call %s failed", schema_name)
            self.gate.reset(key)
            self.notices.post(failure)
            return None


def _suggestion_prompt(context: SuggestionContext) -> str:
    progress = context.progress
    energy = progress.energy
    foods = ", ".join(f"{f.name} ({f.calories:.0f} kcal)" for f in context.log.foods)
    exercises = ", ".join(
        f"{e.name} ({e.calories_burned:.0f} kcal)" for e in context.log.exercises
    )
    return (
        "You are a nutrition coach. Give short, specific suggestions for the rest "
        "of the day.\n"
        f"Profile: {context.profile.age}y {context.profile.gender.value}, "
        f"{context.profile.weight:.1f} kg, {context.profile.height:.0f} cm.\n"
        f"Goal: {context.goals.weight_goal.value} to "
        f"{context.goals.target_weight:.1f} kg in "
        f"{context.goals.goal_timeline} weeks.\n"
        f"Consumed {energy.calories_consumed:.0f} of "
        f"{progress.projection.goal_calories} kcal target; "
        f"burned {energy.total_calories_out:.0f} kcal; "
        f"protein {progress.macros.protein:.0f} g, "
        f"carbs {progress.macros.carbs:.0f} g, "
        f"fat {progress.macros.fat:.0f} g; water {progress.water_intake:.0f} of "
        f"{progress.projection.water_target:.0f} ml.\n"
        f"Foods: {foods or 'none'}.\n"
        f"Exercises: {exercises or 'none'}."
    )
