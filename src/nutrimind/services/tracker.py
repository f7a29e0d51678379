"""Tracker session: local-first daily logs with background persistence."""

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Protocol

from nutrimind.domain.models import (
    DailyLog,
    ExerciseDraft,
    ExerciseLog,
    FoodDraft,
    FoodLog,
    NeatDraft,
    NeatLog,
    UserData,
    UserGoals,
    UserProfile,
    WeightLogEntry,
    non_negative,
)
from nutrimind.domain.progress import DailyProgress
from nutrimind.domain.suggestions import CoachSuggestion
from nutrimind.errors import GoalUpdateError, LoadError, SessionNotLoadedError
from nutrimind.services.energy import (
    compute_energy_balance,
    sum_macros,
    summarize_micronutrients,
)
from nutrimind.services.log_store import DailyLogStore
from nutrimind.services.metrics import bmr_or_default
from nutrimind.services.notices import NoticeBoard
from nutrimind.services.projection import (
    current_weight,
    days_elapsed,
    project_goal,
    projected_weight,
    start_weight_before,
)
from nutrimind.services.streaks import best_streak, current_streak, today_local
from nutrimind.services.suggestions import SuggestionContext, SuggestionService
from nutrimind.services.write_back import PendingWrite, WriteBackDispatcher

_logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    """Remote CRUD store behind the tracker."""

    async def fetch_user_data(self) -> UserData | None:
        """Return the user's profile, logs, goals and weight history."""

    async def update_goals(self, goals: UserGoals) -> UserGoals:
        """Replace the goals and return the confirmed record."""

    async def add_foods(self, day: str, foods: list[FoodLog]) -> None:
        """Persist new food entries."""

    async def update_food(self, food_id: str, changes: dict[str, object]) -> None:
        """Update a food entry's name and/or calories."""

    async def delete_food(self, food_id: str) -> None:
        """Delete a food entry."""

    async def add_exercise(self, day: str, exercise: ExerciseLog) -> None:
        """Persist a new exercise."""

    async def update_exercise(
        self, exercise_id: str, changes: dict[str, object]
    ) -> None:
        """Update an exercise's name and/or calories burned."""

    async def delete_exercise(self, exercise_id: str) -> None:
        """Delete an exercise."""

    async def add_neat_activity(self, day: str, activity: NeatLog) -> None:
        """Persist a new NEAT activity."""

    async def update_neat_activity(self, activity_id: str, calories: float) -> None:
        """Update a NEAT activity's calories."""

    async def remove_neat_activity(self, activity_id: str) -> None:
        """Delete a NEAT activity."""

    async def add_water(self, day: str, amount: float) -> None:
        """Add water intake in ml."""

    async def add_weight(self, day: str, weight: float) -> None:
        """Record the weight for a day."""


class TrackerSession:
    """One user's tracking session.

    Per-date mutations change local state synchronously and hand the remote
    write to the dispatcher; they never raise on remote failure. Goal updates
    are the exception: they are confirmed by the gateway before local goals
    change.
    """

    def __init__(  # noqa: PLR0913
        self,
        gateway: PersistenceGateway,
        dispatcher: WriteBackDispatcher,
        notices: NoticeBoard,
        suggestion_service: SuggestionService | None = None,
        timezone_name: str = "UTC",
        today_provider: Callable[[], str] | None = None,
    ) -> None:
        self.gateway = gateway
        self.dispatcher = dispatcher
        self.notices = notices
        self.suggestion_service = suggestion_service
        self.timezone_name = timezone_name
        self._today_provider = today_provider
        self.store = DailyLogStore()
        self.profile: UserProfile | None = None
        self.goals: UserGoals = UserGoals.defaults_for(None)
        self.weight_log: list[WeightLogEntry] = []
        self.loaded = False

    def today(self) -> str:
        """Return today's date key in the user's calendar."""
        if self._today_provider is not None:
            return self._today_provider()
        return today_local(self.timezone_name)

    async def load(self) -> None:
        """Fetch all user data, then replay writes that never reached the server."""
        try:
            data = await self.gateway.fetch_user_data()
        except Exception as exc:
            _logger.exception("Failed to load user data")
            self.notices.post(f"Error loading data: {exc}")
            raise LoadError("Failed to load user data") from exc
        if data is None:
            self.notices.post("Unable to retrieve profile. Please sign in again.")
            raise LoadError("No user returned by the gateway")

        today = self.today()
        self.profile = data.user
        self.store.replace_all(data.daily_logs)
        self.goals = data.user_goals or UserGoals.defaults_for(data.user)
        self.weight_log = list(data.weight_log) or [
            WeightLogEntry(date=today, weight=data.user.weight)
        ]
        self.loaded = True
        self._reconcile()

    def _reconcile(self) -> None:
        # In-flight writes may land after the snapshot was taken; re-apply them
        # locally and let the running task finish.
        for write in self.dispatcher.in_flight:
            if write.replay is not None:
                write.replay()
        failed = self.dispatcher.take_failed()
        if failed:
            _logger.info("Replaying %s unsaved change(s) after reload", len(failed))
        for write in failed:
            if write.replay is not None:
                write.replay()
            self.dispatcher.resubmit(write)

    async def close(self) -> None:
        """Cancel background work owned by this session."""
        if self.suggestion_service is not None:
            self.suggestion_service.close()
        await self.dispatcher.close()

    def today_log(self) -> DailyLog:
        return self.store.get_or_empty(self.today())

    def logs(self) -> list[DailyLog]:
        return self.store.logs

    @property
    def pending_writes(self) -> list[PendingWrite]:
        return self.dispatcher.pending

    @property
    def latest_suggestion(self) -> CoachSuggestion | None:
        if self.suggestion_service is None:
            return None
        return self.suggestion_service.latest

    def streaks(self) -> tuple[int, int]:
        """Return the current and best logging streaks."""
        logs = self.store.logs
        return current_streak(logs, self.today()), best_streak(logs)

    def daily_progress(self) -> DailyProgress:
        """Compute today's snapshot from the current inputs."""
        if not self.loaded:
            raise SessionNotLoadedError("User data has not been loaded")
        today = self.today()
        log = self.store.get_or_empty(today)
        energy = compute_energy_balance(log, bmr_or_default(self.profile))
        weight = current_weight(self.weight_log, self.profile)
        projection = project_goal(
            energy.total_calories_out,
            self.goals,
            weight,
            days_elapsed(self.goals, len(self.store), today),
            has_profile=self.profile is not None,
        )
        micro_nutrients, micro_status = summarize_micronutrients(log)
        fallback = self.profile.weight if self.profile else weight
        start = start_weight_before(self.weight_log, today, fallback)
        return DailyProgress(
            date=today,
            energy=energy,
            macros=sum_macros(log),
            projection=projection,
            water_intake=log.water_intake,
            projected_weight=(
                projected_weight(start, energy.net_calories)
                if log.has_activity
                else start
            ),
            micro_nutrients=micro_nutrients,
            micro_nutrient_status=micro_status,
        )

    async def update_goals(self, goals: UserGoals) -> UserGoals:
        """Save goals remotely first; local goals change only on confirmation."""
        if goals.start_date is None:
            goals = replace(goals, start_date=self.today())
        try:
            confirmed = await self.gateway.update_goals(goals)
        except Exception as exc:
            _logger.warning("Goal update failed: %s", exc)
            self.notices.post("Failed to update goals.")
            raise GoalUpdateError("Goal update was not confirmed") from exc
        self.goals = confirmed
        return confirmed

    def add_food(self, drafts: list[FoodDraft]) -> list[FoodLog]:
        day = self.today()
        foods = self.store.add_foods(day, drafts)

        def _replay() -> None:
            self._restore(day, lambda log: replace(log, foods=log.foods + tuple(foods)))

        self.dispatcher.submit(
            "save food", lambda: self.gateway.add_foods(day, foods), replay=_replay
        )
        self._schedule_suggestion()
        return foods

    def update_food(
        self, food_id: str, name: str | None = None, calories: float | None = None
    ) -> None:
        day = self.today()
        calories = _clamped(calories)
        self.store.update_food(day, food_id, name=name, calories=calories)
        changes = _changes(name=name, calories=calories)
        self.dispatcher.submit(
            "update food",
            lambda: self.gateway.update_food(food_id, changes),
            replay=lambda: self.store.update_food(
                day, food_id, name=name, calories=calories
            ),
        )

    def delete_food(self, food_id: str) -> None:
        day = self.today()
        self.store.delete_food(day, food_id)
        self.dispatcher.submit(
            "delete food",
            lambda: self.gateway.delete_food(food_id),
            replay=lambda: self.store.delete_food(day, food_id),
        )

    def add_exercise(self, draft: ExerciseDraft) -> ExerciseLog:
        day = self.today()
        exercise = self.store.add_exercise(day, draft)

        def _replay() -> None:
            self._restore(
                day, lambda log: replace(log, exercises=log.exercises + (exercise,))
            )

        self.dispatcher.submit(
            "save exercise",
            lambda: self.gateway.add_exercise(day, exercise),
            replay=_replay,
        )
        self._schedule_suggestion()
        return exercise

    def update_exercise(
        self,
        exercise_id: str,
        name: str | None = None,
        calories_burned: float | None = None,
    ) -> None:
        day = self.today()
        calories_burned = _clamped(calories_burned)
        self.store.update_exercise(
            day, exercise_id, name=name, calories_burned=calories_burned
        )
        changes = _changes(name=name, caloriesBurned=calories_burned)
        self.dispatcher.submit(
            "update exercise",
            lambda: self.gateway.update_exercise(exercise_id, changes),
            replay=lambda: self.store.update_exercise(
                day, exercise_id, name=name, calories_burned=calories_burned
            ),
        )

    def delete_exercise(self, exercise_id: str) -> None:
        day = self.today()
        self.store.delete_exercise(day, exercise_id)
        self.dispatcher.submit(
            "delete exercise",
            lambda: self.gateway.delete_exercise(exercise_id),
            replay=lambda: self.store.delete_exercise(day, exercise_id),
        )

    def add_neat_activity(self, draft: NeatDraft) -> NeatLog:
        day = self.today()
        activity = self.store.add_neat_activity(day, draft)

        def _replay() -> None:
            self._restore(
                day,
                lambda log: replace(
                    log, neat_activities=log.neat_activities + (activity,)
                ),
            )

        self.dispatcher.submit(
            "save activity",
            lambda: self.gateway.add_neat_activity(day, activity),
            replay=_replay,
        )
        return activity

    def update_neat_activity(self, activity_id: str, calories: float) -> None:
        day = self.today()
        calories = non_negative(calories)
        self.store.update_neat_activity(day, activity_id, calories)
        self.dispatcher.submit(
            "update activity",
            lambda: self.gateway.update_neat_activity(activity_id, calories),
            replay=lambda: self.store.update_neat_activity(day, activity_id, calories),
        )

    def remove_neat_activity(self, activity_id: str) -> None:
        day = self.today()
        self.store.remove_neat_activity(day, activity_id)
        self.dispatcher.submit(
            "remove activity",
            lambda: self.gateway.remove_neat_activity(activity_id),
            replay=lambda: self.store.remove_neat_activity(day, activity_id),
        )

    def add_water(self, amount: float) -> DailyLog:
        day = self.today()
        log = self.store.add_water(day, amount)
        self.dispatcher.submit(
            "save water",
            lambda: self.gateway.add_water(day, amount),
            replay=lambda: self.store.add_water(day, amount),
        )
        return log

    def add_weight(self, weight: float) -> WeightLogEntry:
        """Record today's weight, replacing any earlier entry for today."""
        day = self.today()
        entry = WeightLogEntry(date=day, weight=weight)
        self._upsert_weight(entry)
        self.dispatcher.submit(
            "save weight",
            lambda: self.gateway.add_weight(day, weight),
            replay=lambda: self._upsert_weight(entry),
        )
        return entry

    async def refresh_suggestion(self) -> CoachSuggestion | None:
        """Fetch a coach suggestion now, subject to the cooldown."""
        context = self._suggestion_context()
        if self.suggestion_service is None or context is None:
            return None
        return await self.suggestion_service.fetch_now(context)

    def _schedule_suggestion(self) -> None:
        context = self._suggestion_context()
        if self.suggestion_service is not None and context is not None:
            self.suggestion_service.schedule(context)

    def _suggestion_context(self) -> SuggestionContext | None:
        if self.profile is None or not self.loaded:
            return None
        return SuggestionContext(
            profile=self.profile,
            goals=self.goals,
            log=self.today_log(),
            progress=self.daily_progress(),
        )

    def _upsert_weight(self, entry: WeightLogEntry) -> None:
        others = [item for item in self.weight_log if item.date != entry.date]
        self.weight_log = [*others, entry]

    def _restore(self, day: str, updater: Callable[[DailyLog], DailyLog]) -> None:
        """Re-apply an addition unless the reloaded log already has it."""

        def _apply(log: DailyLog) -> DailyLog:
            candidate = updater(DailyLog.empty(day))
            entries = (*log.foods, *log.exercises, *log.neat_activities)
            known = {item.id for item in entries}
            new_ids = {
                item.id
                for item in (
                    *candidate.foods,
                    *candidate.exercises,
                    *candidate.neat_activities,
                )
            }
            if new_ids & known:
                return log
            return updater(log)

        self.store.update_log(day, _apply)


def _changes(**fields: object) -> dict[str, object]:
    return {key: value for key, value in fields.items() if value is not None}


def _clamped(value: float | None) -> float | None:
    return None if value is None else non_negative(value)
