"""In-memory store of per-date daily logs."""

import logging
from collections.abc import Callable
from dataclasses import replace
from uuid import uuid4

from nutrimind.domain.models import (
    DailyLog,
    ExerciseDraft,
    ExerciseLog,
    FoodDraft,
    FoodLog,
    NeatDraft,
    NeatLog,
    non_negative,
    utc_now,
)

LogUpdater = Callable[[DailyLog], DailyLog]

_logger = logging.getLogger(__name__)


class DailyLogStore:
    """Ordered collection holding at most one DailyLog per date.

    Every mutation goes through ``update_log``, which runs synchronously on
    the event loop, so two mutations issued in the same tick always see each
    other's effects.
    """

    def __init__(self, logs: list[DailyLog] | None = None) -> None:
        self._logs: list[DailyLog] = []
        self.replace_all(logs or [])

    @property
    def logs(self) -> list[DailyLog]:
        """Return a copy of all logs in insertion order."""
        return list(self._logs)

    def __len__(self) -> int:
        return len(self._logs)

    def get(self, date: str) -> DailyLog | None:
        """Return the log for ``date`` if one exists."""
        for log in self._logs:
            if log.date == date:
                return log
        return None

    def get_or_empty(self, date: str) -> DailyLog:
        """Return the log for ``date`` or an unsaved empty one."""
        return self.get(date) or DailyLog.empty(date)

    def replace_all(self, logs: list[DailyLog]) -> None:
        """Replace the collection, keeping the last log seen for each date."""
        merged: dict[str, DailyLog] = {}
        for log in logs:
            if log.date in merged:
                _logger.warning(
                    "Duplicate daily log for %s, keeping the last", log.date
                )
            merged[log.date] = log
        self._logs = list(merged.values())

    def update_log(self, date: str, updater: LogUpdater) -> DailyLog:
        """Apply ``updater`` to the log for ``date``, creating it if missing."""
        for index, log in enumerate(self._logs):
            if log.date == date:
                updated = updater(log)
                self._logs[index] = _keep_date(updated, date)
                return self._logs[index]
        created = _keep_date(updater(DailyLog.empty(date)), date)
        self._logs.append(created)
        return created

    def add_foods(self, date: str, drafts: list[FoodDraft]) -> list[FoodLog]:
        """Append foods with fresh ids and timestamps."""
        new_foods = [
            FoodLog(
                id=str(uuid4()),
                name=draft.name,
                calories=non_negative(draft.calories),
                meal_type=draft.meal_type,
                serving_quantity=non_negative(draft.serving_quantity),
                serving_unit=draft.serving_unit,
                nutrients=draft.nutrients,
                timestamp=utc_now(),
            )
            for draft in drafts
        ]
        self.update_log(
            date, lambda log: replace(log, foods=log.foods + tuple(new_foods))
        )
        return new_foods

    def update_food(
        self,
        date: str,
        food_id: str,
        name: str | None = None,
        calories: float | None = None,
    ) -> None:
        """Edit a food's name and/or calories; unknown ids are ignored."""

        def _edit(food: FoodLog) -> FoodLog:
            return replace(
                food,
                name=food.name if name is None else name,
                calories=food.calories if calories is None else non_negative(calories),
            )

        self.update_log(
            date,
            lambda log: replace(
                log,
                foods=tuple(_edit(f) if f.id == food_id else f for f in log.foods),
            ),
        )

    def delete_food(self, date: str, food_id: str) -> None:
        """Remove a food by id; unknown ids are ignored."""
        self.update_log(
            date,
            lambda log: replace(
                log, foods=tuple(f for f in log.foods if f.id != food_id)
            ),
        )

    def add_exercise(self, date: str, draft: ExerciseDraft) -> ExerciseLog:
        """Append an exercise with a fresh id and timestamp."""
        exercise = ExerciseLog(
            id=str(uuid4()),
            name=draft.name,
            duration=non_negative(draft.duration),
            calories_burned=non_negative(draft.calories_burned),
            timestamp=utc_now(),
        )
        self.update_log(
            date, lambda log: replace(log, exercises=log.exercises + (exercise,))
        )
        return exercise

    def update_exercise(
        self,
        date: str,
        exercise_id: str,
        name: str | None = None,
        calories_burned: float | None = None,
    ) -> None:
        """Edit an exercise's name and/or burn; unknown ids are ignored."""

        def _edit(exercise: ExerciseLog) -> ExerciseLog:
            return replace(
                exercise,
                name=exercise.name if name is None else name,
                calories_burned=(
                    exercise.calories_burned
                    if calories_burned is None
                    else non_negative(calories_burned)
                ),
            )

        self.update_log(
            date,
            lambda log: replace(
                log,
                exercises=tuple(
                    _edit(e) if e.id == exercise_id else e for e in log.exercises
                ),
            ),
        )

    def delete_exercise(self, date: str, exercise_id: str) -> None:
        """Remove an exercise by id; unknown ids are ignored."""
        self.update_log(
            date,
            lambda log: replace(
                log, exercises=tuple(e for e in log.exercises if e.id != exercise_id)
            ),
        )

    def add_neat_activity(self, date: str, draft: NeatDraft) -> NeatLog:
        """Append a NEAT activity with a generated id."""
        activity = NeatLog(
            id=f"neat-{uuid4()}",
            name=draft.name,
            calories=non_negative(draft.calories),
        )
        self.update_log(
            date,
            lambda log: replace(log, neat_activities=log.neat_activities + (activity,)),
        )
        return activity

    def update_neat_activity(
        self, date: str, activity_id: str, calories: float
    ) -> None:
        """Set a NEAT activity's calories; unknown ids are ignored."""
        amount = non_negative(calories)
        self.update_log(
            date,
            lambda log: replace(
                log,
                neat_activities=tuple(
                    replace(a, calories=amount) if a.id == activity_id else a
                    for a in log.neat_activities
                ),
            ),
        )

    def remove_neat_activity(self, date: str, activity_id: str) -> None:
        """Remove a NEAT activity by id; unknown ids are ignored."""
        self.update_log(
            date,
            lambda log: replace(
                log,
                neat_activities=tuple(
                    a for a in log.neat_activities if a.id != activity_id
                ),
            ),
        )

    def add_water(self, date: str, amount: float) -> DailyLog:
        """Add ``amount`` ml to the day's water intake."""
        if amount < 0:
            raise ValueError("Water amount must be non-negative")
        return self.update_log(
            date, lambda log: replace(log, water_intake=log.water_intake + amount)
        )


def _keep_date(log: DailyLog, date: str) -> DailyLog:
    if log.date != date:
        return replace(log, date=date)
    return log
