"""Supabase-backed persistence gateway."""

import asyncio
from dataclasses import dataclass

from supabase import Client

from nutrimind.adapters.payloads import nutrients_to_payload, parse_user_data
from nutrimind.domain.models import ExerciseLog, FoodLog, NeatLog, UserData, UserGoals
from nutrimind.errors import GatewayError
from nutrimind.services.tracker import PersistenceGateway

_LOG_KEY = "user_email,date"


@dataclass
class SupabasePersistenceGateway(PersistenceGateway):
    """Stores one user's tracker data in Supabase tables keyed by email."""

    client: Client
    user_email: str

    async def fetch_user_data(self) -> UserData | None:
        """Assemble the bulk user payload from the per-entity tables."""
        users = await self._execute(
            self.client.table("users")
            .select("email, weight, height, age, gender, country, start_weight")
            .eq("email", self.user_email)
            .limit(1)
        )
        if not users:
            return None
        user = users[0]
        days = await self._rows_for("daily_logs", "date, water_intake")
        foods = await self._rows_for(
            "food_logs",
            "id, date, name, calories, meal_type, serving_quantity, serving_unit, "
            "nutrients, logged_at",
        )
        exercises = await self._rows_for(
            "exercise_logs", "id, date, name, duration, calories_burned, logged_at"
        )
        neat = await self._rows_for("neat_logs", "id, date, name, calories")
        weights = await self._rows_for("weight_logs", "date, weight")
        goals = await self._rows_for(
            "user_goals", "target_weight, weight_goal, goal_timeline, start_date"
        )

        logs: dict[str, dict[str, object]] = {}

        def _log(date: str) -> dict[str, object]:
            return logs.setdefault(
                date,
                {
                    "date": date,
                    "foods": [],
                    "exercises": [],
                    "neatActivities": [],
                    "waterIntake": 0,
                },
            )

        for row in days:
            _log(str(row["date"]))["waterIntake"] = row.get("water_intake") or 0
        for row in foods:
            _log(str(row["date"]))["foods"].append(  # type: ignore[union-attr]
                {
                    "id": row.get("id"),
                    "name": row.get("name"),
                    "calories": row.get("calories"),
                    "mealType": row.get("meal_type"),
                    "servingQuantity": row.get("serving_quantity"),
                    "servingUnit": row.get("serving_unit"),
                    "nutrients": row.get("nutrients"),
                    "timestamp": row.get("logged_at"),
                }
            )
        for row in exercises:
            _log(str(row["date"]))["exercises"].append(  # type: ignore[union-attr]
                {
                    "id": row.get("id"),
                    "name": row.get("name"),
                    "duration": row.get("duration"),
                    "caloriesBurned": row.get("calories_burned"),
                    "timestamp": row.get("logged_at"),
                }
            )
        for row in neat:
            _log(str(row["date"]))["neatActivities"].append(  # type: ignore[union-attr]
                {
                    "id": row.get("id"),
                    "name": row.get("name"),
                    "calories": row.get("calories"),
                }
            )

        payload: dict[str, object] = {
            "user": {
                "email": user.get("email"),
                "weight": user.get("weight"),
                "height": user.get("height"),
                "age": user.get("age"),
                "gender": user.get("gender"),
                "country": user.get("country"),
                "startWeight": user.get("start_weight"),
            },
            "dailyLogs": sorted(logs.values(), key=lambda log: str(log["date"])),
            "weightLog": [
                {"date": row.get("date"), "weight": row.get("weight")}
                for row in weights
            ],
        }
        if goals:
            payload["userGoals"] = {
                "targetWeight": goals[0].get("target_weight"),
                "weightGoal": goals[0].get("weight_goal"),
                "goalTimeline": goals[0].get("goal_timeline"),
                "startDate": goals[0].get("start_date"),
            }
        return parse_user_data(payload)

    async def update_goals(self, goals: UserGoals) -> UserGoals:
        await self._execute(
            self.client.table("user_goals").upsert(
                {
                    "user_email": self.user_email,
                    "target_weight": goals.target_weight,
                    "weight_goal": goals.weight_goal.value,
                    "goal_timeline": goals.goal_timeline,
                    "start_date": goals.start_date,
                },
                on_conflict="user_email",
            )
        )
        return goals

    async def add_foods(self, day: str, foods: list[FoodLog]) -> None:
        if not foods:
            return
        await self._execute(
            self.client.table("food_logs").insert(
                [
                    {
                        "id": food.id,
                        "user_email": self.user_email,
                        "date": day,
                        "name": food.name,
                        "calories": food.calories,
                        "meal_type": food.meal_type.value,
                        "serving_quantity": food.serving_quantity,
                        "serving_unit": food.serving_unit,
                        "nutrients": nutrients_to_payload(food.nutrients),
                        "logged_at": food.timestamp.isoformat(),
                    }
                    for food in foods
                ]
            )
        )

    async def update_food(self, food_id: str, changes: dict[str, object]) -> None:
        await self._update_owned("food_logs", food_id, _columns(changes))

    async def delete_food(self, food_id: str) -> None:
        await self._delete_owned("food_logs", food_id)

    async def add_exercise(self, day: str, exercise: ExerciseLog) -> None:
        await self._execute(
            self.client.table("exercise_logs").insert(
                {
                    "id": exercise.id,
                    "user_email": self.user_email,
                    "date": day,
                    "name": exercise.name,
                    "duration": exercise.duration,
                    "calories_burned": exercise.calories_burned,
                    "logged_at": exercise.timestamp.isoformat(),
                }
            )
        )

    async def update_exercise(
        self, exercise_id: str, changes: dict[str, object]
    ) -> None:
        await self._update_owned("exercise_logs", exercise_id, _columns(changes))

    async def delete_exercise(self, exercise_id: str) -> None:
        await self._delete_owned("exercise_logs", exercise_id)

    async def add_neat_activity(self, day: str, activity: NeatLog) -> None:
        await self._execute(
            self.client.table("neat_logs").insert(
                {
                    "id": activity.id,
                    "user_email": self.user_email,
                    "date": day,
                    "name": activity.name,
                    "calories": activity.calories,
                }
            )
        )

    async def update_neat_activity(self, activity_id: str, calories: float) -> None:
        await self._update_owned("neat_logs", activity_id, {"calories": calories})

    async def remove_neat_activity(self, activity_id: str) -> None:
        await self._delete_owned("neat_logs", activity_id)

    async def add_water(self, day: str, amount: float) -> None:
        """Increment the day's water total."""
        rows = await self._execute(
            self.client.table("daily_logs")
            .select("water_intake")
            .eq("user_email", self.user_email)
            .eq("date", day)
            .limit(1)
        )
        current = float(rows[0].get("water_intake") or 0) if rows else 0.0
        await self._execute(
            self.client.table("daily_logs").upsert(
                {
                    "user_email": self.user_email,
                    "date": day,
                    "water_intake": current + amount,
                },
                on_conflict=_LOG_KEY,
            )
        )

    async def add_weight(self, day: str, weight: float) -> None:
        await self._execute(
            self.client.table("weight_logs").upsert(
                {"user_email": self.user_email, "date": day, "weight": weight},
                on_conflict=_LOG_KEY,
            )
        )

    async def _rows_for(self, table: str, columns: str) -> list[dict[str, object]]:
        return await self._execute(
            self.client.table(table).select(columns).eq("user_email", self.user_email)
        )

    async def _update_owned(
        self, table: str, row_id: str, payload: dict[str, object]
    ) -> None:
        if not payload:
            return
        await self._execute(
            self.client.table(table)
            .update(payload)
            .eq("id", row_id)
            .eq("user_email", self.user_email)
        )

    async def _delete_owned(self, table: str, row_id: str) -> None:
        await self._execute(
            self.client.table(table)
            .delete()
            .eq("id", row_id)
            .eq("user_email", self.user_email)
        )

    async def _execute(  # type: ignore[no-untyped-def]
        self, query
    ) -> list[dict[str, object]]:
        # The sync client blocks on I/O, so it runs off the event loop.
        try:
            response = await asyncio.to_thread(query.execute)
        except Exception as exc:
            raise GatewayError(f"Supabase request failed: {exc}") from exc
        return list(response.data or [])


def _columns(changes: dict[str, object]) -> dict[str, object]:
    mapping = {
        "name": "name",
        "calories": "calories",
        "caloriesBurned": "calories_burned",
    }
    return {mapping[key]: value for key, value in changes.items() if key in mapping}
