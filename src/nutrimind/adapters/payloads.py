"""Conversion between domain models and the gateway's camelCase JSON."""

from datetime import UTC, datetime

from nutrimind.domain.models import (
    DailyLog,
    ExerciseLog,
    FoodLog,
    FoodNutrients,
    Gender,
    MealType,
    NeatLog,
    NutrientInfo,
    UserData,
    UserGoals,
    UserProfile,
    WeightGoal,
    WeightLogEntry,
    non_negative,
)


def parse_user_data(payload: object) -> UserData | None:
    """Parse the bulk user payload; return None when no user is present."""
    if not isinstance(payload, dict):
        return None
    raw_user = payload.get("user")
    if not isinstance(raw_user, dict):
        return None
    user = parse_profile(raw_user)
    raw_logs = payload.get("dailyLogs")
    raw_goals = payload.get("userGoals")
    raw_weights = payload.get("weightLog")
    return UserData(
        user=user,
        daily_logs=[
            parse_daily_log(row)
            for row in (raw_logs if isinstance(raw_logs, list) else [])
            if isinstance(row, dict) and row.get("date")
        ],
        user_goals=parse_goals(raw_goals) if isinstance(raw_goals, dict) else None,
        weight_log=[
            WeightLogEntry(
                date=str(row["date"]), weight=non_negative(row.get("weight"))
            )
            for row in (raw_weights if isinstance(raw_weights, list) else [])
            if isinstance(row, dict) and row.get("date")
        ],
    )


def parse_profile(row: dict[str, object]) -> UserProfile:
    """Parse a user profile row."""
    start_weight = row.get("startWeight")
    return UserProfile(
        email=str(row.get("email", "")),
        weight=non_negative(row.get("weight", 70)),
        height=non_negative(row.get("height", 170)),
        age=int(non_negative(row.get("age", 30))),
        gender=parse_gender(row.get("gender")),
        country=str(row.get("country") or ""),
        start_weight=non_negative(start_weight) if start_weight is not None else None,
    )


def parse_gender(value: object) -> Gender:
    """Parse a gender string, defaulting to female like the BMR fallback."""
    try:
        return Gender(str(value).lower())
    except ValueError:
        return Gender.FEMALE


def parse_goals(row: dict[str, object]) -> UserGoals:
    """Parse a goals payload."""
    try:
        weight_goal = WeightGoal(str(row.get("weightGoal", "maintain")))
    except ValueError:
        weight_goal = WeightGoal.MAINTAIN
    start_date = row.get("startDate")
    return UserGoals(
        target_weight=non_negative(row.get("targetWeight")),
        weight_goal=weight_goal,
        goal_timeline=int(non_negative(row.get("goalTimeline", 0))),
        start_date=str(start_date) if start_date else None,
    )


def goals_to_payload(goals: UserGoals) -> dict[str, object]:
    """Serialize goals for the gateway."""
    payload: dict[str, object] = {
        "targetWeight": goals.target_weight,
        "weightGoal": goals.weight_goal.value,
        "goalTimeline": goals.goal_timeline,
    }
    if goals.start_date:
        payload["startDate"] = goals.start_date
    return payload


def parse_daily_log(row: dict[str, object]) -> DailyLog:
    """Parse a daily log payload."""
    foods = row.get("foods")
    exercises = row.get("exercises")
    neat = row.get("neatActivities")
    return DailyLog(
        date=str(row["date"]),
        foods=tuple(
            parse_food(item)
            for item in (foods if isinstance(foods, list) else [])
            if isinstance(item, dict)
        ),
        exercises=tuple(
            parse_exercise(item)
            for item in (exercises if isinstance(exercises, list) else [])
            if isinstance(item, dict)
        ),
        neat_activities=tuple(
            NeatLog(
                id=str(item.get("id", "")),
                name=str(item.get("name", "")),
                calories=non_negative(item.get("calories")),
            )
            for item in (neat if isinstance(neat, list) else [])
            if isinstance(item, dict)
        ),
        water_intake=non_negative(row.get("waterIntake")),
    )


def parse_food(row: dict[str, object]) -> FoodLog:
    """Parse a food entry payload."""
    nutrients = row.get("nutrients") if isinstance(row.get("nutrients"), dict) else {}
    return FoodLog(
        id=str(row.get("id", "")),
        name=str(row.get("name", "")),
        calories=non_negative(row.get("calories")),
        meal_type=_parse_meal_type(row.get("mealType")),
        serving_quantity=non_negative(row.get("servingQuantity", 1)),
        serving_unit=str(row.get("servingUnit") or "serving"),
        nutrients=FoodNutrients.build(
            _parse_nutrient_list(nutrients.get("macros")),
            _parse_nutrient_list(nutrients.get("micros")),
        ),
        timestamp=_parse_timestamp(row.get("timestamp")),
    )


def parse_exercise(row: dict[str, object]) -> ExerciseLog:
    """Parse an exercise payload."""
    return ExerciseLog(
        id=str(row.get("id", "")),
        name=str(row.get("name", "")),
        duration=non_negative(row.get("duration")),
        calories_burned=non_negative(row.get("caloriesBurned")),
        timestamp=_parse_timestamp(row.get("timestamp")),
    )


def food_to_payload(food: FoodLog) -> dict[str, object]:
    """Serialize a logged food."""
    return {
        "id": food.id,
        "name": food.name,
        "calories": food.calories,
        "mealType": food.meal_type.value,
        "servingQuantity": food.serving_quantity,
        "servingUnit": food.serving_unit,
        "nutrients": nutrients_to_payload(food.nutrients),
        "timestamp": food.timestamp.isoformat(),
    }


def exercise_to_payload(exercise: ExerciseLog) -> dict[str, object]:
    """Serialize a logged exercise."""
    return {
        "id": exercise.id,
        "name": exercise.name,
        "duration": exercise.duration,
        "caloriesBurned": exercise.calories_burned,
        "timestamp": exercise.timestamp.isoformat(),
    }


def neat_to_payload(activity: NeatLog) -> dict[str, object]:
    """Serialize a NEAT activity."""
    return {"id": activity.id, "name": activity.name, "calories": activity.calories}


def nutrients_to_payload(nutrients: FoodNutrients) -> dict[str, object]:
    """Serialize nutrients as name/amount/unit lists."""
    return {
        "macros": [_nutrient_to_payload(item) for item in nutrients.macros],
        "micros": [_nutrient_to_payload(item) for item in nutrients.micros],
    }


def daily_log_to_payload(log: DailyLog) -> dict[str, object]:
    """Serialize a daily log in the gateway format."""
    return {
        "date": log.date,
        "foods": [food_to_payload(food) for food in log.foods],
        "exercises": [exercise_to_payload(item) for item in log.exercises],
        "neatActivities": [neat_to_payload(item) for item in log.neat_activities],
        "waterIntake": log.water_intake,
    }


def _nutrient_to_payload(item: NutrientInfo) -> dict[str, object]:
    return {"name": item.name, "amount": item.amount, "unit": item.unit}


def _parse_nutrient_list(raw: object) -> list[NutrientInfo]:
    if not isinstance(raw, list):
        return []
    return [
        NutrientInfo.create(
            str(item.get("name", "")),
            item.get("amount"),
            str(item.get("unit") or "g"),
        )
        for item in raw
        if isinstance(item, dict) and item.get("name")
    ]


def _parse_meal_type(value: object) -> MealType:
    try:
        return MealType(str(value))
    except ValueError:
        return MealType.SNACKS


def _parse_timestamp(value: object) -> datetime:
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return datetime.now(tz=UTC)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return datetime.now(tz=UTC)

