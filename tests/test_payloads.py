"""Tests for the gateway wire format."""

from datetime import UTC, datetime

from nutrimind.adapters.payloads import (
    daily_log_to_payload,
    goals_to_payload,
    parse_daily_log,
    parse_goals,
    parse_profile,
    parse_user_data,
)
from nutrimind.domain.models import Gender, MealType, UserGoals, WeightGoal


def test_profile_defaults_and_gender_fallback() -> None:
    profile = parse_profile({"email": "a@b.c", "weight": "72.5", "gender": "Unknown"})

    assert profile.weight == 72.5
    assert profile.height == 170
    assert profile.gender is Gender.FEMALE
    assert profile.start_weight is None


def test_goals_round_trip_keeps_start_date() -> None:
    goals = UserGoals(70, WeightGoal.GAIN, 6, start_date="2024-05-10")

    assert parse_goals(goals_to_payload(goals)) == goals


def test_goals_without_start_date_omit_it() -> None:
    payload = goals_to_payload(UserGoals(70))

    assert "startDate" not in payload
    assert parse_goals({"targetWeight": 70, "weightGoal": "bogus"}).weight_goal is (
        WeightGoal.MAINTAIN
    )


def test_daily_log_parsing_tolerates_garbage() -> None:
    log = parse_daily_log(
        {
            "date": "2024-05-10",
            "foods": [
                {"id": "f1", "name": "Cake", "calories": "NaN", "mealType": "Brunch"},
                "not-a-food",
            ],
            "exercises": None,
            "waterIntake": -100,
        }
    )

    [food] = log.foods
    assert food.calories == 0
    assert food.meal_type is MealType.SNACKS
    assert food.timestamp.tzinfo is not None
    assert log.exercises == ()
    assert log.water_intake == 0


def test_daily_log_serialization_uses_camel_case() -> None:
    log = parse_daily_log(
        {
            "date": "2024-05-10",
            "exercises": [
                {
                    "id": "e1",
                    "name": "Swim",
                    "duration": 45,
                    "caloriesBurned": 400,
                    "timestamp": "2024-05-10T07:30:00",
                }
            ],
            "neatActivities": [{"id": "neat-1", "name": "Stairs", "calories": 40}],
            "waterIntake": 500,
        }
    )

    payload = daily_log_to_payload(log)

    assert payload["waterIntake"] == 500
    assert payload["exercises"][0]["caloriesBurned"] == 400  # type: ignore[index]
    assert log.exercises[0].timestamp == datetime(2024, 5, 10, 7, 30, tzinfo=UTC)
    assert payload["neatActivities"] == [
        {"id": "neat-1", "name": "Stairs", "calories": 40}
    ]


def test_user_data_skips_logs_without_dates() -> None:
    data = parse_user_data(
        {
            "user": {"email": "a@b.c", "weight": 60, "gender": "female"},
            "dailyLogs": [{"foods": []}, {"date": "2024-05-10"}],
        }
    )

    assert data is not None
    assert [log.date for log in data.daily_logs] == ["2024-05-10"]
    assert data.user_goals is None
    assert data.weight_log == []
