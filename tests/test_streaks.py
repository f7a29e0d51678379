"""Tests for streaks and the local calendar day."""

from datetime import UTC, datetime

from nutrimind.domain.models import DailyLog, FoodDraft
from nutrimind.services.log_store import DailyLogStore
from nutrimind.services.streaks import best_streak, current_streak, today_local


def _logs(*dates: str) -> list[DailyLog]:
    store = DailyLogStore()
    for day in dates:
        store.add_foods(day, [FoodDraft(name="Toast", calories=150)])
    return store.logs


def test_current_streak_counts_back_from_today() -> None:
    logs = _logs("2024-05-08", "2024-05-09", "2024-05-10")

    assert current_streak(logs, "2024-05-10") == 3


def test_current_streak_tolerates_empty_today() -> None:
    logs = _logs("2024-05-08", "2024-05-09")

    assert current_streak(logs, "2024-05-10") == 2


def test_current_streak_broken() -> None:
    logs = _logs("2024-05-05", "2024-05-06")

    assert current_streak(logs, "2024-05-10") == 0


def test_water_only_days_do_not_count() -> None:
    logs = [DailyLog(date="2024-05-10", water_intake=500)]

    assert current_streak(logs, "2024-05-10") == 0


def test_best_streak_finds_longest_run() -> None:
    logs = _logs(
        "2024-05-01", "2024-05-02", "2024-05-04", "2024-05-05", "2024-05-06"
    )

    assert best_streak(logs) == 3
    assert best_streak([]) == 0


def test_today_local_respects_timezone() -> None:
    moment = datetime(2024, 5, 10, 23, 30, tzinfo=UTC)

    assert today_local("UTC", moment) == "2024-05-10"
    assert today_local("Asia/Tokyo", moment) == "2024-05-11"
    assert today_local("America/New_York", moment) == "2024-05-10"
