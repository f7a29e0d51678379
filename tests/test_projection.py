"""Tests for the goal projection engine."""

from nutrimind.domain.models import UserGoals, WeightGoal, WeightLogEntry
from nutrimind.services.projection import (
    DEFAULT_WATER_TARGET_ML,
    current_weight,
    days_elapsed,
    project_goal,
    projected_weight,
    start_weight_before,
)
from tests.conftest import make_profile


def test_target_equal_to_current_weight_needs_no_adjustment() -> None:
    goals = UserGoals(target_weight=80, goal_timeline=12)

    projection = project_goal(2255, goals, 80, elapsed_days=0)

    assert projection.daily_adjustment == 0
    assert projection.goal_calories == 2255


def test_zero_timeline_falls_back_to_total_out() -> None:
    goals = UserGoals(target_weight=70, weight_goal=WeightGoal.LOSE, goal_timeline=0)

    projection = project_goal(2100.4, goals, 80, elapsed_days=3)

    assert projection.daily_adjustment == 0
    assert projection.goal_calories == 2100


def test_loss_goal_spreads_deficit_over_remaining_days() -> None:
    goals = UserGoals(target_weight=75, weight_goal=WeightGoal.LOSE, goal_timeline=10)

    projection = project_goal(2255, goals, 80, elapsed_days=0)

    assert projection.days_remaining == 70
    assert projection.daily_adjustment == -550
    assert projection.goal_calories == 1705
    assert projection.weight_diff_kg == -5


def test_overdue_goal_stops_adjusting() -> None:
    goals = UserGoals(target_weight=75, goal_timeline=1)

    projection = project_goal(2000, goals, 80, elapsed_days=10)

    assert projection.days_remaining == -3
    assert projection.daily_adjustment == 0


def test_macro_and_water_targets() -> None:
    goals = UserGoals(target_weight=80)

    projection = project_goal(2000, goals, 80, elapsed_days=0)
    without_profile = project_goal(2000, goals, 80, elapsed_days=0, has_profile=False)

    assert projection.protein_target == 150
    assert projection.carb_target == 200
    assert round(projection.fat_target, 2) == 66.67
    assert projection.water_target == 2800
    assert without_profile.water_target == DEFAULT_WATER_TARGET_ML


def test_days_elapsed_uses_goal_start_date() -> None:
    goals = UserGoals(target_weight=75, start_date="2024-05-01")

    assert days_elapsed(goals, log_count=1, today="2024-05-10") == 9
    assert days_elapsed(goals, log_count=1, today="2024-04-20") == 0


def test_days_elapsed_falls_back_to_log_count() -> None:
    goals = UserGoals(target_weight=75)

    assert days_elapsed(goals, log_count=3, today="2024-05-10") == 2
    assert days_elapsed(goals, log_count=0, today="2024-05-10") == 0


def test_current_weight_prefers_latest_entry() -> None:
    log = [
        WeightLogEntry(date="2024-05-08", weight=79.5),
        WeightLogEntry(date="2024-05-01", weight=81.0),
    ]

    assert current_weight(log, make_profile(weight=82)) == 79.5
    assert current_weight([], make_profile(weight=82)) == 82


def test_projected_weight_from_previous_entry() -> None:
    log = [
        WeightLogEntry(date="2024-05-09", weight=80.0),
        WeightLogEntry(date="2024-05-10", weight=79.0),
    ]

    start = start_weight_before(log, "2024-05-10", fallback=85.0)

    assert start == 80.0
    assert projected_weight(start, -1755) == 79.77
    assert start_weight_before([], "2024-05-10", fallback=85.0) == 85.0
