"""Goal projection: dynamic calorie and macro targets."""

from datetime import date as date_type

from nutrimind.domain.models import UserGoals, UserProfile, WeightLogEntry
from nutrimind.domain.progress import GoalProjection
from nutrimind.services.metrics import round_half_up

KCAL_PER_KG = 7700
WATER_ML_PER_KG = 35
DEFAULT_WATER_TARGET_ML = 2500
DEFAULT_WEIGHT_KG = 70.0


def current_weight(
    weight_log: list[WeightLogEntry], profile: UserProfile | None
) -> float:
    """Return the latest logged weight, falling back to the profile weight."""
    if weight_log:
        return max(weight_log, key=lambda entry: entry.date).weight
    if profile is not None:
        return profile.weight
    return DEFAULT_WEIGHT_KG


def days_elapsed(goals: UserGoals, log_count: int, today: str) -> int:
    """Return how many days of the goal timeline have passed.

    Goals carrying a start date use the calendar difference. Older goals
    without one fall back to counting recorded daily logs.
    """
    if goals.start_date:
        delta = date_type.fromisoformat(today) - date_type.fromisoformat(
            goals.start_date
        )
        return max(delta.days, 0)
    return max(log_count - 1, 0)


def project_goal(
    total_calories_out: float,
    goals: UserGoals,
    weight: float,
    elapsed_days: int,
    *,
    has_profile: bool = True,
) -> GoalProjection:
    """Spread the calorie gap to the target weight over the remaining days."""
    weight_diff_kg = goals.target_weight - weight
    total_calorie_diff = weight_diff_kg * KCAL_PER_KG
    days_remaining = goals.goal_timeline * 7 - elapsed_days
    daily_adjustment = (
        total_calorie_diff / days_remaining if days_remaining > 0 else 0.0
    )
    return GoalProjection(
        current_weight=weight,
        weight_diff_kg=weight_diff_kg,
        days_remaining=days_remaining,
        daily_adjustment=daily_adjustment,
        goal_calories=round_half_up(total_calories_out + daily_adjustment),
        protein_target=total_calories_out * 0.30 / 4,
        carb_target=total_calories_out * 0.40 / 4,
        fat_target=total_calories_out * 0.30 / 9,
        water_target=(
            weight * WATER_ML_PER_KG if has_profile else DEFAULT_WATER_TARGET_ML
        ),
    )


def start_weight_before(
    weight_log: list[WeightLogEntry], today: str, fallback: float
) -> float:
    """Return the most recent weight logged strictly before ``today``."""
    earlier = [entry for entry in weight_log if entry.date < today]
    if not earlier:
        return fallback
    return max(earlier, key=lambda entry: entry.date).weight


def projected_weight(start_weight: float, net_calories: float) -> float:
    """Estimate today's weight from the day's calorie balance."""
    return round(start_weight + net_calories / KCAL_PER_KG, 2)
