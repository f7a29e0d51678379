"""Energy-balance calculations for a single daily log."""

import re

from nutrimind.domain.models import DailyLog
from nutrimind.domain.progress import (
    EnergyBalance,
    MacroTotals,
    MicroNutrientStatus,
    NutrientTarget,
)
from nutrimind.services.metrics import round_half_up

TEF_RATE = 0.10

MICRO_TARGETS: dict[str, float] = {
    "fiber": 28,
    "sugar": 25,
    "sodium": 2300,
    "potassium": 4700,
    "vitaminA": 900,
    "vitaminC": 90,
    "vitaminD": 20,
    "calcium": 1000,
    "iron": 18,
    "magnesium": 420,
    "zinc": 11,
    "cholesterol": 300,
}

_MICRO_KEYS = {key.lower(): key for key in MICRO_TARGETS}
_PERCENT_CAP = 200
_DEFICIENT_BELOW = 50
_ADEQUATE_ABOVE = 80


def compute_energy_balance(log: DailyLog, bmr: int) -> EnergyBalance:
    """Return consumed, burned and net calories for ``log``."""
    consumed = sum(food.calories for food in log.foods)
    exercise_burn = sum(exercise.calories_burned for exercise in log.exercises)
    neat_burn = sum(activity.calories for activity in log.neat_activities)
    tef = round_half_up(consumed * TEF_RATE)
    total_out = bmr + neat_burn + exercise_burn + tef
    return EnergyBalance(
        bmr=bmr,
        calories_consumed=consumed,
        exercise_burn=exercise_burn,
        neat_burn=neat_burn,
        tef=tef,
        total_calories_out=total_out,
        net_calories=consumed - total_out,
    )


def sum_macros(log: DailyLog) -> MacroTotals:
    """Sum protein, carbs and fat across the day's foods."""
    return MacroTotals(
        protein=sum(food.nutrients.macro("Protein") for food in log.foods),
        carbs=sum(food.nutrients.macro("Carbs") for food in log.foods),
        fat=sum(food.nutrients.macro("Fat") for food in log.foods),
    )


def summarize_micronutrients(
    log: DailyLog,
) -> tuple[dict[str, NutrientTarget], MicroNutrientStatus]:
    """Aggregate tracked micronutrients and score them against daily targets."""
    totals: dict[str, float] = {}
    for food in log.foods:
        for micro in food.nutrients.micros:
            key = _MICRO_KEYS.get(re.sub(r"\s+", "", micro.name).lower())
            if key is None:
                continue
            totals[key] = totals.get(key, 0.0) + micro.amount

    nutrients = {
        key: NutrientTarget(achieved=totals.get(key, 0.0), target=target)
        for key, target in MICRO_TARGETS.items()
    }

    deficiencies: list[str] = []
    adequate: list[str] = []
    score_total = 0
    for key, value in nutrients.items():
        ratio = value.achieved / value.target * 100
        percentage = min(round_half_up(ratio), _PERCENT_CAP)
        score_total += min(percentage, 100)
        if percentage < _DEFICIENT_BELOW:
            deficiencies.append(f"{_display_name(key)} ({percentage}% of target)")
        elif percentage > _ADEQUATE_ABOVE:
            adequate.append(_display_name(key))

    recommendations = []
    if deficiencies:
        recommendations.append(
            f"Focus on increasing your intake of {' and '.join(deficiencies[:2])}."
        )
    status = MicroNutrientStatus(
        overall_score=round_half_up(score_total / len(nutrients)),
        top_deficiencies=deficiencies,
        top_adequate=adequate,
        recommendations=recommendations,
    )
    return nutrients, status


def _display_name(key: str) -> str:
    spaced = re.sub(r"([A-Z])", r" \1", key)
    return spaced[:1].upper() + spaced[1:]
