"""Tests for energy-balance and micronutrient calculations."""

from nutrimind.domain.models import (
    DailyLog,
    ExerciseDraft,
    FoodDraft,
    FoodNutrients,
    NeatDraft,
    NutrientInfo,
)
from nutrimind.services.energy import (
    compute_energy_balance,
    sum_macros,
    summarize_micronutrients,
)
from nutrimind.services.log_store import DailyLogStore
from nutrimind.services.metrics import compute_bmr
from tests.conftest import make_profile


def test_empty_log_net_is_negative_bmr() -> None:
    balance = compute_energy_balance(DailyLog.empty("2024-05-10"), 1500)

    assert balance.tef == 0
    assert balance.total_calories_out == 1500
    assert balance.net_calories == -1500


def test_tef_is_ten_percent_rounded() -> None:
    store = DailyLogStore()
    store.add_foods("2024-05-10", [FoodDraft(name="Feast", calories=1234)])

    balance = compute_energy_balance(store.get_or_empty("2024-05-10"), 1500)

    assert balance.tef == 123


def test_end_to_end_day_balance() -> None:
    store = DailyLogStore()
    day = "2024-05-10"
    store.add_foods(
        day,
        [
            FoodDraft(
                name="Bowl",
                calories=500,
                nutrients=FoodNutrients.build({"Protein": 40, "Carbs": 50, "Fat": 10}),
            )
        ],
    )
    store.add_exercise(day, ExerciseDraft(name="Run", duration=30, calories_burned=300))
    store.add_neat_activity(day, NeatDraft(name="Walking", calories=100))
    log = store.get_or_empty(day)

    bmr = compute_bmr(make_profile(weight=80, height=180, age=25))
    balance = compute_energy_balance(log, bmr)
    macros = sum_macros(log)

    assert bmr == 1805
    assert balance.tef == 50
    assert balance.total_calories_out == 2255
    assert balance.net_calories == -1755
    assert balance.net_calories == balance.calories_consumed - (
        balance.bmr + balance.neat_burn + balance.exercise_burn + balance.tef
    )
    assert (macros.protein, macros.carbs, macros.fat) == (40, 50, 10)


def test_micronutrients_are_scored_against_targets() -> None:
    store = DailyLogStore()
    store.add_foods(
        "2024-05-10",
        [
            FoodDraft(
                name="Orange",
                calories=60,
                nutrients=FoodNutrients.build(
                    micros=[
                        NutrientInfo("Vitamin C", 90, "mg"),
                        NutrientInfo("Fiber", 14),
                        NutrientInfo("Unobtainium", 5),
                    ]
                ),
            )
        ],
    )

    nutrients, status = summarize_micronutrients(store.get_or_empty("2024-05-10"))

    assert nutrients["vitaminC"].achieved == 90
    assert nutrients["fiber"].achieved == 14
    assert "Unobtainium" not in nutrients
    assert status.top_adequate == ["Vitamin C"]
    assert not any(item.startswith("Fiber") for item in status.top_deficiencies)
    assert "Iron (0% of target)" in status.top_deficiencies
    assert status.overall_score == 13
    assert status.recommendations


def test_micronutrients_for_empty_log() -> None:
    nutrients, status = summarize_micronutrients(DailyLog.empty("2024-05-10"))

    assert all(value.achieved == 0 for value in nutrients.values())
    assert status.overall_score == 0
    assert status.top_adequate == []
