"""Derived daily progress snapshots."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class EnergyBalance:
    """Energy in and out for one day."""

    bmr: int
    calories_consumed: float
    exercise_burn: float
    neat_burn: float
    tef: int
    total_calories_out: float
    net_calories: float


@dataclass(frozen=True)
class MacroTotals:
    """Summed macronutrients in grams."""

    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0


@dataclass(frozen=True)
class GoalProjection:
    """Calorie and macro targets steering toward the goal weight."""

    current_weight: float
    weight_diff_kg: float
    days_remaining: int
    daily_adjustment: float
    goal_calories: int
    protein_target: float
    carb_target: float
    fat_target: float
    water_target: float


@dataclass(frozen=True)
class NutrientTarget:
    """Achieved amount of a micronutrient against its daily target."""

    achieved: float
    target: float


@dataclass(frozen=True)
class MicroNutrientStatus:
    """Overall micronutrient score with the notable nutrients."""

    overall_score: int
    top_deficiencies: list[str] = field(default_factory=list)
    top_adequate: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DailyProgress:
    """Snapshot of today's balance and targets; always recomputed."""

    date: str
    energy: EnergyBalance
    macros: MacroTotals
    projection: GoalProjection
    water_intake: float
    projected_weight: float
    micro_nutrients: dict[str, NutrientTarget]
    micro_nutrient_status: MicroNutrientStatus
