"""Pydantic models for API request bodies."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from nutrimind.domain.models import (
    ExerciseDraft,
    FoodDraft,
    FoodNutrients,
    MealType,
    NeatDraft,
    UserGoals,
    WeightGoal,
    non_negative,
)


class CamelModel(BaseModel):
    """Accepts both camelCase and snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FoodItemRequest(CamelModel):
    """One food to log."""

    name: str = Field(min_length=1)
    calories: float = 0.0
    meal_type: MealType = MealType.SNACKS
    serving_quantity: float = 1.0
    serving_unit: str = "serving"
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0

    @field_validator("calories", "serving_quantity", "protein", "carbs", "fat")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return non_negative(value)

    def to_draft(self) -> FoodDraft:
        return FoodDraft(
            name=self.name,
            calories=self.calories,
            meal_type=self.meal_type,
            serving_quantity=self.serving_quantity,
            serving_unit=self.serving_unit,
            nutrients=FoodNutrients.build(
                {"Protein": self.protein, "Carbs": self.carbs, "Fat": self.fat}
            ),
        )


class AddFoodsRequest(CamelModel):
    foods: list[FoodItemRequest] = Field(min_length=1)


class UpdateFoodRequest(CamelModel):
    name: str | None = None
    calories: float | None = None

    @field_validator("calories")
    @classmethod
    def _clamp(cls, value: float | None) -> float | None:
        return None if value is None else non_negative(value)


class ExerciseRequest(CamelModel):
    """An exercise to log."""

    name: str = Field(min_length=1)
    duration: float = 0.0
    calories_burned: float = 0.0

    @field_validator("duration", "calories_burned")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return non_negative(value)

    def to_draft(self) -> ExerciseDraft:
        return ExerciseDraft(
            name=self.name,
            duration=self.duration,
            calories_burned=self.calories_burned,
        )


class UpdateExerciseRequest(CamelModel):
    name: str | None = None
    calories_burned: float | None = None

    @field_validator("calories_burned")
    @classmethod
    def _clamp(cls, value: float | None) -> float | None:
        return None if value is None else non_negative(value)


class NeatRequest(CamelModel):
    name: str = Field(min_length=1)
    calories: float = 0.0

    def to_draft(self) -> NeatDraft:
        return NeatDraft(name=self.name, calories=non_negative(self.calories))


class UpdateNeatRequest(CamelModel):
    calories: float

    @field_validator("calories")
    @classmethod
    def _clamp(cls, value: float) -> float:
        return non_negative(value)


class WaterRequest(CamelModel):
    amount: float = Field(ge=0)


class WeightRequest(CamelModel):
    weight: float = Field(gt=0)


class GoalsRequest(CamelModel):
    """New goals for the user."""

    target_weight: float = Field(gt=0)
    weight_goal: WeightGoal = WeightGoal.MAINTAIN
    goal_timeline: int = Field(default=12, ge=0)
    start_date: date | None = None

    def to_goals(self) -> UserGoals:
        return UserGoals(
            target_weight=self.target_weight,
            weight_goal=self.weight_goal,
            goal_timeline=self.goal_timeline,
            start_date=self.start_date.isoformat() if self.start_date else None,
        )


class AnalyzeFoodRequest(CamelModel):
    description: str = Field(min_length=1)
    meal_type: MealType = MealType.SNACKS


class AnalyzeExerciseRequest(CamelModel):
    description: str = Field(min_length=1)
