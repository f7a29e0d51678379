"""Models for coach suggestions and log analysis results."""

from pydantic import BaseModel, ConfigDict, Field

from nutrimind.domain.models import (
    ExerciseDraft,
    FoodDraft,
    FoodNutrients,
    MealType,
)


class NextMeal(BaseModel):
    """Suggested next meal."""

    name: str
    calories: int | None = Field(default=None, ge=0)
    reason: str | None = None


class CoachSuggestion(BaseModel):
    """Structured output of the coach suggestion call."""

    model_config = ConfigDict(populate_by_name=True)

    positive_food: list[str] = Field(default_factory=list, alias="positiveFood")
    positive_exercise: list[str] = Field(
        default_factory=list, alias="positiveExercise"
    )
    caution_food: list[str] = Field(default_factory=list, alias="cautionFood")
    immediate_action: str = Field(default="", alias="immediateAction")
    motivational_message: str = Field(default="", alias="motivationalMessage")
    hydration_tip: str = Field(default="", alias="hydrationTip")
    next_meal_suggestion: NextMeal | None = Field(
        default=None, alias="nextMealSuggestion"
    )


class AnalyzedFood(BaseModel):
    """Single food recognized from a free-text or photo description."""

    name: str
    calories: float = Field(ge=0)
    protein: float = Field(default=0.0, ge=0)
    carbs: float = Field(default=0.0, ge=0)
    fat: float = Field(default=0.0, ge=0)
    serving_quantity: float = Field(default=1.0, ge=0)
    serving_unit: str = "serving"


class FoodAnalysis(BaseModel):
    """Foods extracted by the analysis call."""

    items: list[AnalyzedFood]

    def to_drafts(self, meal_type: MealType) -> list[FoodDraft]:
        """Convert analyzed foods into drafts for the log store."""
        return [
            FoodDraft(
                name=item.name,
                calories=item.calories,
                meal_type=meal_type,
                serving_quantity=item.serving_quantity,
                serving_unit=item.serving_unit,
                nutrients=FoodNutrients.build(
                    {"Protein": item.protein, "Carbs": item.carbs, "Fat": item.fat}
                ),
            )
            for item in self.items
        ]


class ExerciseAnalysis(BaseModel):
    """Exercise extracted by the analysis call."""

    name: str
    duration: float = Field(gt=0)
    calories_burned: float = Field(ge=0)

    def to_draft(self) -> ExerciseDraft:
        return ExerciseDraft(
            name=self.name,
            duration=self.duration,
            calories_burned=self.calories_burned,
        )
