"""Domain models for the daily log and the user's body profile."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum

MACRO_NAMES = ("Protein", "Carbs", "Fat")


class Gender(StrEnum):
    """Gender used by the BMR formula."""

    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class WeightGoal(StrEnum):
    """Direction of the user's weight goal."""

    LOSE = "lose"
    MAINTAIN = "maintain"
    GAIN = "gain"


class MealType(StrEnum):
    """Meal a food entry belongs to."""

    BREAKFAST = "Breakfast"
    LUNCH = "Lunch"
    DINNER = "Dinner"
    SNACKS = "Snacks"


def non_negative(value: object) -> float:
    """Coerce a raw amount to a float, clamping negatives and garbage to 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return 0.0
    else:
        return 0.0
    if number != number or number < 0:  # NaN or negative
        return 0.0
    return number


@dataclass(frozen=True)
class UserProfile:
    """Body metrics of the signed-in user."""

    email: str
    weight: float
    height: float
    age: int
    gender: Gender
    country: str = ""
    start_weight: float | None = None


@dataclass(frozen=True)
class UserGoals:
    """Weight goal with a timeline in weeks."""

    target_weight: float
    weight_goal: WeightGoal = WeightGoal.MAINTAIN
    goal_timeline: int = 12
    start_date: str | None = None

    @classmethod
    def defaults_for(cls, profile: UserProfile | None) -> "UserGoals":
        """Return the goals used before the user has saved any."""
        weight = profile.weight if profile else 0.0
        return cls(target_weight=weight, weight_goal=WeightGoal.MAINTAIN)


@dataclass(frozen=True)
class WeightLogEntry:
    """Recorded body weight for a calendar day."""

    date: str
    weight: float


@dataclass(frozen=True)
class NutrientInfo:
    """Named nutrient amount."""

    name: str
    amount: float
    unit: str = "g"

    @classmethod
    def create(cls, name: str, amount: object, unit: str = "g") -> "NutrientInfo":
        """Build a nutrient with the amount clamped to be non-negative."""
        return cls(name=name, amount=non_negative(amount), unit=unit)


@dataclass(frozen=True)
class FoodNutrients:
    """Macro and micro nutrients of a food entry.

    ``macros`` always holds Protein, Carbs and Fat in that order.
    """

    macros: tuple[NutrientInfo, ...]
    micros: tuple[NutrientInfo, ...] = ()

    @classmethod
    def build(
        cls,
        macros: dict[str, object] | list[NutrientInfo] | None = None,
        micros: list[NutrientInfo] | None = None,
    ) -> "FoodNutrients":
        """Normalize macros to the three named entries, defaulting to 0."""
        if isinstance(macros, dict):
            amounts = {str(name): amount for name, amount in macros.items()}
        else:
            amounts = {item.name: item.amount for item in macros or []}
        return cls(
            macros=tuple(
                NutrientInfo.create(name, amounts.get(name, 0.0))
                for name in MACRO_NAMES
            ),
            micros=tuple(micros or ()),
        )

    def macro(self, name: str) -> float:
        """Return a macro amount by name, 0 if absent."""
        for item in self.macros:
            if item.name == name:
                return item.amount
        return 0.0


@dataclass(frozen=True)
class FoodDraft:
    """Food entry as submitted, before an id and timestamp are assigned."""

    name: str
    calories: float
    meal_type: MealType = MealType.SNACKS
    serving_quantity: float = 1.0
    serving_unit: str = "serving"
    nutrients: FoodNutrients = field(default_factory=FoodNutrients.build)


@dataclass(frozen=True)
class FoodLog:
    """Logged food item."""

    id: str
    name: str
    calories: float
    meal_type: MealType
    serving_quantity: float
    serving_unit: str
    nutrients: FoodNutrients
    timestamp: datetime


@dataclass(frozen=True)
class ExerciseDraft:
    """Exercise as submitted."""

    name: str
    duration: float
    calories_burned: float


@dataclass(frozen=True)
class ExerciseLog:
    """Logged exercise session."""

    id: str
    name: str
    duration: float
    calories_burned: float
    timestamp: datetime


@dataclass(frozen=True)
class NeatDraft:
    """NEAT activity as submitted."""

    name: str
    calories: float


@dataclass(frozen=True)
class NeatLog:
    """Logged non-exercise activity."""

    id: str
    name: str
    calories: float


@dataclass(frozen=True)
class DailyLog:
    """Everything logged for one calendar day."""

    date: str
    foods: tuple[FoodLog, ...] = ()
    exercises: tuple[ExerciseLog, ...] = ()
    neat_activities: tuple[NeatLog, ...] = ()
    water_intake: float = 0.0

    @classmethod
    def empty(cls, date: str) -> "DailyLog":
        """Return a log with nothing recorded."""
        return cls(date=date)

    @property
    def has_activity(self) -> bool:
        """True when any food or exercise was logged."""
        return bool(self.foods or self.exercises)


@dataclass(frozen=True)
class UserData:
    """Bulk snapshot returned by the persistence gateway at session start."""

    user: UserProfile
    daily_logs: list[DailyLog]
    user_goals: UserGoals | None
    weight_log: list[WeightLogEntry]


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(tz=UTC)
