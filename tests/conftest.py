"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutrimind.config import Settings
from nutrimind.containers import AppContainer
from nutrimind.domain.models import (
    DailyLog,
    ExerciseLog,
    FoodLog,
    Gender,
    NeatLog,
    UserData,
    UserGoals,
    UserProfile,
    WeightGoal,
    WeightLogEntry,
)
from nutrimind.errors import GatewayError
from nutrimind.services.notices import NoticeBoard
from nutrimind.services.rate_gate import RateLimitedCallGate
from nutrimind.services.suggestions import (
    ResponseT,
    SuggestionClient,
    SuggestionService,
)
from nutrimind.services.tracker import PersistenceGateway, TrackerSession
from nutrimind.services.write_back import WriteBackDispatcher

TODAY = "2024-05-10"


async def instant_sleep(_seconds: float) -> None:
    return None


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_profile(
    weight: float = 80.0,
    height: float = 180.0,
    age: int = 25,
    gender: Gender = Gender.MALE,
) -> UserProfile:
    return UserProfile(
        email="user@example.com",
        weight=weight,
        height=height,
        age=age,
        gender=gender,
        country="Germany",
    )


def make_user_data(
    daily_logs: list[DailyLog] | None = None,
    user_goals: UserGoals | None = None,
    weight_log: list[WeightLogEntry] | None = None,
    profile: UserProfile | None = None,
) -> UserData:
    return UserData(
        user=profile or make_profile(),
        daily_logs=daily_logs or [],
        user_goals=user_goals,
        weight_log=weight_log or [],
    )


@dataclass
class FakeGateway(PersistenceGateway):
    """In-memory gateway that records calls and can fail on demand."""

    user_data: UserData | None = field(default_factory=make_user_data)
    calls: list[tuple[str, tuple[object, ...]]] = field(default_factory=list)
    failures: dict[str, int] = field(default_factory=dict)
    load_error: Exception | None = None

    def fail(self, method: str, times: int = 1_000) -> None:
        self.failures[method] = times

    def calls_to(self, method: str) -> list[tuple[object, ...]]:
        return [args for name, args in self.calls if name == method]

    def _record(self, method: str, *args: object) -> None:
        self.calls.append((method, args))
        remaining = self.failures.get(method, 0)
        if remaining > 0:
            self.failures[method] = remaining - 1
            raise GatewayError(f"{method} failed")

    async def fetch_user_data(self) -> UserData | None:
        self.calls.append(("fetch_user_data", ()))
        if self.load_error is not None:
            raise self.load_error
        return self.user_data

    async def update_goals(self, goals: UserGoals) -> UserGoals:
        self._record("update_goals", goals)
        return goals

    async def add_foods(self, day: str, foods: list[FoodLog]) -> None:
        self._record("add_foods", day, foods)

    async def update_food(self, food_id: str, changes: dict[str, object]) -> None:
        self._record("update_food", food_id, changes)

    async def delete_food(self, food_id: str) -> None:
        self._record("delete_food", food_id)

    async def add_exercise(self, day: str, exercise: ExerciseLog) -> None:
        self._record("add_exercise", day, exercise)

    async def update_exercise(
        self, exercise_id: str, changes: dict[str, object]
    ) -> None:
        self._record("update_exercise", exercise_id, changes)

    async def delete_exercise(self, exercise_id: str) -> None:
        self._record("delete_exercise", exercise_id)

    async def add_neat_activity(self, day: str, activity: NeatLog) -> None:
        self._record("add_neat_activity", day, activity)

    async def update_neat_activity(self, activity_id: str, calories: float) -> None:
        self._record("update_neat_activity", activity_id, calories)

    async def remove_neat_activity(self, activity_id: str) -> None:
        self._record("remove_neat_activity", activity_id)

    async def add_water(self, day: str, amount: float) -> None:
        self._record("add_water", day, amount)

    async def add_weight(self, day: str, weight: float) -> None:
        self._record("add_weight", day, weight)


@dataclass
class FakeSuggestionClient(SuggestionClient):
    """Fake LLM client returning canned payloads per schema name."""

    payloads: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "coach_suggestion": {
                "positiveFood": ["Greek yogurt"],
                "positiveExercise": ["Evening walk"],
                "cautionFood": [],
                "immediateAction": "Drink a glass of water",
                "motivationalMessage": "Nice start today!",
                "hydrationTip": "Aim for 2.8 L",
                "nextMealSuggestion": {
                    "name": "Chicken salad",
                    "calories": 450,
                    "reason": "High protein",
                },
            },
            "food_analysis": {
                "items": [
                    {
                        "name": "Oatmeal",
                        "calories": 300,
                        "protein": 10,
                        "carbs": 54,
                        "fat": 5,
                        "serving_quantity": 1,
                        "serving_unit": "bowl",
                    }
                ]
            },
            "exercise_analysis": {
                "name": "Running",
                "duration": 30,
                "calories_burned": 320,
            },
        }
    )
    error: Exception | None = None
    prompts: list[tuple[str, str]] = field(default_factory=list)

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
        response_model: type[ResponseT],
    ) -> ResponseT:
        self.prompts.append((schema_name, prompt))
        if self.error is not None:
            raise self.error
        return response_model.model_validate(self.payloads[schema_name])


@pytest.fixture
def settings() -> Settings:
    return Settings(
        gateway_backend="http",
        gateway_base_url="https://tracker.example.com",
        gateway_token="token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway(
        user_data=make_user_data(
            user_goals=UserGoals(
                target_weight=75.0,
                weight_goal=WeightGoal.LOSE,
                goal_timeline=10,
                start_date=TODAY,
            ),
            weight_log=[WeightLogEntry(date="2024-05-01", weight=80.0)],
        )
    )


@pytest.fixture
def suggestion_client() -> FakeSuggestionClient:
    return FakeSuggestionClient()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def build_session(
    gateway: PersistenceGateway,
    suggestion_client: SuggestionClient | None = None,
    clock: FakeClock | None = None,
    today: str = TODAY,
) -> TrackerSession:
    notices = NoticeBoard()
    service = None
    if suggestion_client is not None:
        service = SuggestionService(
            client=suggestion_client,
            gate=RateLimitedCallGate(clock=clock or FakeClock()),
            notices=notices,
            model="gpt-5.2",
            sleep=instant_sleep,
        )
    return TrackerSession(
        gateway=gateway,
        dispatcher=WriteBackDispatcher(notices, sleep=instant_sleep),
        notices=notices,
        suggestion_service=service,
        today_provider=lambda: today,
    )


@pytest.fixture
def container(
    settings: Settings,
    gateway: FakeGateway,
    suggestion_client: FakeSuggestionClient,
    clock: FakeClock,
) -> AppContainer:
    session = build_session(gateway, suggestion_client, clock)
    suggestion_service = session.suggestion_service
    assert suggestion_service is not None

    async def close_resources() -> None:
        await session.close()

    return AppContainer(
        settings=settings,
        gateway=gateway,
        notices=session.notices,
        rate_gate=suggestion_service.gate,
        suggestion_service=suggestion_service,
        session=session,
        close_resources=close_resources,
    )
