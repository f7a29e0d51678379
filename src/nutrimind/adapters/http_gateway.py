"""REST persistence gateway client."""

from dataclasses import dataclass

import httpx

from nutrimind.adapters.payloads import (
    exercise_to_payload,
    food_to_payload,
    goals_to_payload,
    neat_to_payload,
    parse_goals,
    parse_user_data,
)
from nutrimind.domain.models import ExerciseLog, FoodLog, NeatLog, UserData, UserGoals
from nutrimind.errors import GatewayError
from nutrimind.services.tracker import PersistenceGateway

REQUEST_TIMEOUT_SECONDS = 10


@dataclass
class HttpxPersistenceGateway(PersistenceGateway):
    """HTTPX-backed client for the ``/api/data`` endpoints."""

    base_url: str
    token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str, token: str) -> "HttpxPersistenceGateway":
        """Create a gateway with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            token=token,
            http_client=httpx.AsyncClient(),
        )

    async def fetch_user_data(self) -> UserData | None:
        return parse_user_data(await self._request("GET", "/data/user"))

    async def update_goals(self, goals: UserGoals) -> UserGoals:
        data = await self._request("PUT", "/data/goals", goals_to_payload(goals))
        if not isinstance(data, dict):
            raise GatewayError("Goal update returned no goals")
        return parse_goals(data)

    async def add_foods(self, day: str, foods: list[FoodLog]) -> None:
        await self._request(
            "POST", "/data/food", {"foods": [food_to_payload(food) for food in foods]}
        )

    async def update_food(self, food_id: str, changes: dict[str, object]) -> None:
        await self._request("PUT", f"/data/food/{food_id}", changes)

    async def delete_food(self, food_id: str) -> None:
        await self._request("DELETE", f"/data/food/{food_id}")

    async def add_exercise(self, day: str, exercise: ExerciseLog) -> None:
        await self._request(
            "POST", "/data/exercise", {"exercise": exercise_to_payload(exercise)}
        )

    async def update_exercise(
        self, exercise_id: str, changes: dict[str, object]
    ) -> None:
        await self._request("PUT", f"/data/exercise/{exercise_id}", changes)

    async def delete_exercise(self, exercise_id: str) -> None:
        await self._request("DELETE", f"/data/exercise/{exercise_id}")

    async def add_neat_activity(self, day: str, activity: NeatLog) -> None:
        await self._request("POST", "/data/neat", neat_to_payload(activity))

    async def update_neat_activity(self, activity_id: str, calories: float) -> None:
        await self._request("PUT", f"/data/neat/{activity_id}", {"calories": calories})

    async def remove_neat_activity(self, activity_id: str) -> None:
        await self._request("DELETE", f"/data/neat/{activity_id}")

    async def add_water(self, day: str, amount: float) -> None:
        await self._request("POST", "/data/water", {"amount": amount})

    async def add_weight(self, day: str, weight: float) -> None:
        await self._request("POST", "/data/weight", {"date": day, "weight": weight})

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self, method: str, path: str, payload: dict[str, object] | None = None
    ) -> object:
        url = f"{self.base_url}/api{path}"
        try:
            response = await self.http_client.request(
                method,
                url,
                headers={"Authorization": f"Bearer {self.token}"},
                json=payload,
                timeout=REQUEST_TIMEOUT_SECONDS,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise GatewayError(
                f"{method} {path} failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise GatewayError(f"{method} {path} failed: {exc}") from exc
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise GatewayError(f"{method} {path} returned invalid JSON") from exc
