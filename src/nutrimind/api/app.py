"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nutrimind.adapters.payloads import (
    daily_log_to_payload,
    exercise_to_payload,
    food_to_payload,
    goals_to_payload,
    neat_to_payload,
)
from nutrimind.api.models import (
    AddFoodsRequest,
    AnalyzeExerciseRequest,
    AnalyzeFoodRequest,
    ExerciseRequest,
    GoalsRequest,
    NeatRequest,
    UpdateExerciseRequest,
    UpdateFoodRequest,
    UpdateNeatRequest,
    WaterRequest,
    WeightRequest,
)
from nutrimind.app_logging import configure_logging
from nutrimind.containers import AppContainer
from nutrimind.errors import GoalUpdateError, LoadError, SessionNotLoadedError
from nutrimind.services.tracker import TrackerSession


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.session.load()
        except LoadError:
            logger.exception("Initial load failed; serving 503 until reloaded")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(SessionNotLoadedError)
    async def not_loaded(_request: Request, exc: SessionNotLoadedError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.exception_handler(LoadError)
    async def load_failed(_request: Request, exc: LoadError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.exception_handler(GoalUpdateError)
    async def goal_update_failed(
        _request: Request, exc: GoalUpdateError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health(request: Request) -> dict[str, object]:
        """Simple health check endpoint."""
        session = _container(request).session
        return {
            "status": "ok",
            "loaded": session.loaded,
            "pending_writes": len(session.pending_writes),
        }

    @app.post("/session/reload")
    async def reload(request: Request) -> dict[str, object]:
        """Reload from the gateway and replay unsaved changes."""
        session = _container(request).session
        await session.load()
        return {"status": "ok", "pending_writes": len(session.pending_writes)}

    @app.get("/progress")
    async def progress(request: Request) -> dict[str, object]:
        """Return today's energy balance, targets and projected weight."""
        return asdict(_session(request).daily_progress())

    @app.get("/logs/today")
    async def today_log(request: Request) -> dict[str, object]:
        return daily_log_to_payload(_session(request).today_log())

    @app.get("/logs")
    async def all_logs(request: Request) -> dict[str, object]:
        return {
            "dailyLogs": [
                daily_log_to_payload(log) for log in _session(request).logs()
            ]
        }

    @app.get("/weight")
    async def weight_log(request: Request) -> dict[str, object]:
        entries = sorted(_session(request).weight_log, key=lambda entry: entry.date)
        return {"weightLog": [asdict(entry) for entry in entries]}

    @app.get("/streaks")
    async def streaks(request: Request) -> dict[str, int]:
        current, best = _session(request).streaks()
        return {"current": current, "best": best}

    @app.get("/notices")
    async def notices(request: Request) -> dict[str, object]:
        """Return and clear pending notices."""
        drained = _container(request).notices.drain()
        return {
            "notices": [
                {
                    "message": notice.message,
                    "level": notice.level,
                    "created_at": notice.created_at.isoformat(),
                }
                for notice in drained
            ]
        }

    @app.post("/foods", status_code=status.HTTP_202_ACCEPTED)
    async def add_foods(body: AddFoodsRequest, request: Request) -> dict[str, object]:
        session = _session(request)
        foods = session.add_food([item.to_draft() for item in body.foods])
        return {
            "foods": [food_to_payload(food) for food in foods],
            "log": daily_log_to_payload(session.today_log()),
        }

    @app.put("/foods/{food_id}", status_code=status.HTTP_202_ACCEPTED)
    async def update_food(
        food_id: str, body: UpdateFoodRequest, request: Request
    ) -> dict[str, object]:
        session = _session(request)
        session.update_food(food_id, name=body.name, calories=body.calories)
        return {"log": daily_log_to_payload(session.today_log())}

    @app.delete("/foods/{food_id}", status_code=status.HTTP_202_ACCEPTED)
    async def delete_food(food_id: str, request: Request) -> dict[str, object]:
        session = _session(request)
        session.delete_food(food_id)
        return {"log": daily_log_to_payload(session.today_log())}

    @app.post("/foods/analyze")
    async def analyze_food(
        body: AnalyzeFoodRequest, request: Request
    ) -> dict[str, object]:
        """Estimate foods from a description; nothing is logged."""
        analysis = await _container(request).suggestion_service.analyze_food(
            body.description, body.meal_type
        )
        if analysis is None:
            return {"foods": None}
        return {
            "foods": [
                {
                    "name": draft.name,
                    "calories": draft.calories,
                    "mealType": draft.meal_type.value,
                    "servingQuantity": draft.serving_quantity,
                    "servingUnit": draft.serving_unit,
                    "protein": draft.nutrients.macro("Protein"),
                    "carbs": draft.nutrients.macro("Carbs"),
                    "fat": draft.nutrients.macro("Fat"),
                }
                for draft in analysis.to_drafts(body.meal_type)
            ]
        }

    @app.post("/exercises", status_code=status.HTTP_202_ACCEPTED)
    async def add_exercise(
        body: ExerciseRequest, request: Request
    ) -> dict[str, object]:
        session = _session(request)
        exercise = session.add_exercise(body.to_draft())
        return {
            "exercise": exercise_to_payload(exercise),
            "log": daily_log_to_payload(session.today_log()),
        }

    @app.put("/exercises/{exercise_id}", status_code=status.HTTP_202_ACCEPTED)
    async def update_exercise(
        exercise_id: str, body: UpdateExerciseRequest, request: Request
    ) -> dict[str, object]:
        session = _session(request)
        session.update_exercise(
            exercise_id, name=body.name, calories_burned=body.calories_burned
        )
        return {"log": daily_log_to_payload(session.today_log())}

    @app.delete("/exercises/{exercise_id}", status_code=status.HTTP_202_ACCEPTED)
    async def delete_exercise(exercise_id: str, request: Request) -> dict[str, object]:
        session = _session(request)
        session.delete_exercise(exercise_id)
        return {"log": daily_log_to_payload(session.today_log())}

    @app.post("/exercises/analyze")
    async def analyze_exercise(
        body: AnalyzeExerciseRequest, request: Request
    ) -> dict[str, object]:
        """Estimate an exercise from a description; nothing is logged."""
        analysis = await _container(request).suggestion_service.analyze_exercise(
            body.description
        )
        if analysis is None:
            return {"exercise": None}
        return {
            "exercise": {
                "name": analysis.name,
                "duration": analysis.duration,
                "caloriesBurned": analysis.calories_burned,
            }
        }

    @app.post("/neat", status_code=status.HTTP_202_ACCEPTED)
    async def add_neat(body: NeatRequest, request: Request) -> dict[str, object]:
        session = _session(request)
        activity = session.add_neat_activity(body.to_draft())
        return {
            "activity": neat_to_payload(activity),
            "log": daily_log_to_payload(session.today_log()),
        }

    @app.put("/neat/{activity_id}", status_code=status.HTTP_202_ACCEPTED)
    async def update_neat(
        activity_id: str, body: UpdateNeatRequest, request: Request
    ) -> dict[str, object]:
        session = _session(request)
        session.update_neat_activity(activity_id, body.calories)
        return {"log": daily_log_to_payload(session.today_log())}

    @app.delete("/neat/{activity_id}", status_code=status.HTTP_202_ACCEPTED)
    async def remove_neat(activity_id: str, request: Request) -> dict[str, object]:
        session = _session(request)
        session.remove_neat_activity(activity_id)
        return {"log": daily_log_to_payload(session.today_log())}

    @app.post("/water", status_code=status.HTTP_202_ACCEPTED)
    async def add_water(body: WaterRequest, request: Request) -> dict[str, object]:
        session = _session(request)
        return {"log": daily_log_to_payload(session.add_water(body.amount))}

    @app.post("/weight", status_code=status.HTTP_202_ACCEPTED)
    async def add_weight(body: WeightRequest, request: Request) -> dict[str, object]:
        entry = _session(request).add_weight(body.weight)
        return {"entry": asdict(entry)}

    @app.put("/goals")
    async def update_goals(body: GoalsRequest, request: Request) -> dict[str, object]:
        """Save goals; answers 502 when the gateway does not confirm them."""
        goals = await _session(request).update_goals(body.to_goals())
        return goals_to_payload(goals)

    @app.get("/suggestion")
    async def latest_suggestion(request: Request) -> dict[str, object]:
        suggestion = _session(request).latest_suggestion
        return {
            "suggestion": suggestion.model_dump(by_alias=True) if suggestion else None
        }

    @app.post("/suggestion/refresh")
    async def refresh_suggestion(request: Request) -> dict[str, object]:
        """Fetch a suggestion now; returns null while the cooldown is active."""
        suggestion = await _session(request).refresh_suggestion()
        return {
            "suggestion": suggestion.model_dump(by_alias=True) if suggestion else None
        }

    return app


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _session(request: Request) -> TrackerSession:
    session = _container(request).session
    if not session.loaded:
        raise SessionNotLoadedError("User data has not been loaded")
    return session
