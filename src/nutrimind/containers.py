"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrimind.adapters.http_gateway import HttpxPersistenceGateway
from nutrimind.adapters.openai_suggestion_client import OpenAISuggestionClient
from nutrimind.adapters.supabase_gateway import SupabasePersistenceGateway
from nutrimind.config import Settings
from nutrimind.services.notices import NoticeBoard
from nutrimind.services.rate_gate import (
    ANALYZE_EXERCISE_KEY,
    ANALYZE_FOOD_KEY,
    RateLimitedCallGate,
)
from nutrimind.services.suggestions import SuggestionService
from nutrimind.services.tracker import PersistenceGateway, TrackerSession
from nutrimind.services.write_back import WriteBackDispatcher


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    gateway: PersistenceGateway
    notices: NoticeBoard
    rate_gate: RateLimitedCallGate
    suggestion_service: SuggestionService
    session: TrackerSession
    close_resources: Callable[[], Awaitable[None]]


def build_gateway(settings: Settings) -> PersistenceGateway:
    """Create the persistence gateway selected by ``gateway_backend``."""
    if settings.gateway_backend == "supabase":
        if not (
            settings.supabase_url
            and settings.supabase_service_key
            and settings.user_email
        ):
            raise ValueError(
                "supabase_url, supabase_service_key and user_email are required "
                "for the supabase gateway"
            )
        return SupabasePersistenceGateway(
            client=create_client(settings.supabase_url, settings.supabase_service_key),
            user_email=settings.user_email,
        )
    return HttpxPersistenceGateway.create(
        base_url=settings.gateway_base_url, token=settings.gateway_token
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    gateway = build_gateway(resolved_settings)
    notices = NoticeBoard()
    rate_gate = RateLimitedCallGate(
        cooldown_seconds=resolved_settings.suggestion_cooldown_seconds,
        cooldowns={
            ANALYZE_FOOD_KEY: resolved_settings.analysis_cooldown_seconds,
            ANALYZE_EXERCISE_KEY: resolved_settings.analysis_cooldown_seconds,
        },
    )
    openai_client = OpenAISuggestionClient.create(resolved_settings.openai_api_key)
    suggestion_service = SuggestionService(
        client=openai_client,
        gate=rate_gate,
        notices=notices,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        debounce_seconds=resolved_settings.suggestion_debounce_seconds,
    )
    dispatcher = WriteBackDispatcher(
        notices,
        retry_attempts=resolved_settings.write_retry_attempts,
        retry_delay_seconds=resolved_settings.write_retry_delay_seconds,
    )
    session = TrackerSession(
        gateway=gateway,
        dispatcher=dispatcher,
        notices=notices,
        suggestion_service=suggestion_service,
        timezone_name=resolved_settings.timezone,
    )

    async def close_resources() -> None:
        await session.close()
        if isinstance(gateway, HttpxPersistenceGateway):
            await gateway.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        gateway=gateway,
        notices=notices,
        rate_gate=rate_gate,
        suggestion_service=suggestion_service,
        session=session,
        close_resources=close_resources,
    )
