"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    gateway_backend: Literal["http", "supabase"] = "http"
    gateway_base_url: str = "http://localhost:5000"
    gateway_token: str = ""
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    user_email: str | None = None
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "low"
    openai_store: bool = False
    timezone: str = "UTC"
    suggestion_cooldown_seconds: float = 4.1
    analysis_cooldown_seconds: float = 4.1
    suggestion_debounce_seconds: float = 3.0
    write_retry_attempts: int = 2
    write_retry_delay_seconds: float = 0.5
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
