"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    openai_api_key: str
    openai_model: str = "gpt-5-mini"
    openai_model_fallbacks: str | None = None
    openai_store: bool = False
    ai_timeout_seconds: float = 20.0
    breakfast_share: float = 0.25
    lunch_share: float = 0.35
    dinner_share: float = 0.30
    swap_retry_attempts: int = 3
    rate_limit_requests: int = 60
    rate_limit_window_seconds: int = 60
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_model_list(primary: str | None, raw_fallbacks: str | None) -> list[str]:
    """Return the ordered, de-duplicated list of AI model candidates."""
    candidates: list[str] = []
    if primary and primary.strip():
        candidates.append(primary.strip())
    for chunk in (raw_fallbacks or "").split(","):
        value = chunk.strip()
        if value and value not in candidates:
            candidates.append(value)
    return candidates
