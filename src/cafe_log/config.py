"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    supabase_anon_key: str
    secret_key: str
    public_base_url: str = "http://localhost:8000"
    display_timezone: str = "UTC"
    default_currency: str = "PEN"
    query_stale_seconds: int = 30
    analytics_stale_seconds: int = 60
    toast_duration_ms: int = 4000
    session_max_age_seconds: int = 60 * 60 * 24 * 7
    offline_cache_version: str = "cafe-log-v2"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def redirect_url(settings: Settings, path: str) -> str:
    """Return an absolute URL on the public origin for auth email redirects."""
    return f"{settings.public_base_url.rstrip('/')}/{path.lstrip('/')}"
