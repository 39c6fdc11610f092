"""API configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class ApiSettings(BaseSettings):
    """Application settings loaded from environment / .env file."""

    redis_url: str = "redis://localhost:6379/0"
    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"

    # Cache TTLs in seconds
    search_cache_ttl: int = 60  # combined and per-type searches
    reference_cache_ttl: int = 3600  # by-id lookups and "all" listings

    # Price refresh
    price_refresh_interval_ms: int = 30_000
    scheduler_autostart: bool = True
    scheduler_stop_timeout: float = 5.0
    active_search_idle_timeout: int = 1800  # 0 disables eviction
    broadcast_send_timeout: float = 5.0

    # Provider defaults
    default_adults: int = 1

    model_config = SettingsConfigDict(
        env_prefix="WAYFARE_", env_file=".env", extra="ignore"
    )


settings = ApiSettings()
