"""Application settings loaded from environment variables via pydantic-settings."""

from enum import StrEnum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogFormat(StrEnum):
    json = "json"
    console = "console"


class Settings(BaseSettings):
    """Central configuration — all values sourced from env vars or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ORCHARD_",
        case_sensitive=False,
    )

    # ── Engine ──────────────────────────────────────────────────────────────
    engine_timezone: str = "Asia/Bangkok"
    horizon_days: int = Field(default=3, ge=1, le=14)
    recent_activity_limit: int = Field(default=5, ge=0)
    recent_activity_display: int = Field(default=2, ge=0)

    # ── Profiles ────────────────────────────────────────────────────────────
    default_plot_slug: str = "house"
    profile_cache_ttl_seconds: float = 30.0
    forecast_fallback_plots: dict[str, str] = Field(
        default_factory=lambda: {"pram": "house"}
    )

    # ── Manifest ────────────────────────────────────────────────────────────
    manifest_version: str = "2.0-headless"
    manifest_generator: str = "orchard-sight"

    # ── Observability ───────────────────────────────────────────────────────
    log_level: str = "info"
    log_format: LogFormat = LogFormat.json


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance (cached after first call)."""
    return Settings()
