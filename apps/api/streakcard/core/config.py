from __future__ import annotations

from pathlib import Path

from pydantic import AnyUrl, Field
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_env: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Observability
    sentry_dsn: str | None = Field(default=None, alias="SENTRY_DSN")
    sentry_traces_sample_rate: float = Field(
        default=0.0, alias="SENTRY_TRACES_SAMPLE_RATE"
    )

    # Upstream providers (each call attempted once, no retry)
    upstream_timeout_seconds: float = Field(
        default=10.0, alias="UPSTREAM_TIMEOUT_SECONDS"
    )
    github_streak_api_url: AnyUrl = Field(
        default=AnyUrl("https://streak-stats.demolab.com/"),
        alias="GITHUB_STREAK_API_URL",
    )
    leetcode_graphql_url: AnyUrl = Field(
        default=AnyUrl("https://leetcode.com/graphql"), alias="LEETCODE_GRAPHQL_URL"
    )
    leetcode_calendar_api_url: AnyUrl = Field(
        default=AnyUrl("https://alfa-leetcode-api.onrender.com"),
        alias="LEETCODE_CALENDAR_API_URL",
    )
    gfg_card_url: AnyUrl = Field(
        default=AnyUrl("https://gfgstatscard.vercel.app"), alias="GFG_CARD_URL"
    )

    # Streak card
    card_cache_max_age_seconds: int = Field(
        default=1800, alias="CARD_CACHE_MAX_AGE_SECONDS"
    )
    card_max_platforms: int = Field(default=30, alias="CARD_MAX_PLATFORMS")

    @model_validator(mode="after")
    def validate_runtime_constraints(self) -> "Settings":
        level = (self.log_level or "").strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")
        self.log_level = level

        if not (0.5 <= self.upstream_timeout_seconds <= 60):
            raise ValueError("UPSTREAM_TIMEOUT_SECONDS must be between 0.5 and 60")
        if not (0 <= self.card_cache_max_age_seconds <= 86400):
            raise ValueError("CARD_CACHE_MAX_AGE_SECONDS must be 0..86400")
        if not (1 <= self.card_max_platforms <= 100):
            raise ValueError("CARD_MAX_PLATFORMS must be 1..100")
        if not (0.0 <= self.sentry_traces_sample_rate <= 1.0):
            raise ValueError("SENTRY_TRACES_SAMPLE_RATE must be 0..1")

        return self

    def is_sentry_configured(self) -> bool:
        return bool(self.sentry_dsn)


settings = Settings()  # singleton import via env settings
