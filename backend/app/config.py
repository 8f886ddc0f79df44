"""Application configuration using Pydantic settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "postgresql+asyncpg://localhost:5432/civicreports"

    # Routing
    auto_routing_enabled: bool = True

    # External AI classification service (image/voice/text -> category)
    ai_analysis_url: str | None = None
    ai_analysis_timeout_seconds: float = 20.0

    # Out-of-band escalation notices (email relay webhook)
    escalation_webhook_url: str | None = None
    escalation_timeout_seconds: float = 10.0

    # Civic health score job
    health_score_interval_minutes: int = 1440
    health_score_window_days: int = 30

    # Gamification
    points_manual_report: int = 5
    points_assisted_report: int = 8
    points_resolved_report: int = 25

    # API settings
    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = ["*"]  # Restrict in production
    rate_limit_per_minute: int = 60

    # Environment
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
