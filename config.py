"""
Configuration settings for the Vigilant wellbeing service.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Database
    # ========================================
    database_url: str = Field(
        default="sqlite:///vigilant.db",
        description="SQLAlchemy connection string for usage, profile and routine data",
    )

    # ========================================
    # Advisory Oracle (Gemini)
    # ========================================
    gemini_api_key: str | None = Field(
        default=None,
        description="Google Gemini API key for fatigue advisories",
    )
    ai_model: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model used for fatigue scoring",
    )
    advisory_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Upper bound on a single advisory oracle round trip",
    )

    # ========================================
    # Polling Cadences
    # ========================================
    accrual_interval_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Seconds between usage accrual ticks",
    )
    accrual_increment_seconds: int = Field(
        default=10,
        gt=0,
        description="Usage seconds recorded per accrual tick",
    )
    advisory_interval_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between advisory refreshes (independent of accrual)",
    )
    scheduler_enabled: bool = Field(
        default=True,
        description="Run the polling scheduler inside the API process",
    )

    # ========================================
    # Usage Policy
    # ========================================
    usage_source_label: str = Field(
        default="Vigilant App",
        description="Source label recorded for scheduler-driven usage",
    )
    default_daily_limit_minutes: int = Field(
        default=360,
        gt=0,
        description="Daily limit used when no profile has been saved",
    )
    lock_clears_at_rollover: bool = Field(
        default=False,
        description="Also clear an active lock at the start of a new accounting day",
    )

    # ========================================
    # Emergency Notifications
    # ========================================
    notification_webhook_url: str | None = Field(
        default=None,
        description="Webhook that receives guardian alerts (log-only when unset)",
    )
    notification_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound on one emergency dispatch pass",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host",
    )
    api_port: int = Field(
        default=3000,
        description="API server port",
    )

    # ========================================
    # Helper Methods
    # ========================================
    def has_ai_configured(self) -> bool:
        """Check if the advisory oracle can be reached."""
        return bool(self.gemini_api_key)

    def has_webhook_configured(self) -> bool:
        """Check if guardian alerts go to a real webhook."""
        return bool(self.notification_webhook_url)

    def get_cadence_config(self) -> dict[str, float]:
        """Get scheduler cadences as a dictionary."""
        return {
            "accrual_interval": self.accrual_interval_seconds,
            "accrual_increment": self.accrual_increment_seconds,
            "advisory_interval": self.advisory_interval_seconds,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
