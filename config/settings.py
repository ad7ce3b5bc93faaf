"""
Configuration settings for the clinic agenda engine.
Loads from environment variables with validation.
"""

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

    # Environment
    environment: Literal["development", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Supabase Configuration
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_service_role_key: str = Field(..., description="Supabase service role key")

    # Clinic clock. Appointment dates and times are stored without timezone.
    timezone: str = Field(default="America/Sao_Paulo", description="Clinic local timezone")

    # Slot fallback when a professional has no working hours configured
    default_hours_start: str = "08:00"
    default_hours_end: str = "18:00"
    default_slot_duration_minutes: int = 30
    max_slots: int = 200
    booking_horizon_days: int = 30

    # Reminder Configuration
    default_reminder_hours: list[int] = [24]
    upcoming_window_days: int = 30
    concluded_window_hours: int = 24
    reminder_poll_interval_seconds: float = 60.0
    read_state_dir: str = Field(
        default=".agenda/read_state",
        description="Directory holding acknowledged notification ids",
    )

    # HTTP server
    host: str = "0.0.0.0"
    port: int = 8082


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
