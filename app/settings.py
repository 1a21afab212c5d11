"""Application settings and configuration (Pydantic v2)."""
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings."""

    # Database (Docker overrides this with the Postgres DSN)
    database_url: str = Field(
        default="sqlite:///./geoattend.db",
        description="SQLAlchemy database URL",
    )
    sql_echo: bool = Field(default=False, description="Log SQL statements")

    # Classification thresholds (overlap percentage)
    present_threshold: float = Field(default=70.0)
    check_threshold: float = Field(default=40.0)

    # Base detection radius per room size, in meters
    room_radius_small: float = Field(default=5.0)
    room_radius_mid: float = Field(default=10.0)
    room_radius_large: float = Field(default=15.0)

    # Student probe circle = base radius + device accuracy
    student_base_radius: float = Field(default=2.0)

    # Legacy "correctness range" added on top of the faculty radius
    default_buffer_m: float = Field(default=5.0)

    # Session lifetimes offered to faculty, in minutes
    allowed_durations: List[int] = Field(default=[5, 10, 15])

    # "geometric" or "linear"
    overlap_strategy: str = Field(default="geometric")

    # Retries when a random 6-digit session code is already taken
    session_code_attempts: int = Field(default=10, ge=1)

    # Live feed
    live_poll_seconds: float = Field(default=2.0, gt=0)

    log_level: str = Field(default="INFO")

    # Pydantic v2 settings
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )


# Global settings instance
settings = Settings()


@lru_cache
def get_engine_config():
    """Engine configuration derived from the global settings."""
    from policy import EngineConfig

    return EngineConfig.from_settings(settings)
