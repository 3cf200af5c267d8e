"""
Configuration management for the QuizFlow compiler and runtime
"""

from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Timer display thresholds (seconds remaining)
    timer_warning_threshold_seconds: int = Field(default=30, ge=0)
    timer_danger_threshold_seconds: int = Field(default=10, ge=0)

    # Performance tiers (percent of question scenes answered correctly)
    tier_top_percent: int = Field(default=90, ge=0, le=100)
    tier_second_percent: int = Field(default=70, ge=0, le=100)
    tier_third_percent: int = Field(default=50, ge=0, le=100)

    # Delays between an answer and the next scene
    answer_feedback_delay_seconds: float = Field(default=1.0, ge=0)
    matching_advance_delay_seconds: float = Field(default=1.5, ge=0)

    # Lead persistence
    lead_endpoint: str = Field(
        default="/api/v1/leads",
        description="Endpoint the emitted browser runtime posts lead payloads to",
    )
    lead_sink_url: Optional[str] = Field(
        default=None,
        description="Absolute URL used by headless sessions; payloads are only logged when unset",
    )
    lead_request_timeout_seconds: float = Field(default=10.0, gt=0)

    default_locale: Literal["en", "ru"] = Field(default="en")

    # Server Configuration
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    debug: bool = Field(default=False)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_file: Optional[str] = Field(default=None)
    max_sessions: int = Field(
        default=1000, ge=1, description="Headless sessions kept in memory"
    )


# Global settings instance
settings = Settings()
