"""Configuration management using Pydantic settings."""

from typing import Optional

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

    # Application
    app_name: str = "Nova Defense"
    debug: bool = False
    log_level: str = "INFO"

    # Frame driver
    frame_rate: float = Field(default=60.0, gt=0)

    # Fixed seed makes a session reproducible; None draws from the OS
    random_seed: Optional[int] = None

    # Headless runner
    autopilot_enabled: bool = True
    autopilot_cooldown_ms: float = Field(default=250.0, ge=0)
    demo_duration: float = Field(default=120.0, gt=0)  # seconds of game time


settings = Settings()
