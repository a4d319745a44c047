"""
CodePulse - Configuration Management.

Uses pydantic-settings for environment variable loading with validation.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # API Keys
    # -------------------------------------------------------------------------
    GEMINI_API_KEY: str = ""
    API_KEY: str = ""  # Legacy name, used when GEMINI_API_KEY is unset

    # -------------------------------------------------------------------------
    # Model Configuration
    # -------------------------------------------------------------------------
    GEMINI_MODEL: str = "gemini-2.5-flash"
    GROUNDED_TEMPERATURE: float = 0.8

    # -------------------------------------------------------------------------
    # Retry / Backoff
    # -------------------------------------------------------------------------
    RETRY_MAX_ATTEMPTS: int = 2
    RETRY_BASE_DELAY_SECONDS: float = 1.0  # Grows linearly with attempt number
    RETRY_JITTER_SECONDS: float = 1.0  # Upper bound of uniform jitter
    REQUEST_TIMEOUT_SECONDS: float = 60.0

    # -------------------------------------------------------------------------
    # Orchestration
    # -------------------------------------------------------------------------
    FULL_KIT_PAUSE_SECONDS: float = 2.0
    RANDOMIZED_PAUSE_SECONDS: float = 1.5
    RANDOM_SEED: int | None = None  # Set for reproducible prompts and sampling

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    DEBUG_MODE: bool = False

    @property
    def api_key(self) -> str:
        """The configured Gemini credential, empty if none."""
        return self.GEMINI_API_KEY or self.API_KEY


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging() -> None:
    """Configure application logging based on settings."""
    settings = get_settings()

    log_format = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    level = logging.DEBUG if settings.DEBUG_MODE else getattr(logging, settings.LOG_LEVEL)

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("grpc").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
