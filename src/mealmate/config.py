"""
MealMate - Configuration and settings.

EngineSettings holds everything the extraction engine reads from the
environment: OpenAI access for the text path, browser and retry tuning for
the URL path, and image scoring bounds.
"""

from functools import lru_cache
from typing import Literal

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """
    Settings for the recipe extraction engine.

    Values come from environment variables or a local .env file.
    Only the text path needs OPENAI_API_KEY; URL parsing works without it.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    mealmate_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # OpenAI (text extraction)
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1-mini"
    openai_temperature: float = 0.2
    openai_max_tokens: int = 2000
    llm_timeout_seconds: float = 30.0

    # Headless browser
    browser_headless: bool = True
    browser_timeout_seconds: float = 45.0
    scroll_pause_min_seconds: float = 1.0
    scroll_pause_max_seconds: float = 3.0

    # Retry policy
    fetch_max_attempts: int = 3
    fetch_base_delay_seconds: float = 1.0
    fetch_max_jitter_seconds: float = 0.5

    # Text input
    max_text_length: int = 10_000

    # Images
    default_max_images: int = 10
    image_score_min: int = 0
    image_score_max: int = 100

    # Prompt logging
    # MEALMATE_LOG_PROMPTS=1 - write text-extraction prompts to prompt_logs/
    mealmate_log_prompts: bool = False

    @model_validator(mode="after")
    def _check_ranges(self) -> "EngineSettings":
        if self.fetch_max_attempts < 1:
            raise ValueError("fetch_max_attempts must be at least 1")
        if self.scroll_pause_min_seconds > self.scroll_pause_max_seconds:
            raise ValueError("scroll_pause_min_seconds must not exceed scroll_pause_max_seconds")
        if self.image_score_min > self.image_score_max:
            raise ValueError("image_score_min must not exceed image_score_max")
        return self

    @property
    def is_development(self) -> bool:
        return self.mealmate_env == "development"

    @property
    def is_production(self) -> bool:
        return self.mealmate_env == "production"


@lru_cache
def get_settings() -> EngineSettings:
    """Get cached settings instance."""
    return EngineSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: EngineSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
