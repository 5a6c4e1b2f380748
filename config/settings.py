"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    DB_PATH: str = Field(default="data/hirepulse.db")
    LLM_CONFIG_PATH: str = Field(default="app_config.json")

    QUESTION_SECONDS: float = 180
    QUESTIONS_PER_SESSION: int = 5
    FALLBACK_QUESTION_COUNT: int = Field(default=3, ge=1)

    RETRY_BASE_DELAY_S: float = 1.5
    RETRY_MAX: int = 2

    ACCESS_CODE_LENGTH: int = 6
    REVIEW_CACHE_SIZE: int = Field(default=128, ge=1)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
