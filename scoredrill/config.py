"""Application configuration management."""
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global application settings loaded from environment variables."""

    PROJECT_NAME: str = "ScoreDrill"
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False

    DATABASE_URL: str = Field(
        "sqlite:///./scoredrill.db",
        description="SQLAlchemy database URL",
    )

    BACKEND_CORS_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost", "http://localhost:3000"],
        description="Allowed CORS origins",
    )

    SRS_MAXIMUM_INTERVAL_DAYS: int = Field(
        180, ge=1, description="Upper bound for any scheduled review interval"
    )
    SRS_LEARNING_INTERVAL_CAP_DAYS: int = Field(
        7, ge=1, description="Cap for struggled reviews that land below the young level"
    )

    QUEUE_DEFAULT_LIMIT: int = Field(20, ge=1, description="Default size of the practice queue page")
    EVENT_BUFFER_SIZE: int = Field(
        256, ge=1, description="Number of change notifications kept for polling consumers"
    )

    model_config = SettingsConfigDict(
        env_file=Path(__file__).resolve().parent.parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


settings = get_settings()
