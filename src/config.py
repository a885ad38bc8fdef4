"""
Centralized configuration.

Settings are read from the environment (or a local .env file) and validated
once. Contract thresholds are not configurable; they live in src.thresholds.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.schemas import LoadMetric


class Settings(BaseSettings):
    """Application settings with validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO")

    # API
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    CORS_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",  # React dev server
            "http://localhost:5173",  # Vite dev server
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
    )

    # Metrics
    DEFAULT_LOAD_METRIC: LoadMetric = Field(default=LoadMetric.SESSION_LOAD)
    REPORT_DIR: Path = Field(default=Path("metrics_reports"))

    @property
    def log_level(self) -> int:
        """Numeric logging level, INFO when the name is unknown."""
        level = logging.getLevelName(self.LOG_LEVEL.upper())
        return level if isinstance(level, int) else logging.INFO


@lru_cache
def get_settings() -> Settings:
    return Settings()
