"""
DepositBook — Application Configuration
All settings loaded from environment variables via pydantic-settings.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from depositbook.core.day_count import DayCountConvention
from depositbook.core.exceptions import UnsupportedConventionError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Position store ────────────────────────────────────────────────────────
    POSITIONS_FILE: str = "./positions.json"

    # ── Accrual Settings ──────────────────────────────────────────────────────
    DEFAULT_DAY_COUNT_CONVENTION: str = "ACT/ACT"

    # ── Application Settings ──────────────────────────────────────────────────
    ENVIRONMENT: str = "development"  # development | staging | production
    APP_TITLE: str = "DepositBook"
    APP_VERSION: str = "1.0.0"
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"ENVIRONMENT must be one of {allowed}")
        return v

    @field_validator("DEFAULT_DAY_COUNT_CONVENTION")
    @classmethod
    def validate_convention(cls, v: str) -> str:
        try:
            return DayCountConvention.parse(v).value
        except UnsupportedConventionError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"LOG_LEVEL {v!r} is not a logging level name")
        return level

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def positions_path(self) -> Path:
        return Path(self.POSITIONS_FILE)

    @property
    def default_convention(self) -> DayCountConvention:
        return DayCountConvention.parse(self.DEFAULT_DAY_COUNT_CONVENTION)


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton — safe for FastAPI Depends()."""
    return Settings()
