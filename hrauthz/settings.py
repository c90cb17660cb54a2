from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    """
    Process settings, read from `APP_*` environment variables.

    The access policy is not configured here: it is built in, or replaced by
    the `policy` section of the security config, and fixed at startup.
    """

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    db_url: str = f"sqlite:///{PROJECT_ROOT / 'hrauthz.db'}"
    security_config_path: Path = PROJECT_ROOT / "config" / "security_config.yaml"
    log_level: str = "INFO"
    seed_demo_data: bool = True

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level {value!r}")
        return level

    @property
    def is_sqlite(self) -> bool:
        return self.db_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()
