"""Centralized application configuration using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the working directory: .env, .env.local, .env.dev/.env.test/.env.prod
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["dev", "test", "prod"]
LogLevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_STORE_KEY = "crascad_terms"


class Settings(BaseSettings):
    """Typed application configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `CRASCAD_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    data_dir : Path
        Directory used by the file-backed term store; maps from `CRASCAD_DATA_DIR`.
    store_key : str
        Fixed key under which the whole term collection is persisted;
        maps from `CRASCAD_STORE_KEY`.
    google_api_key : Optional[str]
        Key for the Gemini explainer model. Maps from `GOOGLE_API_KEY`.
    """

    environment: EnvName = Field(default="dev", alias="CRASCAD_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")
    data_dir: Path = Field(default=Path("artifacts") / "store", alias="CRASCAD_DATA_DIR")
    store_key: str = Field(default=DEFAULT_STORE_KEY, alias="CRASCAD_STORE_KEY")
    google_api_key: str | None = Field(default=None, alias="GOOGLE_API_KEY")

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def is_dev(self) -> bool:
        """Return True if running in the development environment."""
        return self.environment == "dev"

    @property
    def is_test(self) -> bool:
        """Return True if running in the test environment."""
        return self.environment == "test"

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    Tests force a rebuild via `load_settings.cache_clear()` after mutating
    `os.environ`.
    """
    os.environ.setdefault("CRASCAD_ENV", "dev")
    return Settings()


# Import-time read of env / .env files.
settings: Settings = load_settings()


def get_logger(name: str = "crascad") -> logging.Logger:
    """Return a process-global logger configured to the current `LOG_LEVEL`."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel(load_settings().log_level_numeric())
    logger.propagate = False
    return logger


__all__ = ["DEFAULT_STORE_KEY", "Settings", "get_logger", "load_settings", "settings"]
