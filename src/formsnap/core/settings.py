"""Centralized configuration for the snapshot engine using Pydantic Settings (v2).

This module exposes a single, cached `settings` instance that reads from:
- Real environment variables (highest precedence)
- `.env` files at the working directory: .env, .env.local, .env.dev/.env.test/.env.prod

Every option here is only a *default*: `SnapshotStore` and the CLI accept
explicit arguments that win over the configured values.
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


class Settings(BaseSettings):
    """Typed configuration loaded from env and `.env` files.

    Attributes
    ----------
    environment : EnvName
        Runtime environment flag; maps from `FORMSNAP_ENV`.
    log_level : LogLevelName
        Global log level string; maps from `LOG_LEVEL`.
    namespace : str
        Prefix of every storage key (`<namespace>_<form_id>`).
    max_snapshots : int
        Retention limit per form before the oldest snapshot is evicted.
    auto_cleanup : bool
        Whether eviction on overflow is enabled at all.
    compression_enabled : bool
        Apply the reversible text encoding to persisted payloads.
    schema_version : str
        Version stamped on newly created snapshots.
    store_dir : Path
        Directory used by the file-backed storage (CLI and API server).
    """

    environment: EnvName = Field(default="dev", alias="FORMSNAP_ENV")
    log_level: LogLevelName = Field(default="INFO", alias="LOG_LEVEL")

    namespace: str = Field(default="form_snapshots", alias="FORMSNAP_NAMESPACE")
    max_snapshots: int = Field(default=10, ge=1, alias="FORMSNAP_MAX_SNAPSHOTS")
    auto_cleanup: bool = Field(default=True, alias="FORMSNAP_AUTO_CLEANUP")
    compression_enabled: bool = Field(default=False, alias="FORMSNAP_COMPRESSION")
    schema_version: str = Field(
        default="1.0.0",
        pattern=r"^\d+(\.\d+)*$",
        alias="FORMSNAP_SCHEMA_VERSION",
    )
    store_dir: Path = Field(
        default=Path("artifacts") / "snapshots", alias="FORMSNAP_STORE_DIR"
    )

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local", ".env.dev", ".env.test", ".env.prod"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def log_level_numeric(self) -> int:
        """Return the numeric logging level corresponding to `self.log_level`."""
        return getattr(logging, self.log_level, logging.INFO)


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Create and cache a `Settings` instance.

    We keep this behind an LRU cache so tests can force a rebuild via
    `load_settings.cache_clear()` after mutating `os.environ`.
    """
    os.environ.setdefault("FORMSNAP_ENV", "dev")
    return Settings()


# Export a ready-to-use singleton (import-time read of env / .env files).
settings: Settings = load_settings()


def get_logger(name: str = "formsnap") -> logging.Logger:
    """Return a process-global logger configured to the current log level."""
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


__all__ = ["Settings", "get_logger", "load_settings", "settings"]
