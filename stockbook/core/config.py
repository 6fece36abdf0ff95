"""
Configuration helpers for Stockbook.

Settings are read from environment variables once and cached, so repositories
and services never fetch os.environ directly.
"""

from dataclasses import dataclass
from functools import lru_cache
import os

STORAGE_BACKENDS = ("memory", "json", "sql")


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    storage_backend: str
    data_file: str
    database_url: str
    key_prefix: str
    log_level: str


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _choice(value: str | None, allowed: tuple[str, ...], default: str) -> str:
        normalized = (value or "").strip().lower()
        return normalized if normalized in allowed else default

    return Settings(
        app_env=(os.getenv("STOCKBOOK_ENV") or "dev").lower(),
        storage_backend=_choice(os.getenv("STOCKBOOK_STORAGE"), STORAGE_BACKENDS, "json"),
        data_file=os.getenv("STOCKBOOK_DATA_FILE", "stockbook-data.json"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///stockbook.db"),
        key_prefix=os.getenv("STOCKBOOK_KEY_PREFIX", "@inventory_app:"),
        log_level=(os.getenv("STOCKBOOK_LOG_LEVEL") or "WARNING").upper(),
    )
