"""Logging setup for the stockbook.* loggers."""

from __future__ import annotations

import logging

from .config import Settings, get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: Settings | None = None) -> logging.Logger:
    """Attach a stream handler to the package logger at the configured level."""
    settings = settings or get_settings()
    root = logging.getLogger("stockbook")
    level = logging.getLevelName(settings.log_level)
    root.setLevel(level if isinstance(level, int) else logging.WARNING)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root
