"""Logger factory shared by all modules."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_LEVEL = os.getenv("QUERY_PROFILER_LOG_LEVEL", "INFO").upper()
ROOT_LOGGER = "query_profiler"


def get_logger(name: str, level: str | None = None) -> logging.Logger:
    """Return logger *name*, configuring the package logger on first use.

    Parameters
    ----------
    name:
        Logger name, usually ``__name__``.
    level:
        Optional level override for the whole package (e.g. ``"DEBUG"``).
        Defaults to ``QUERY_PROFILER_LOG_LEVEL`` or ``INFO``.
    """
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(DEFAULT_LEVEL)
    if level:
        root.setLevel(level.upper())
    return logging.getLogger(name)
