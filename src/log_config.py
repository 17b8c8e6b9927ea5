"""Logging setup for the command-line scripts."""

from __future__ import annotations

import logging
import sys

_FORMATS = {
    "simple": "%(levelname)s: %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# Packages whose loggers the scripts care about.
_LOGGER_NAMES = ("domain", "repositories")


def setup_logging(level: str | int = logging.INFO, format_style: str = "detailed") -> None:
    """Send engine and repository logs to stderr with one shared format."""
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    if format_style not in _FORMATS:
        raise ValueError(f"format_style must be one of {', '.join(_FORMATS)}")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMATS[format_style], datefmt="%Y-%m-%d %H:%M:%S"))

    for name in _LOGGER_NAMES:
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
