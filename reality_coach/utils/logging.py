"""Logging configuration for the Career Reality Coach.

Module loggers are created with ``logging.getLogger(__name__)`` and so hang
off the package logger configured here.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME = "reality_coach"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handler: logging.Handler | None = None


def _resolve_level(level: str | None) -> int:
    if level is None:
        return logging.INFO
    return getattr(logging, level.upper(), logging.INFO)


def configure_logging(
    level: str | None = None,
    stream: TextIO | None = None,
    format_string: str = LOG_FORMAT,
) -> logging.Logger:
    """Configure the package logger and return it.

    Calling this again only adjusts the level; the handler installed by the
    first call is kept.

    Args:
        level: Log level name. Defaults to INFO.
        stream: Stream for the console handler. Defaults to stderr.
        format_string: Format string for log records.

    Returns:
        The ``reality_coach`` logger.
    """
    global _handler

    logger = logging.getLogger(LOGGER_NAME)
    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    if _handler is None:
        _handler = logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(logging.Formatter(format_string, datefmt=DATE_FORMAT))
        logger.addHandler(_handler)
        logger.propagate = False

    _handler.setLevel(log_level)
    return logger


def reset_logging() -> None:
    """Remove the installed handler (useful for testing)."""
    global _handler

    logger = logging.getLogger(LOGGER_NAME)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
