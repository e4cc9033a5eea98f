"""Logging setup shared by the API process and scripts."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s level=%(levelname)s logger=%(name)s %(message)s"

_ROOT_LOGGER_NAME = "ledgerview"


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Calling this more than once only updates the level.
    """

    logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.strip().upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if not any(getattr(handler, "_ledgerview", False) for handler in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._ledgerview = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.propagate = True
    return logger
