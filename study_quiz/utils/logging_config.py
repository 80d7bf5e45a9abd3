"""Logging configuration helpers for the quiz engine.

The engine modules only log through ``logging.getLogger(__name__)``; an
embedding application calls :func:`configure_logging` once to see that
output without touching the root logger it may have configured itself.
"""

from __future__ import annotations

import logging
from logging import Handler, Logger

PACKAGE_LOGGER_NAME = "study_quiz"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_installed_handler: Handler | None = None


def configure_logging(level: int = logging.INFO, handler: Handler | None = None) -> Logger:
    """Attach a formatted handler to the ``study_quiz`` logger and return it.

    Calling it again only updates the level and does not stack handlers.
    """
    global _installed_handler

    logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    logger.setLevel(level)
    if _installed_handler is None or _installed_handler not in logger.handlers:
        _installed_handler = handler or logging.StreamHandler()
        _installed_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_installed_handler)
    return logger
