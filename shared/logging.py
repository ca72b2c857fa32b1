"""
Logger factory for the IDJ API.

Usage:
    >>> from shared.logging import get_logger
    >>> log = get_logger(__name__)
    >>> log.info("user_logged_in", user_id="123", provider="local")
"""

from __future__ import annotations

import structlog
from structlog.stdlib import BoundLogger


def get_logger(name: str) -> BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def log_with_context(logger: BoundLogger, **context) -> BoundLogger:
    """
    Bind context to a logger for all subsequent log calls.

    Example:
        >>> log = log_with_context(get_logger(__name__), user_id="123")
        >>> log.info("video_liked")  # Will include user_id
    """
    return logger.bind(**context)


__all__ = ["get_logger", "log_with_context"]
