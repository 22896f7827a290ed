"""Project-wide logging utilities.

Provides a single logger configured lazily; applications embedding tailquant
can override handlers or levels as needed. We default to WARNING to stay quiet
unless something noteworthy happens (e.g., unparsable input, failed rollover).
"""
from __future__ import annotations

import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    global _LOGGER
    if _LOGGER is None:
        logger = logging.getLogger("tailquant")
        # Only add a handler if the application hasn't configured logging.
        if not logger.handlers and not logging.getLogger().handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("[%(name)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        if logger.level == logging.NOTSET:
            logger.setLevel(logging.WARNING)
        _LOGGER = logger
    return _LOGGER


def set_verbosity(verbose: int) -> None:
    """Map a repeat count of -v flags onto the package log level."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose >= 2:
        level = logging.DEBUG
    get_logger().setLevel(level)

__all__ = ["get_logger", "set_verbosity"]
