"""
Logging Configuration
=====================

sndcheck modules log through ``logging.getLogger(__name__)``. This module owns
the one stderr handler on the ``sndcheck`` logger and the level names that
``[logging] level`` and ``set_level`` accept.
"""

import logging
import sys
from typing import Optional, Union

from sndcheck.core.exceptions import InvalidConfigurationError

PACKAGE_NAME = "sndcheck"
LOG_FORMAT = "%(levelname)s - %(name)s - %(message)s"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

_handler: Optional[logging.Handler] = None


def parse_level(level: Union[int, str]) -> int:
    """
    Turn a level name (any case) or number into a logging level.

    Raises:
        InvalidConfigurationError: If the name is not one of LOG_LEVELS.
    """
    if isinstance(level, int) and not isinstance(level, bool):
        return level
    name = str(level).strip().upper()
    if name not in LOG_LEVELS:
        raise InvalidConfigurationError(
            f"level must be one of {', '.join(LOG_LEVELS)}, got {level!r}.",
            key="logging.level",
        )
    return LOG_LEVELS[name]


def _package_logger() -> logging.Logger:
    global _handler
    package_logger = logging.getLogger(PACKAGE_NAME)
    if _handler is None:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(_handler)
        package_logger.setLevel(logging.WARNING)
        package_logger.propagate = False
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``; installs the package handler on first use."""
    _package_logger()
    return logging.getLogger(name)


def set_level(level: Union[int, str]) -> None:
    """Set the package level, e.g. ``set_level("info")`` or ``set_level(logging.DEBUG)``."""
    _package_logger().setLevel(parse_level(level))
