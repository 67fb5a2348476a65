"""Loguru configuration for SolMind."""

import logging
import sys
from typing import Any

from loguru import logger

# Stdlib loggers of HTTP and ML backends that log per request or per op.
NOISY_LIBRARIES = ("httpx", "httpcore", "absl", "tensorflow", "keras")

_TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


def configure_logging(
    level: str = "INFO",
    json_format: bool = False,
    library_level: str = "WARNING",
) -> Any:
    """Configure application logging.

    Replaces loguru's default sink with a single stderr sink and caps the
    level of chatty third-party stdlib loggers.

    Args:
        level: Log level for SolMind messages (DEBUG, INFO, WARNING, ERROR).
        json_format: Emit one JSON object per record instead of text.
        library_level: Level applied to HTTP and ML backend loggers.

    Returns:
        Configured logger instance.
    """
    logger.remove()
    logger.configure(extra={"name": "solmind"})

    if json_format:
        logger.add(sys.stderr, format="{message}", level=level.upper(), serialize=True)
    else:
        logger.add(sys.stderr, format=_TEXT_FORMAT, level=level.upper(), colorize=True)

    for name in NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(library_level.upper())

    return logger


def get_logger(name: str) -> Any:
    """Get a logger bound to a module name."""
    return logger.bind(name=name)
