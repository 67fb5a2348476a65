"""Utility modules for SolMind."""

from solmind.utils.errors import (
    ConfigError,
    ModelError,
    SolmindError,
    TradeParamsError,
)
from solmind.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigError",
    "ModelError",
    "SolmindError",
    "TradeParamsError",
    "configure_logging",
    "get_logger",
]
