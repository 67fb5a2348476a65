"""Configuration module."""

from solmind.config.settings import (
    JupiterConfig,
    ModelConfig,
    Settings,
    SolanaConfig,
    TradingConfig,
    load_settings,
)

__all__ = [
    "JupiterConfig",
    "ModelConfig",
    "Settings",
    "SolanaConfig",
    "TradingConfig",
    "load_settings",
]
