"""Wallet intelligence module."""

from solmind.core.intelligence.aggregator import (
    BlockchainDataProvider,
    WalletStateAggregator,
    risk_level,
    trade_frequency,
)

__all__ = [
    "BlockchainDataProvider",
    "WalletStateAggregator",
    "risk_level",
    "trade_frequency",
]
