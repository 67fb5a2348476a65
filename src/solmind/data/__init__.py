"""Data layer for on-chain and swap-routing providers."""

from solmind.data.models import (
    ConfirmationResult,
    TokenHolding,
    TransactionRecord,
    WalletState,
    WalletStats,
)

__all__ = [
    "ConfirmationResult",
    "TokenHolding",
    "TransactionRecord",
    "WalletState",
    "WalletStats",
]
