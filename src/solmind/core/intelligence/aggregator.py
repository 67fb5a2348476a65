"""Wallet state aggregation from raw on-chain activity."""

from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Protocol

import numpy as np

from solmind.data.models import TokenHolding, TransactionRecord, WalletState, WalletStats
from solmind.utils.logging import get_logger

logger = get_logger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class BlockchainDataProvider(Protocol):
    """Protocol for the on-chain data needed to build a wallet state."""

    async def get_transaction_history(self, address: str) -> list[TransactionRecord]:
        """Get recent transactions for a wallet, newest first."""
        ...

    async def get_token_accounts(self, address: str) -> list[TokenHolding]:
        """Get token holdings for a wallet."""
        ...


class WalletStateAggregator:
    """Builds WalletState feature snapshots for wallets.

    Provider errors propagate unchanged; nothing is cached between calls.
    """

    def __init__(
        self,
        provider: BlockchainDataProvider,
        token_lookup: Callable[[str], Any] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            provider: Source of transaction history and token accounts.
            token_lookup: Optional mint -> token metadata lookup used to
                fill in symbols and names.
            clock: Returns the current time (UTC); injectable for tests.
        """
        self._provider = provider
        self._token_lookup = token_lookup
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def load(self, address: str) -> WalletState:
        """Load a fresh WalletState for a wallet address."""
        transactions = await self._provider.get_transaction_history(address)
        holdings = await self._provider.get_token_accounts(address)
        state = self.aggregate(transactions, holdings, self._clock())
        logger.debug(
            "Wallet state loaded: wallet={} txs={} tokens={}",
            address[:10],
            state.transaction_count,
            state.unique_tokens,
        )
        return state

    def aggregate(
        self,
        transactions: Sequence[TransactionRecord],
        holdings: Sequence[TokenHolding],
        now: datetime,
    ) -> WalletState:
        """Derive a WalletState from transactions and holdings.

        Args:
            transactions: Wallet transactions in any order.
            holdings: Token accounts held by the wallet.
            now: Reference time for time-in-market.

        Returns:
            WalletState with every feature finite and non-negative.
        """
        count = len(transactions)
        tokens = tuple(self._describe(holding) for holding in holdings)
        unique_tokens = len({holding.address for holding in holdings})

        fees = [tx.fee for tx in transactions]
        avg_value = float(np.mean(fees)) if fees else 0.0

        times = [tx.block_time for tx in transactions if tx.block_time is not None]
        first_seen = min(times) if times else None
        last_seen = max(times) if times else None

        frequency = trade_frequency(count, first_seen, last_seen)

        total_inflow = float(sum(tx.post_balance for tx in transactions))
        total_outflow = float(sum(tx.pre_balance for tx in transactions))
        profit_ratio = total_inflow / max(total_outflow, 1.0)

        risk = risk_level(transactions, frequency)

        time_in_market = 0.0
        if first_seen is not None:
            time_in_market = max((now - first_seen).total_seconds() / SECONDS_PER_DAY, 0.0)

        return WalletState(
            transaction_count=count,
            unique_tokens=unique_tokens,
            avg_transaction_value=avg_value,
            trade_frequency=frequency,
            profit_ratio=profit_ratio,
            risk_level=risk,
            time_in_market=time_in_market,
            total_inflow=total_inflow,
            total_outflow=total_outflow,
            last_activity=last_seen,
            tokens=tokens,
            stats=WalletStats(
                total_value=sum(token.value for token in tokens),
                total_transactions=count,
                unique_tokens=unique_tokens,
                avg_transaction_value=avg_value,
                last_activity=last_seen,
            ),
        )

    def _describe(self, holding: TokenHolding) -> TokenHolding:
        if self._token_lookup is None:
            return holding
        info = self._token_lookup(holding.address)
        if info is None:
            return holding
        return replace(
            holding,
            symbol=getattr(info, "symbol", None) or holding.symbol,
            name=getattr(info, "name", None) or holding.name,
        )


def trade_frequency(
    count: int, first_seen: datetime | None, last_seen: datetime | None
) -> float:
    """Transactions per day between the first and last observed activity."""
    if count < 2 or first_seen is None or last_seen is None:
        return 0.0
    span_days = (last_seen - first_seen).total_seconds() / SECONDS_PER_DAY
    if span_days <= 0:
        return 0.0
    return count / span_days


def risk_level(transactions: Sequence[TransactionRecord], frequency: float) -> float:
    """Risk score in [0, 1] from balance volatility scaled by activity.

    Volatility is the coefficient of variation of absolute balance moves.
    """
    moves = np.array([abs(tx.balance_change) for tx in transactions], dtype=np.float64)
    if len(moves) < 2 or moves.mean() == 0:
        return 0.0
    volatility = float(moves.std() / moves.mean())
    return min(max(volatility * frequency / 100, 0.0), 1.0)
