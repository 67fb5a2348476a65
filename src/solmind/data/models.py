"""Wallet data models derived from on-chain activity."""

import math
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class TransactionRecord:
    """A single confirmed transaction touching a wallet.

    Balances are the wallet's native balance (lamports) before and after
    the transaction; ``fee`` is the network fee paid.
    """

    signature: str
    block_time: datetime | None
    fee: int = 0
    pre_balance: int = 0
    post_balance: int = 0
    err: Any = None

    @property
    def balance_change(self) -> int:
        """Net change of the wallet's native balance."""
        return self.post_balance - self.pre_balance


@dataclass(frozen=True)
class TokenHolding:
    """A token account held by a wallet."""

    address: str
    symbol: str = "UNKNOWN"
    name: str = "Unknown Token"
    decimals: int = 0
    balance: float = 0.0
    value: float = 0.0
    price: float = 0.0
    change_24h: float = 0.0


@dataclass(frozen=True)
class WalletStats:
    """Display summary mirroring part of a WalletState."""

    total_value: float = 0.0
    total_transactions: int = 0
    unique_tokens: int = 0
    avg_transaction_value: float = 0.0
    last_activity: datetime | None = None


@dataclass(frozen=True)
class WalletState:
    """Fixed-shape feature snapshot of a wallet.

    Attributes:
        transaction_count: Number of transactions observed.
        unique_tokens: Number of distinct token mints held.
        avg_transaction_value: Mean per-transaction fee in lamports.
        trade_frequency: Transactions per day over the observed span.
        profit_ratio: Inflow divided by outflow (outflow floored at 1).
        risk_level: Risk score clamped to [0, 1].
        time_in_market: Days since the earliest observed transaction.
        total_inflow: Sum of post-transaction balances in lamports.
        total_outflow: Sum of pre-transaction balances in lamports.
        last_activity: Time of the most recent transaction.
        tokens: Token holdings.
        stats: Display summary.
    """

    transaction_count: int = 0
    unique_tokens: int = 0
    avg_transaction_value: float = 0.0
    trade_frequency: float = 0.0
    profit_ratio: float = 0.0
    risk_level: float = 0.0
    time_in_market: float = 0.0
    total_inflow: float = 0.0
    total_outflow: float = 0.0
    last_activity: datetime | None = None
    tokens: tuple[TokenHolding, ...] = ()
    stats: WalletStats = field(default_factory=WalletStats)

    def __post_init__(self) -> None:
        numeric = {
            "transaction_count": self.transaction_count,
            "unique_tokens": self.unique_tokens,
            "avg_transaction_value": self.avg_transaction_value,
            "trade_frequency": self.trade_frequency,
            "profit_ratio": self.profit_ratio,
            "risk_level": self.risk_level,
            "time_in_market": self.time_in_market,
            "total_inflow": self.total_inflow,
            "total_outflow": self.total_outflow,
        }
        for name, value in numeric.items():
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be finite and non-negative, got {value}")
        if self.risk_level > 1.0:
            raise ValueError(f"risk_level must be within [0, 1], got {self.risk_level}")
        if not isinstance(self.tokens, tuple):
            object.__setattr__(self, "tokens", tuple(self.tokens))

    def to_dict(self) -> dict[str, Any]:
        """Serialize wallet state to dictionary."""
        data = asdict(self)
        data["tokens"] = [asdict(token) for token in self.tokens]
        if self.last_activity is not None:
            data["last_activity"] = self.last_activity.isoformat()
        if self.stats.last_activity is not None:
            data["stats"]["last_activity"] = self.stats.last_activity.isoformat()
        return data


@dataclass(frozen=True)
class ConfirmationResult:
    """Terminal status of a submitted transaction."""

    signature: str
    err: Any = None
    slot: int | None = None
    confirmation_status: str | None = None

    @property
    def succeeded(self) -> bool:
        """Check whether the transaction landed without error."""
        return self.err is None
