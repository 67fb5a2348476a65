"""Trade parameters, results and per-invocation pipeline state."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from solmind.core.brain.decision import ActionType, TradeAction
from solmind.utils.errors import TradeParamsError


@dataclass(frozen=True)
class TradeParams:
    """Caller input for one strategy invocation.

    Attributes:
        wallet_address: Wallet whose behavior drives the decision.
        max_amount: Upper bound on the traded amount (base asset units).
        slippage: Maximum slippage as a fraction in (0, 1).
    """

    wallet_address: str
    max_amount: float
    slippage: float

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        """Check the parameters.

        Raises:
            TradeParamsError: If any parameter is malformed.
        """
        if not isinstance(self.wallet_address, str) or not self.wallet_address.strip():
            raise TradeParamsError("wallet_address must be a non-empty string")
        if not isinstance(self.max_amount, (int, float)) or not math.isfinite(self.max_amount):
            raise TradeParamsError(f"max_amount must be a finite number, got {self.max_amount!r}")
        if self.max_amount <= 0:
            raise TradeParamsError(f"max_amount must be positive, got {self.max_amount}")
        if not isinstance(self.slippage, (int, float)) or not 0 < self.slippage < 1:
            raise TradeParamsError(f"slippage must be within (0, 1), got {self.slippage!r}")


@dataclass(frozen=True)
class TradeResult:
    """Outcome of a strategy invocation.

    ``success`` is the sole discriminant: successful results carry the
    transaction id and the predicted action, failed results carry only
    ``error``.
    """

    success: bool
    txid: str | None = None
    action: ActionType | None = None
    token: str | None = None
    amount: float | None = None
    confidence: float | None = None
    error: str | None = None

    @classmethod
    def ok(cls, txid: str, prediction: TradeAction) -> "TradeResult":
        """Create a success result reporting the predicted action."""
        return cls(
            success=True,
            txid=txid,
            action=prediction.type,
            token=prediction.token,
            amount=prediction.amount,
            confidence=prediction.confidence,
        )

    @classmethod
    def fail(cls, error: str) -> "TradeResult":
        """Create a failure result."""
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the populated shape only."""
        if not self.success:
            return {"success": False, "error": self.error}
        return {
            "success": True,
            "txid": self.txid,
            "action": self.action.value if self.action else None,
            "token": self.token,
            "amount": self.amount,
            "confidence": self.confidence,
        }


class TradeStage(str, Enum):
    """Stages of one strategy invocation."""

    START = "start"
    STATE_LOADED = "state_loaded"
    PREDICTED = "predicted"
    ROUTED = "routed"
    SELECTED = "selected"
    EXECUTED = "executed"
    CONFIRMED = "confirmed"
    DONE = "done"
    FAILED = "failed"


_ORDER = list(TradeStage)


@dataclass
class TradeRun:
    """Tracks one invocation through its stages.

    Stages only move forward; ``FAILED`` is terminal and reachable from
    any non-terminal stage.
    """

    wallet_address: str
    stage: TradeStage = TradeStage.START
    history: list[TradeStage] = field(default_factory=lambda: [TradeStage.START])
    failure_reason: str | None = None
    failed_at: TradeStage | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return self.stage in (TradeStage.DONE, TradeStage.FAILED)

    def advance(self, stage: TradeStage) -> None:
        """Move to a later stage."""
        if self.is_terminal or stage is TradeStage.FAILED:
            raise RuntimeError(f"Cannot advance from {self.stage.value} to {stage.value}")
        if _ORDER.index(stage) <= _ORDER.index(self.stage):
            raise RuntimeError(f"Cannot move back from {self.stage.value} to {stage.value}")
        self.stage = stage
        self.history.append(stage)
        self.updated_at = datetime.now(timezone.utc)

    def fail(self, reason: str) -> TradeResult:
        """Mark the run failed and build the matching result."""
        self.failed_at = self.stage
        self.failure_reason = reason
        self.stage = TradeStage.FAILED
        self.history.append(TradeStage.FAILED)
        self.updated_at = datetime.now(timezone.utc)
        return TradeResult.fail(reason)
