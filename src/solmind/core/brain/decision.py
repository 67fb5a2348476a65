"""Trade action model produced by the behavior classifier."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

from solmind.data.models import WalletState


class ActionType(str, Enum):
    """Trade direction chosen by the classifier.

    Member order matches the classifier's output classes.
    """

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"

    @classmethod
    def from_index(cls, index: int) -> "ActionType":
        """Map a class index to its action."""
        return list(cls)[index]

    @property
    def index(self) -> int:
        """Class index of this action."""
        return list(type(self)).index(self)


@dataclass(frozen=True)
class TradeAction:
    """Classifier decision: direction, asset, default size and confidence."""

    type: ActionType
    token: str
    amount: float
    confidence: float

    def __post_init__(self) -> None:
        if not isinstance(self.type, ActionType):
            object.__setattr__(self, "type", ActionType(self.type))
        if not math.isfinite(self.amount) or self.amount <= 0:
            raise ValueError(f"amount must be positive, got {self.amount}")
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize TradeAction to dictionary."""
        return {
            "type": self.type.value,
            "token": self.token,
            "amount": self.amount,
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class TrainingExample:
    """A labeled example for retraining the classifier."""

    state: WalletState
    action: TradeAction
    reward: float = 0.0
