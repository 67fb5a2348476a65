"""Behavior classifier for trading decisions."""

from solmind.core.brain.decision import ActionType, TradeAction, TrainingExample
from solmind.core.brain.model import BehaviorModel, build_network

__all__ = [
    "ActionType",
    "BehaviorModel",
    "TradeAction",
    "TrainingExample",
    "build_network",
]
