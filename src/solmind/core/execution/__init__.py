"""Execution module: routing, trade state and the auto-trader."""

__all__ = [
    "AutoTrader",
    "RouteSelector",
    "TradeParams",
    "TradeResult",
    "TradeRun",
    "TradeStage",
]


def __getattr__(name: str):
    """Lazy import to avoid circular imports."""
    if name == "RouteSelector":
        from solmind.core.execution.routing import RouteSelector
        return RouteSelector
    if name in ("TradeParams", "TradeResult", "TradeRun", "TradeStage"):
        from solmind.core.execution import trade
        return getattr(trade, name)
    if name == "AutoTrader":
        from solmind.core.execution.trader import AutoTrader
        return AutoTrader
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
