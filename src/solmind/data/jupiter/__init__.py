"""Jupiter swap aggregator integration."""

from solmind.data.jupiter.client import JupiterClient
from solmind.data.jupiter.exceptions import (
    JupiterAPIError,
    JupiterError,
    RoutingError,
    SwapTransactionError,
)
from solmind.data.jupiter.schemas import QuoteResponse, SwapResponse, SwapRoute, TokenInfo

__all__ = [
    "JupiterAPIError",
    "JupiterClient",
    "JupiterError",
    "QuoteResponse",
    "RoutingError",
    "SwapResponse",
    "SwapRoute",
    "SwapTransactionError",
    "TokenInfo",
]
