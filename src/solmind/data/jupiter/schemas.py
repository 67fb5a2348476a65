"""Validated Jupiter payloads and the normalized swap route."""

import math
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QuoteResponse(BaseModel):
    """A single quote returned by the Jupiter quote endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    input_mint: str = Field(alias="inputMint")
    in_amount: int = Field(alias="inAmount", ge=0)
    output_mint: str = Field(alias="outputMint")
    out_amount: int = Field(alias="outAmount", ge=0)
    other_amount_threshold: int = Field(alias="otherAmountThreshold", ge=0)
    swap_mode: str = Field(default="ExactIn", alias="swapMode")
    slippage_bps: int = Field(default=0, alias="slippageBps")
    price_impact_pct: float = Field(alias="priceImpactPct")
    route_plan: list[dict[str, Any]] = Field(default_factory=list, alias="routePlan")
    context_slot: int | None = Field(default=None, alias="contextSlot")
    time_taken: float | None = Field(default=None, alias="timeTaken")


class SwapResponse(BaseModel):
    """Signable transaction returned by the Jupiter swap endpoint."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    swap_transaction: str = Field(alias="swapTransaction", min_length=1)
    last_valid_block_height: int | None = Field(default=None, alias="lastValidBlockHeight")


class TokenInfo(BaseModel):
    """Entry of the Jupiter token list."""

    model_config = ConfigDict(extra="ignore")

    address: str
    symbol: str = ""
    name: str = ""
    decimals: int = Field(default=9, ge=0)
    tags: list[str] = Field(default_factory=list)


@dataclass(frozen=True)
class SwapRoute:
    """Candidate execution path for a swap.

    Amounts are human-scale (base units divided by the token's decimals).
    Routes are built fresh for every quote and never cached.

    Attributes:
        route_info: Raw provider quote, passed back unchanged when swapping.
        out_amount: Expected output amount.
        fee: Slippage-adjusted threshold amount reported by the provider.
        price_impact: Fractional price impact of the trade.
    """

    route_info: dict[str, Any] = field(repr=False)
    out_amount: float
    fee: float
    price_impact: float

    def __post_init__(self) -> None:
        for name in ("out_amount", "fee", "price_impact"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise ValueError(f"{name} must be finite and non-negative, got {value}")

    def to_dict(self) -> dict[str, Any]:
        """Serialize route to dictionary."""
        return {
            "route_info": self.route_info,
            "out_amount": self.out_amount,
            "fee": self.fee,
            "price_impact": self.price_impact,
        }
