"""Route selection with a deterministic tie-break policy."""

from collections.abc import Sequence
from dataclasses import dataclass

from solmind.data.jupiter.schemas import SwapRoute

# Absorbs binary float error when comparing decimal output amounts.
TIE_TOLERANCE = 1e-9


@dataclass
class RouteSelector:
    """Picks the best route from quoted candidates.

    Higher output wins; outputs within ``epsilon`` of the best are treated
    as a tie and the lowest price impact among them wins. Remaining ties
    keep the provider's order.

    Attributes:
        epsilon: Output difference (in output units) treated as a tie.
    """

    epsilon: float = 0.01

    def select_best(self, routes: Sequence[SwapRoute]) -> SwapRoute | None:
        """Select the best route, or None when there are no routes."""
        if not routes:
            return None

        best_out = max(route.out_amount for route in routes)
        contenders = [
            route for route in routes if best_out - route.out_amount < self.epsilon - TIE_TOLERANCE
        ]
        return min(contenders, key=lambda route: route.price_impact)
