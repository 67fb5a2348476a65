"""Jupiter aggregator client for route discovery and swap transactions."""

import base64
import binascii
from decimal import ROUND_FLOOR, Decimal
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from solmind.config.settings import SOL_MINT, USDC_MINT, JupiterConfig
from solmind.data.jupiter.exceptions import (
    JupiterAPIError,
    RoutingError,
    SwapTransactionError,
)
from solmind.data.jupiter.schemas import QuoteResponse, SwapResponse, SwapRoute, TokenInfo
from solmind.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_DECIMALS = 9
NO_ROUTE_CODES = frozenset({"COULD_NOT_FIND_ANY_ROUTE", "NO_ROUTES_FOUND", "TOKEN_NOT_TRADABLE"})
WELL_KNOWN_MINTS = {"SOL": SOL_MINT, "WSOL": SOL_MINT, "USDC": USDC_MINT}

_token_list_adapter = TypeAdapter(list[TokenInfo])


def to_base_units(amount: float, decimals: int) -> int:
    """Convert a human-scale amount to integer base units, rounding down.

    Goes through the decimal text of ``amount`` so that values such as 0.29
    convert exactly.
    """
    scaled = Decimal(str(amount)).scaleb(decimals)
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


class JupiterClient:
    """Client for the Jupiter swap API.

    Quotes candidate routes between two mints and builds signable swap
    transactions for a chosen route. The token list is loaded once by
    ``init()`` and read-only afterwards.
    """

    def __init__(
        self,
        user_public_key: str,
        config: JupiterConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize Jupiter client.

        Args:
            user_public_key: Public key of the wallet that signs swaps.
            config: Jupiter settings; defaults are used when omitted.
            http: Shared HTTP client. One is created (and owned) when omitted.
        """
        self.config = config or JupiterConfig()
        self.user_public_key = str(user_public_key)
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(
            base_url=self.config.api_url,
            timeout=self.config.timeout,
            headers={"Accept": "application/json"},
        )
        self._tokens_by_address: dict[str, TokenInfo] = {}
        self._tokens_by_symbol: dict[str, TokenInfo] = {}

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def init(self) -> int:
        """Load the token list.

        Returns:
            Number of tokens loaded.
        """
        try:
            response = await self._http.get(self.config.token_list_url)
            response.raise_for_status()
            tokens = _token_list_adapter.validate_python(response.json())
        except httpx.HTTPError as e:
            logger.error("Failed to fetch token list: {}", str(e))
            raise JupiterAPIError(f"Failed to fetch token list: {e}") from e
        except (ValueError, ValidationError) as e:
            logger.error("Malformed token list: {}", str(e))
            raise JupiterAPIError(f"Malformed token list: {e}") from e

        self._tokens_by_address = {token.address: token for token in tokens}
        self._tokens_by_symbol = {}
        for token in tokens:
            self._tokens_by_symbol.setdefault(token.symbol.upper(), token)

        logger.info("Loaded {} tokens from Jupiter token list", len(tokens))
        return len(tokens)

    def get_token_info(self, mint: str) -> TokenInfo | None:
        """Get token metadata by mint address, or None when unknown."""
        return self._tokens_by_address.get(mint)

    def is_token_supported(self, mint: str) -> bool:
        """Check whether a mint is in the token list."""
        return mint in self._tokens_by_address

    def resolve_mint(self, token: str) -> str:
        """Resolve a symbol or mint address to a mint address.

        Unknown values are returned unchanged so the provider can reject them.
        """
        if token in self._tokens_by_address:
            return token
        by_symbol = self._tokens_by_symbol.get(token.upper())
        if by_symbol is not None:
            return by_symbol.address
        return WELL_KNOWN_MINTS.get(token.upper(), token)

    def token_decimals(self, mint: str) -> int:
        """Decimals of a mint, defaulting to 9 for unlisted tokens."""
        info = self.get_token_info(mint)
        return info.decimals if info is not None else DEFAULT_DECIMALS

    @staticmethod
    def validate_slippage(slippage: float) -> bool:
        """Check slippage lies between 0.1% and 5%."""
        return 0.001 <= slippage <= 0.05

    async def get_routes(
        self,
        input_mint: str,
        output_mint: str,
        amount: float,
        slippage: float,
        swap_mode: str = "ExactIn",
        only_direct_routes: bool | None = None,
        max_accounts: int | None = None,
    ) -> list[SwapRoute]:
        """Quote candidate routes for a swap.

        Args:
            input_mint: Mint being sold.
            output_mint: Mint being bought.
            amount: Human-scale amount of the input mint (``ExactIn``) or
                of the output mint (``ExactOut``).
            slippage: Maximum slippage as a fraction (0.01 = 1%).
            swap_mode: ``ExactIn`` or ``ExactOut``.
            only_direct_routes: Restrict to single-hop routes.
            max_accounts: Upper bound on accounts used by a route.

        Returns:
            Normalized routes; empty when the provider has no route.

        Raises:
            RoutingError: If the quote request fails or returns a malformed payload.
        """
        input_decimals = self.token_decimals(input_mint)
        output_decimals = self.token_decimals(output_mint)
        amount_decimals = output_decimals if swap_mode == "ExactOut" else input_decimals
        threshold_decimals = input_decimals if swap_mode == "ExactOut" else output_decimals

        if only_direct_routes is None:
            only_direct_routes = self.config.only_direct_routes
        if max_accounts is None:
            max_accounts = self.config.max_accounts

        params: dict[str, Any] = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(to_base_units(amount, amount_decimals)),
            "slippageBps": round(slippage * 10_000),
            "swapMode": swap_mode,
            "onlyDirectRoutes": str(only_direct_routes).lower(),
            "maxAccounts": max_accounts,
        }
        if self.config.platform_fee_bps is not None:
            params["platformFeeBps"] = self.config.platform_fee_bps

        logger.debug(
            "Quoting route: {} -> {} amount={} bps={} mode={}",
            input_mint[:8],
            output_mint[:8],
            params["amount"],
            params["slippageBps"],
            swap_mode,
        )

        try:
            response = await self._http.get("/quote", params=params)
        except httpx.HTTPError as e:
            logger.error("Quote request failed: {}", str(e))
            raise RoutingError(response=str(e)) from e

        payload = self._decode(response)
        if not response.is_success:
            if self._is_no_route(payload):
                logger.info("No route available: {} -> {}", input_mint[:8], output_mint[:8])
                return []
            logger.error("Quote rejected: status={} body={}", response.status_code, response.text)
            raise RoutingError(status_code=response.status_code, response=response.text)

        if payload is None:
            raise RoutingError(status_code=response.status_code, response=response.text)
        if isinstance(payload, dict):
            if self._is_no_route(payload):
                return []
            payload = [payload]
        if not isinstance(payload, list):
            raise RoutingError(status_code=response.status_code, response=response.text)

        routes = []
        for raw in payload:
            try:
                quote = QuoteResponse.model_validate(raw)
            except ValidationError as e:
                logger.error("Malformed quote payload: {}", str(e))
                raise RoutingError(status_code=response.status_code, response=str(e)) from e

            routes.append(
                SwapRoute(
                    route_info=raw,
                    out_amount=quote.out_amount / 10**output_decimals,
                    fee=quote.other_amount_threshold / 10**threshold_decimals,
                    price_impact=max(quote.price_impact_pct, 0.0),
                )
            )
        return routes

    async def get_swap_transaction(self, route: SwapRoute) -> bytes:
        """Build the unsigned swap transaction for a route.

        Args:
            route: The route selected for execution.

        Returns:
            Serialized transaction bytes ready for signing.

        Raises:
            SwapTransactionError: If the swap request fails or is malformed.
        """
        body: dict[str, Any] = {
            "quoteResponse": route.route_info,
            "userPublicKey": self.user_public_key,
            "wrapAndUnwrapSol": True,
            "dynamicComputeUnitLimit": True,
            "prioritizationFeeLamports": "auto",
        }
        if self.config.fee_account:
            body["feeAccount"] = self.config.fee_account

        try:
            response = await self._http.post("/swap", json=body)
        except httpx.HTTPError as e:
            logger.error("Swap request failed: {}", str(e))
            raise SwapTransactionError(response=str(e)) from e

        if not response.is_success:
            logger.error("Swap rejected: status={} body={}", response.status_code, response.text)
            raise SwapTransactionError(status_code=response.status_code, response=response.text)

        try:
            swap = SwapResponse.model_validate(self._decode(response))
            return base64.b64decode(swap.swap_transaction, validate=True)
        except (ValidationError, binascii.Error) as e:
            logger.error("Malformed swap payload: {}", str(e))
            raise SwapTransactionError(status_code=response.status_code, response=str(e)) from e

    async def get_best_route(
        self,
        input_mint: str,
        output_mint: str,
        amount: float,
        slippage: float,
        swap_mode: str = "ExactIn",
    ) -> SwapRoute | None:
        """Quote routes and pick the best one, or None if there are none."""
        from solmind.core.execution.routing import RouteSelector

        routes = await self.get_routes(input_mint, output_mint, amount, slippage, swap_mode)
        return RouteSelector(epsilon=self.config.route_epsilon).select_best(routes)

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    @staticmethod
    def _is_no_route(payload: Any) -> bool:
        if isinstance(payload, list):
            return len(payload) == 0
        if isinstance(payload, dict):
            return payload.get("errorCode") in NO_ROUTE_CODES
        return False
