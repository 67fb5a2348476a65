"""Tests for the Jupiter aggregator client."""

import base64
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from solmind.config.settings import SOL_MINT, USDC_MINT, JupiterConfig
from solmind.data.jupiter.client import JupiterClient, to_base_units
from solmind.data.jupiter.exceptions import JupiterAPIError, RoutingError, SwapTransactionError
from solmind.data.jupiter.schemas import SwapRoute

API_URL = "https://quote-api.jup.ag/v6"


def make_response(status: int, payload, method: str = "GET", path: str = "/quote") -> httpx.Response:
    return httpx.Response(status, json=payload, request=httpx.Request(method, API_URL + path))


@pytest.fixture
def client() -> JupiterClient:
    return JupiterClient("wallet-pubkey")


@pytest.fixture
def mock_quote() -> dict:
    """Quote selling 1 SOL for 2 units of a 9-decimal token."""
    return {
        "inputMint": SOL_MINT,
        "inAmount": "1000000000",
        "outputMint": "MockMint111111111111111111111111111111111111",
        "outAmount": "2000000000",
        "otherAmountThreshold": "1950000000",
        "swapMode": "ExactIn",
        "slippageBps": 100,
        "priceImpactPct": "0.1",
        "routePlan": [{"swapInfo": {"label": "Orca"}, "percent": 100}],
    }


@pytest.fixture
def token_list() -> list[dict]:
    return [
        {"address": SOL_MINT, "symbol": "SOL", "name": "Wrapped SOL", "decimals": 9},
        {"address": USDC_MINT, "symbol": "USDC", "name": "USD Coin", "decimals": 6},
    ]


class TestTokenList:
    """Tests for token list loading and lookups."""

    @pytest.mark.asyncio
    async def test_init_loads_tokens(self, client, token_list):
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, token_list, path="/all")

            count = await client.init()

        assert count == 2
        assert client.get_token_info(USDC_MINT).symbol == "USDC"
        assert client.is_token_supported(SOL_MINT)
        assert not client.is_token_supported("unknown")
        assert client.get_token_info("unknown") is None

    @pytest.mark.asyncio
    async def test_init_failure_raises(self, client):
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(503, {"error": "down"}, path="/all")

            with pytest.raises(JupiterAPIError):
                await client.init()

    @pytest.mark.asyncio
    async def test_resolve_mint(self, client, token_list):
        """Symbols resolve through the token list, mints pass through."""
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, token_list, path="/all")
            await client.init()

        assert client.resolve_mint("usdc") == USDC_MINT
        assert client.resolve_mint(SOL_MINT) == SOL_MINT
        assert client.resolve_mint("SomeMint") == "SomeMint"

    def test_resolve_well_known_without_token_list(self, client):
        assert client.resolve_mint("SOL") == SOL_MINT
        assert client.resolve_mint("USDC") == USDC_MINT

    def test_unlisted_token_decimals_default(self, client):
        assert client.token_decimals("unknown") == 9


@pytest.mark.parametrize(
    "amount, decimals, expected",
    [(0.29, 9, 290_000_000), (1.0, 9, 1_000_000_000), (2.5, 6, 2_500_000), (0.1234567, 6, 123_456)],
)
def test_to_base_units(amount, decimals, expected):
    """Decimal amounts convert exactly and round down below one base unit."""
    assert to_base_units(amount, decimals) == expected


class TestValidateSlippage:
    """Tests for JupiterClient.validate_slippage."""

    @pytest.mark.parametrize("slippage", [0.001, 0.01, 0.05])
    def test_accepts_range(self, slippage):
        assert JupiterClient.validate_slippage(slippage) is True

    @pytest.mark.parametrize("slippage", [0.0, 0.0009, 0.051, 1.0])
    def test_rejects_outside_range(self, slippage):
        assert JupiterClient.validate_slippage(slippage) is False


class TestGetRoutes:
    """Tests for JupiterClient.get_routes."""

    @pytest.mark.asyncio
    async def test_formats_routes(self, client, mock_quote):
        """Base-unit quotes are converted to human-scale routes."""
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, [mock_quote])

            routes = await client.get_routes(SOL_MINT, mock_quote["outputMint"], 1.0, 0.01)

        assert len(routes) == 1
        assert routes[0].out_amount == 2.0
        assert routes[0].fee == pytest.approx(1.95)
        assert routes[0].price_impact == pytest.approx(0.1)
        assert routes[0].route_info == mock_quote

    @pytest.mark.asyncio
    async def test_request_parameters(self, client, mock_quote):
        """Amount is sent in base units and slippage in basis points."""
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, mock_quote)

            await client.get_routes(SOL_MINT, USDC_MINT, 1.0, 0.01)

        args, kwargs = mock_get.call_args
        assert args[0] == "/quote"
        params = kwargs["params"]
        assert params["inputMint"] == SOL_MINT
        assert params["outputMint"] == USDC_MINT
        assert params["amount"] == "1000000000"
        assert params["slippageBps"] == 100
        assert params["swapMode"] == "ExactIn"
        assert params["onlyDirectRoutes"] == "false"
        assert "platformFeeBps" not in params

    @pytest.mark.asyncio
    async def test_amount_has_no_float_truncation(self, client, mock_quote):
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, mock_quote)

            await client.get_routes(SOL_MINT, USDC_MINT, 0.29, 0.01)

        assert mock_get.call_args.kwargs["params"]["amount"] == "290000000"

    @pytest.mark.asyncio
    async def test_exact_out_uses_output_decimals(self, client, token_list, mock_quote):
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, token_list, path="/all")
            await client.init()

            mock_get.return_value = make_response(200, mock_quote)
            await client.get_routes(SOL_MINT, USDC_MINT, 2.5, 0.01, swap_mode="ExactOut")

        params = mock_get.call_args.kwargs["params"]
        assert params["amount"] == "2500000"
        assert params["swapMode"] == "ExactOut"

    @pytest.mark.asyncio
    async def test_platform_fee_forwarded(self, mock_quote):
        client = JupiterClient("wallet-pubkey", JupiterConfig(platform_fee_bps=20))
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, mock_quote)

            await client.get_routes(SOL_MINT, USDC_MINT, 1.0, 0.01)

        assert mock_get.call_args.kwargs["params"]["platformFeeBps"] == 20

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self, client):
        """A rejected quote request raises RoutingError."""
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(500, {"error": "internal"})

            with pytest.raises(RoutingError) as exc_info:
                await client.get_routes(SOL_MINT, USDC_MINT, 1.0, 0.01)

        assert exc_info.value.message == "Failed to get routes"
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_no_route_is_empty(self, client):
        """Provider 'no route' answers are an empty list, not an error."""
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(
                400, {"error": "Could not find any route", "errorCode": "COULD_NOT_FIND_ANY_ROUTE"}
            )

            routes = await client.get_routes(SOL_MINT, USDC_MINT, 1.0, 0.01)

        assert routes == []

    @pytest.mark.asyncio
    async def test_empty_list_is_empty(self, client):
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, [])

            assert await client.get_routes(SOL_MINT, USDC_MINT, 1.0, 0.01) == []

    @pytest.mark.asyncio
    async def test_malformed_quote_raises(self, client, mock_quote):
        """Quotes missing required fields are rejected."""
        del mock_quote["outAmount"]
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, [mock_quote])

            with pytest.raises(RoutingError):
                await client.get_routes(SOL_MINT, USDC_MINT, 1.0, 0.01)

    @pytest.mark.asyncio
    async def test_transport_error_raises(self, client):
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.side_effect = httpx.ConnectError("connection refused")

            with pytest.raises(RoutingError):
                await client.get_routes(SOL_MINT, USDC_MINT, 1.0, 0.01)

    @pytest.mark.asyncio
    async def test_get_best_route(self, client, mock_quote):
        """The best route is chosen from the quoted candidates."""
        better = dict(mock_quote, outAmount="3000000000", priceImpactPct="0.2")
        with patch.object(client._http, "get", new_callable=AsyncMock) as mock_get:
            mock_get.return_value = make_response(200, [mock_quote, better])

            route = await client.get_best_route(SOL_MINT, USDC_MINT, 1.0, 0.01)

        assert route is not None
        assert route.out_amount == 3.0


class TestGetSwapTransaction:
    """Tests for JupiterClient.get_swap_transaction."""

    @pytest.fixture
    def route(self, mock_quote) -> SwapRoute:
        return SwapRoute(route_info=mock_quote, out_amount=2.0, fee=1.95, price_impact=0.1)

    @pytest.mark.asyncio
    async def test_returns_decoded_transaction(self, client, route, mock_quote):
        encoded = base64.b64encode(b"serialized-transaction").decode()
        with patch.object(client._http, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = make_response(
                200, {"swapTransaction": encoded, "lastValidBlockHeight": 123}, "POST", "/swap"
            )

            transaction = await client.get_swap_transaction(route)

        assert transaction == b"serialized-transaction"
        args, kwargs = mock_post.call_args
        assert args[0] == "/swap"
        assert kwargs["json"]["quoteResponse"] == mock_quote
        assert kwargs["json"]["userPublicKey"] == "wallet-pubkey"
        assert kwargs["json"]["wrapAndUnwrapSol"] is True
        assert "feeAccount" not in kwargs["json"]

    @pytest.mark.asyncio
    async def test_non_2xx_raises(self, client, route):
        with patch.object(client._http, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = make_response(400, {"error": "bad"}, "POST", "/swap")

            with pytest.raises(SwapTransactionError) as exc_info:
                await client.get_swap_transaction(route)

        assert str(exc_info.value) == "Failed to get swap transaction"

    @pytest.mark.asyncio
    async def test_missing_transaction_raises(self, client, route):
        with patch.object(client._http, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = make_response(200, {"lastValidBlockHeight": 1}, "POST", "/swap")

            with pytest.raises(SwapTransactionError):
                await client.get_swap_transaction(route)

    @pytest.mark.asyncio
    async def test_fee_account_forwarded(self, route):
        client = JupiterClient("wallet-pubkey", JupiterConfig(fee_account="FeeAccount111"))
        encoded = base64.b64encode(b"tx").decode()
        with patch.object(client._http, "post", new_callable=AsyncMock) as mock_post:
            mock_post.return_value = make_response(200, {"swapTransaction": encoded}, "POST", "/swap")

            await client.get_swap_transaction(route)

        assert mock_post.call_args.kwargs["json"]["feeAccount"] == "FeeAccount111"
