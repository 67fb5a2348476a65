"""Tests for wallet state aggregation."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from solmind.core.intelligence.aggregator import WalletStateAggregator, risk_level, trade_frequency
from solmind.data.jupiter.schemas import TokenInfo
from solmind.data.models import TokenHolding, TransactionRecord, WalletState
from solmind.data.solana.exceptions import SolanaRPCError

START = datetime(2025, 1, 1, tzinfo=UTC)


def tx(day: float, fee: int, pre: int, post: int) -> TransactionRecord:
    return TransactionRecord(
        signature=f"sig-{day}",
        block_time=START + timedelta(days=day),
        fee=fee,
        pre_balance=pre,
        post_balance=post,
    )


@pytest.fixture
def transactions() -> list[TransactionRecord]:
    """Three transactions over two days, newest first."""
    return [
        tx(2, 7000, 1200, 1100),
        tx(1, 6000, 900, 1200),
        tx(0, 5000, 1000, 900),
    ]


@pytest.fixture
def provider(transactions):
    provider = AsyncMock()
    provider.get_transaction_history = AsyncMock(return_value=transactions)
    provider.get_token_accounts = AsyncMock(
        return_value=[TokenHolding(address="MintA"), TokenHolding(address="MintB")]
    )
    return provider


@pytest.fixture
def aggregator(provider) -> WalletStateAggregator:
    return WalletStateAggregator(provider, clock=lambda: START + timedelta(days=10))


class TestWalletStateAggregator:
    """Tests for WalletStateAggregator.load."""

    @pytest.mark.asyncio
    async def test_load_derives_features(self, aggregator, provider):
        state = await aggregator.load("wallet")

        assert state.transaction_count == 3
        assert state.unique_tokens == 2
        assert state.avg_transaction_value == pytest.approx(6000)
        assert state.trade_frequency == pytest.approx(1.5)
        assert state.time_in_market == pytest.approx(10)
        assert state.last_activity == START + timedelta(days=2)
        provider.get_transaction_history.assert_awaited_once_with("wallet")
        provider.get_token_accounts.assert_awaited_once_with("wallet")

    @pytest.mark.asyncio
    async def test_flows_and_profit_ratio(self, aggregator):
        """Inflow sums post balances and outflow sums pre balances."""
        state = await aggregator.load("wallet")

        assert state.total_inflow == 3200
        assert state.total_outflow == 3100
        assert state.profit_ratio == pytest.approx(3200 / 3100)

    @pytest.mark.asyncio
    async def test_risk_level(self, aggregator):
        moves = np.array([100.0, 300.0, 100.0])
        expected = moves.std() / moves.mean() * 1.5 / 100

        state = await aggregator.load("wallet")

        assert state.risk_level == pytest.approx(expected)

    @pytest.mark.asyncio
    async def test_empty_wallet(self, provider):
        """A wallet with no activity yields the zero state."""
        provider.get_transaction_history.return_value = []
        provider.get_token_accounts.return_value = []
        aggregator = WalletStateAggregator(provider, clock=lambda: START)

        state = await aggregator.load("wallet")

        assert state == WalletState()

    @pytest.mark.asyncio
    async def test_zero_outflow_uses_unit_denominator(self, provider):
        provider.get_transaction_history.return_value = [tx(0, 5000, 0, 500), tx(1, 5000, 0, 700)]
        aggregator = WalletStateAggregator(provider, clock=lambda: START + timedelta(days=1))

        state = await aggregator.load("wallet")

        assert state.profit_ratio == 1200

    @pytest.mark.asyncio
    async def test_token_lookup_fills_metadata(self, provider):
        token_a = TokenInfo(address="MintA", symbol="AAA", name="Token A")
        lookup = MagicMock(side_effect=lambda mint: token_a if mint == "MintA" else None)
        aggregator = WalletStateAggregator(provider, token_lookup=lookup, clock=lambda: START)

        state = await aggregator.load("wallet")

        assert state.tokens[0].symbol == "AAA"
        assert state.tokens[0].name == "Token A"
        assert state.tokens[1].symbol == "UNKNOWN"

    @pytest.mark.asyncio
    async def test_provider_errors_propagate(self, aggregator, provider):
        provider.get_transaction_history.side_effect = SolanaRPCError("node down")

        with pytest.raises(SolanaRPCError):
            await aggregator.load("wallet")

    @pytest.mark.asyncio
    async def test_stats_mirror_state(self, aggregator):
        state = await aggregator.load("wallet")

        assert state.stats.total_transactions == 3
        assert state.stats.unique_tokens == 2
        assert state.stats.avg_transaction_value == state.avg_transaction_value


class TestTradeFrequency:
    """Tests for trade_frequency."""

    def test_single_transaction_is_zero(self):
        assert trade_frequency(1, START, START) == 0.0

    def test_zero_span_is_zero(self):
        assert trade_frequency(3, START, START) == 0.0

    def test_per_day_rate(self):
        assert trade_frequency(4, START, START + timedelta(days=2)) == 2.0


class TestRiskLevel:
    """Tests for risk_level."""

    def test_clamped_to_one(self):
        """Very active volatile wallets saturate at 1."""
        records = [
            tx(0, 0, 0, 0),
            tx(1 / 86400, 0, 0, 1000),
        ]

        assert risk_level(records, frequency=172800) == 1.0

    def test_no_movement_is_zero(self):
        records = [tx(0, 0, 500, 500), tx(1, 0, 500, 500)]

        assert risk_level(records, frequency=2.0) == 0.0
