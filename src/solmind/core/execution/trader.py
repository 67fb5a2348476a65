"""Auto-trader orchestrating the decision-and-execution pipeline."""

import asyncio
from typing import Any, Protocol

from solmind.config.settings import Settings
from solmind.core.brain.decision import ActionType, TradeAction
from solmind.core.brain.model import BehaviorModel
from solmind.core.execution.routing import RouteSelector
from solmind.core.execution.trade import TradeParams, TradeResult, TradeRun, TradeStage
from solmind.core.intelligence.aggregator import WalletStateAggregator
from solmind.data.jupiter.client import JupiterClient
from solmind.data.jupiter.schemas import SwapRoute
from solmind.data.models import TokenHolding, TransactionRecord, WalletState
from solmind.data.solana.signer import TransactionSigner
from solmind.utils.logging import get_logger

logger = get_logger(__name__)

LOW_CONFIDENCE = "Low confidence prediction"
HOLD_PREDICTION = "Hold prediction, no trade"
NO_ROUTES = "No routes available for trade"
CONFIRMATION_TIMEOUT = "confirmation timeout"


class ConnectionProtocol(Protocol):
    """Protocol for the blockchain node connection."""

    async def get_transaction_history(self, address: str) -> list[TransactionRecord]:
        """Get recent transactions for a wallet."""
        ...

    async def get_token_accounts(self, address: str) -> list[TokenHolding]:
        """Get token holdings for a wallet."""
        ...

    async def send_transaction(self, transaction: bytes) -> str:
        """Submit a signed transaction and return its signature."""
        ...

    async def confirm_transaction(self, signature: str) -> Any:
        """Wait for a terminal status; the result exposes ``err``."""
        ...


class StateLoaderProtocol(Protocol):
    """Protocol for wallet state loading."""

    async def load(self, address: str) -> WalletState:
        """Load a fresh wallet state."""
        ...


class PredictorProtocol(Protocol):
    """Protocol for the behavior classifier."""

    async def predict(self, state: WalletState) -> TradeAction:
        """Predict the next trade action."""
        ...


class RouterProtocol(Protocol):
    """Protocol for the swap-routing provider."""

    async def init(self) -> Any:
        """Load provider metadata."""
        ...

    def resolve_mint(self, token: str) -> str:
        """Resolve a symbol or mint to a mint address."""
        ...

    async def get_routes(
        self,
        input_mint: str,
        output_mint: str,
        amount: float,
        slippage: float,
        swap_mode: str = "ExactIn",
    ) -> list[SwapRoute]:
        """Quote candidate routes."""
        ...

    async def get_swap_transaction(self, route: SwapRoute) -> bytes:
        """Build the unsigned transaction for a route."""
        ...


class SelectorProtocol(Protocol):
    """Protocol for route selection."""

    def select_best(self, routes: list[SwapRoute]) -> SwapRoute | None:
        """Pick one route or None."""
        ...


class AutoTrader:
    """Turns wallet behavior into a bounded, confidence-gated swap.

    Pipeline per invocation:
    1. Load the wallet state
    2. Predict a trade action and apply the confidence gate
    3. Discover routes for the predicted pair
    4. Select the best route
    5. Build, sign and submit the swap
    6. Await confirmation (bounded by a timeout)

    Every failure after parameter validation is returned as a failed
    TradeResult. Invocations share no mutable state except the
    classifier, and identical calls are not deduplicated.
    """

    def __init__(
        self,
        connection: ConnectionProtocol,
        wallet_pubkey: Any,
        signer: TransactionSigner | None = None,
        router: RouterProtocol | None = None,
        behavior_model: PredictorProtocol | None = None,
        state_loader: StateLoaderProtocol | None = None,
        selector: SelectorProtocol | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the auto-trader.

        Args:
            connection: Blockchain node connection (history, submission, confirmation).
            wallet_pubkey: Public key of the trading wallet.
            signer: Signs swap transactions; unsigned payloads are submitted when omitted.
            router: Swap-routing client; a JupiterClient is built when omitted.
            behavior_model: Classifier; a fresh BehaviorModel is built when omitted.
            state_loader: Wallet state loader; built over ``connection`` when omitted.
            selector: Route selector; a RouteSelector is built when omitted.
            settings: Application settings; defaults are used when omitted.
        """
        self._settings = settings or Settings()
        self._connection = connection
        self.wallet_pubkey = str(wallet_pubkey)
        self._signer = signer
        self._router = router or JupiterClient(self.wallet_pubkey, self._settings.jupiter)
        self._behavior_model = behavior_model or BehaviorModel(self._settings.model)
        self._state_loader = state_loader or WalletStateAggregator(
            connection,
            token_lookup=getattr(self._router, "get_token_info", None),
        )
        self._selector = selector or RouteSelector(epsilon=self._settings.jupiter.route_epsilon)

        self.confidence_threshold = self._settings.model.confidence_threshold
        self.quote_token = self._settings.trading.quote_token
        self.confirmation_timeout = self._settings.solana.confirmation_timeout

    @property
    def behavior_model(self) -> PredictorProtocol:
        """The classifier used for predictions."""
        return self._behavior_model

    async def init(self) -> None:
        """Load routing metadata (token list)."""
        await self._router.init()

    async def close(self) -> None:
        """Release the router's resources if it holds any."""
        close = getattr(self._router, "close", None)
        if close is not None:
            await close()

    async def execute_trade_strategy(self, params: TradeParams) -> TradeResult:
        """Run one decision-and-execution pass for a wallet.

        Args:
            params: Wallet, size bound and slippage for this invocation.

        Returns:
            TradeResult; failures are reported, not raised.

        Raises:
            TradeParamsError: If ``params`` is malformed.
        """
        params.validate()
        run = TradeRun(wallet_address=params.wallet_address)

        try:
            result = await self._run(params, run)
        except Exception as e:
            logger.error(
                "Trade strategy failed at {}: {}",
                run.stage.value,
                str(e),
            )
            result = run.fail(str(e) or type(e).__name__)

        logger.info(
            "Trade strategy finished: wallet={} success={} stages={}",
            params.wallet_address[:10],
            result.success,
            "->".join(stage.value for stage in run.history),
        )
        return result

    async def _run(self, params: TradeParams, run: TradeRun) -> TradeResult:
        state = await self._state_loader.load(params.wallet_address)
        run.advance(TradeStage.STATE_LOADED)

        prediction = await self._behavior_model.predict(state)
        run.advance(TradeStage.PREDICTED)
        logger.info(
            "Prediction: action={} token={} amount={} confidence={:.3f}",
            prediction.type.value,
            prediction.token,
            prediction.amount,
            prediction.confidence,
        )

        if prediction.confidence < self.confidence_threshold:
            logger.info(
                "Confidence {:.3f} below threshold {:.2f}",
                prediction.confidence,
                self.confidence_threshold,
            )
            return run.fail(LOW_CONFIDENCE)

        if prediction.type is ActionType.HOLD:
            return run.fail(HOLD_PREDICTION)

        input_mint, output_mint, swap_mode = self._swap_leg(prediction)
        amount = min(prediction.amount, params.max_amount)
        routes = await self._router.get_routes(
            input_mint,
            output_mint,
            amount,
            params.slippage,
            swap_mode=swap_mode,
        )
        run.advance(TradeStage.ROUTED)

        if not routes:
            return run.fail(NO_ROUTES)

        route = self._selector.select_best(routes)
        if route is None:
            return run.fail(NO_ROUTES)
        run.advance(TradeStage.SELECTED)
        logger.info(
            "Selected route: out={} price_impact={} of {} candidates",
            route.out_amount,
            route.price_impact,
            len(routes),
        )

        transaction = await self._router.get_swap_transaction(route)
        if self._signer is not None:
            transaction = self._signer.sign(transaction)
        txid = await self._connection.send_transaction(transaction)
        run.advance(TradeStage.EXECUTED)

        try:
            confirmation = await asyncio.wait_for(
                self._connection.confirm_transaction(txid),
                timeout=self.confirmation_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Confirmation timed out for {}", txid)
            return run.fail(CONFIRMATION_TIMEOUT)

        if confirmation.err is not None:
            logger.warning("Transaction {} failed on-chain: {}", txid, confirmation.err)
            return run.fail(f"Transaction failed: {confirmation.err}")
        run.advance(TradeStage.CONFIRMED)

        result = TradeResult.ok(txid, prediction)
        run.advance(TradeStage.DONE)
        return result

    def _swap_leg(self, prediction: TradeAction) -> tuple[str, str, str]:
        """Mints and swap mode for a prediction.

        Buying receives an exact amount of the predicted token; selling
        spends an exact amount of it.
        """
        base = self._router.resolve_mint(prediction.token)
        quote = self._router.resolve_mint(self.quote_token)
        if prediction.type is ActionType.BUY:
            return quote, base, "ExactOut"
        return base, quote, "ExactIn"
