"""Scheduled strategy runner for SolMind."""

import asyncio
import sys

from solmind.config.settings import Settings, load_settings
from solmind.core.brain.model import BehaviorModel
from solmind.core.execution.trade import TradeParams, TradeResult
from solmind.core.execution.trader import AutoTrader
from solmind.data.solana.client import SolanaRPCClient
from solmind.data.solana.signer import KeypairSigner
from solmind.utils.errors import ConfigError
from solmind.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


class StrategyRunner:
    """Runs the trade strategy on a fixed interval until stopped."""

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the runner.

        Args:
            settings: Application settings; loaded from the environment on start when omitted.
        """
        self._settings = settings
        self._rpc: SolanaRPCClient | None = None
        self._trader: AutoTrader | None = None
        self._wallet_address: str = ""
        self._shutdown_event: asyncio.Event = asyncio.Event()
        self._stopping: bool = False
        self._ticks: int = 0

    @property
    def ticks(self) -> int:
        """Number of strategy invocations so far."""
        return self._ticks

    async def start(self) -> None:
        """Build clients and load routing metadata."""
        if self._settings is None:
            self._settings = load_settings()
        settings = self._settings
        configure_logging(level=settings.log_level, json_format=settings.log_json)

        if not settings.trading.private_key:
            raise ConfigError("SOLMIND_TRADING_PRIVATE_KEY is required to sign trades")
        signer = KeypairSigner.from_base58(settings.trading.private_key)
        self._wallet_address = settings.trading.wallet_address or signer.public_key

        behavior_model = BehaviorModel(settings.model)
        if settings.model.model_path:
            await behavior_model.load(settings.model.model_path)

        self._rpc = SolanaRPCClient(settings.solana)
        self._trader = AutoTrader(
            self._rpc,
            signer.public_key,
            signer=signer,
            behavior_model=behavior_model,
            settings=settings,
        )
        await self._trader.init()
        logger.info(
            "SolMind started: wallet={} interval={}s",
            self._wallet_address[:10],
            settings.trading.interval,
        )

    async def tick(self) -> TradeResult:
        """Run one strategy invocation."""
        if self._trader is None or self._settings is None:
            raise RuntimeError("Runner not started")

        params = TradeParams(
            wallet_address=self._wallet_address,
            max_amount=self._settings.trading.max_amount,
            slippage=self._settings.trading.slippage,
        )
        self._ticks += 1
        result = await self._trader.execute_trade_strategy(params)
        if result.success:
            logger.info(
                "Trade executed: {} {} {} txid={}",
                result.action.value if result.action else "?",
                result.amount,
                result.token,
                result.txid,
            )
        else:
            logger.info("Trade not executed: {}", result.error)
        return result

    async def stop(self) -> None:
        """Stop the loop and close clients."""
        if self._stopping:
            return
        self._stopping = True
        self._shutdown_event.set()

        if self._trader:
            await self._trader.close()
            logger.info("Router client closed")

        if self._rpc:
            await self._rpc.close()
            logger.info("RPC client closed")

        logger.info("SolMind stopped")

    async def run(self) -> None:
        """Run the strategy loop."""
        await self.start()
        interval = self._settings.trading.interval  # type: ignore[union-attr]

        if sys.platform != "win32":
            import signal

            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, lambda: asyncio.create_task(self.stop()))

        try:
            while not self._shutdown_event.is_set():
                try:
                    await self.tick()
                except Exception as e:
                    logger.error("Error running strategy tick: {}", str(e))

                try:
                    await asyncio.wait_for(
                        self._shutdown_event.wait(),
                        timeout=interval,
                    )
                except asyncio.TimeoutError:
                    pass
        except asyncio.CancelledError:
            pass
        finally:
            if not self._stopping:
                await self.stop()

    @property
    def is_running(self) -> bool:
        """Check if the runner is running."""
        return not self._shutdown_event.is_set()


def run_strategy(settings: Settings | None = None) -> None:
    """Entry point to run the strategy loop."""
    runner = StrategyRunner(settings)
    try:
        asyncio.run(runner.run())
    except KeyboardInterrupt:
        pass
