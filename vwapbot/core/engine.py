"""Strategy engine: drives a strategy through the host callback contract."""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from vwapbot.data.indicator_provider import BaseIndicatorProvider
from vwapbot.errors import ConfigurationError
from vwapbot.host.base_client import BaseHostClient
from vwapbot.models.bar import Bar
from vwapbot.models.execution import Execution
from vwapbot.models.order import OrderRequest
from vwapbot.strategies.base_strategy import BaseStrategy, StrategyState


class StrategyEngine:
    """Sequential, single-threaded driver for one strategy.

    Order of work for every bar:
    1. Let the host client and indicator provider see the bar.
    2. Call ``strategy.on_bar_update()``.
    3. Forward every returned request to the host client.
    """

    def __init__(
        self,
        strategy: BaseStrategy,
        host_client: BaseHostClient,
        indicator_provider: BaseIndicatorProvider,
    ) -> None:
        self.strategy = strategy
        self.host = host_client
        self.indicators = indicator_provider
        self.bars_processed: int = 0
        self.requests_submitted: int = 0
        self.executions_processed: int = 0
        self._started = False

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self, realtime: bool = False) -> None:
        """Walk the strategy from SET_DEFAULTS to HISTORICAL/REALTIME.

        Raises:
            ConfigurationError: If the strategy rejects its parameters.
        """
        try:
            for state in (
                StrategyState.SET_DEFAULTS,
                StrategyState.CONFIGURE,
                StrategyState.DATA_LOADED,
            ):
                self.strategy.on_state_change(state)
        except ConfigurationError as exc:
            logger.error("[{}] Initialization aborted: {}", self.strategy.name, exc)
            self.strategy.on_state_change(StrategyState.TERMINATED)
            raise

        self.strategy.on_state_change(
            StrategyState.REALTIME if realtime else StrategyState.HISTORICAL
        )
        self._started = True
        logger.info(
            "Strategy engine started | strategy={} | indicators={}",
            self.strategy.name, self.indicators.registered_keys,
        )

    def stop(self) -> None:
        """Terminate the strategy."""
        if self.strategy.state != StrategyState.TERMINATED:
            self.strategy.on_state_change(StrategyState.TERMINATED)
        self._started = False
        logger.info(
            "Strategy engine stopped | bars={} requests={} executions={}",
            self.bars_processed, self.requests_submitted, self.executions_processed,
        )

    # ── Callbacks ─────────────────────────────────────────────────────────────

    def process_bar(self, bar: Bar) -> list[OrderRequest]:
        """Run one bar through the strategy and submit its requests."""
        if not self._started:
            raise RuntimeError("Engine not started; call start() first")

        self.host.on_bar(bar)
        self.indicators.on_bar(bar)
        try:
            requests = self.strategy.on_bar_update(bar)
        except Exception as exc:
            logger.error(
                "[{}] Error on bar {}: {}", self.strategy.name, bar.timestamp, exc,
            )
            raise

        for request in requests:
            self.host.submit(request)
        self.bars_processed += 1
        self.requests_submitted += len(requests)
        return requests

    def process_execution(self, execution: Execution) -> None:
        """Route a host execution report to the strategy."""
        self.strategy.on_execution_update(execution)
        self.executions_processed += 1

    def run(self, bars: Iterable[Bar]) -> list[OrderRequest]:
        """Start, replay every bar, stop. Return all submitted requests."""
        submitted: list[OrderRequest] = []
        self.start()
        try:
            for bar in bars:
                submitted.extend(self.process_bar(bar))
        finally:
            self.stop()
        return submitted

    def get_status(self) -> dict:
        return {
            "bars_processed": self.bars_processed,
            "requests_submitted": self.requests_submitted,
            "executions_processed": self.executions_processed,
            "strategy": self.strategy.get_status(),
        }
