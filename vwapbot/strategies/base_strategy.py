"""Abstract base strategy for VWAPBot."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from datetime import datetime, time
from enum import Enum

from loguru import logger

from vwapbot.config.settings import Settings
from vwapbot.data.indicator_provider import BaseIndicatorProvider, IndicatorSeries
from vwapbot.host.base_client import BaseHostClient
from vwapbot.models.bar import Bar
from vwapbot.models.execution import Execution
from vwapbot.models.order import OrderAction, OrderRequest
from vwapbot.models.position import Position
from vwapbot.utils.helpers import in_time_window


class StrategyState(str, Enum):
    """Lifecycle states the host walks a strategy through."""

    SET_DEFAULTS = "SET_DEFAULTS"
    CONFIGURE = "CONFIGURE"
    DATA_LOADED = "DATA_LOADED"
    HISTORICAL = "HISTORICAL"
    REALTIME = "REALTIME"
    TERMINATED = "TERMINATED"


class BaseStrategy(ABC):
    """Every trading strategy must inherit from this class.

    The host calls :meth:`on_bar_update` once per closed bar and
    :meth:`on_execution_update` for every execution. Strategies never own
    the position; they read the host's mirror at the start of each bar.
    """

    def __init__(
        self,
        host_client: BaseHostClient,
        indicator_provider: BaseIndicatorProvider,
        settings: Settings,
    ) -> None:
        self.host = host_client
        self.indicators = indicator_provider
        self.settings = settings
        self.state: StrategyState | None = None
        self.current_bar: int = -1  # Index of the latest primary bar
        self.position: Position = Position.flat()
        self.is_running: bool = False
        # Host-side settings declared at SET_DEFAULTS
        self.entries_per_direction: int = 1
        self.exit_on_session_close: bool = False
        self.data_series: list[str] = []
        # Trading window, set by subclasses at SET_DEFAULTS
        self.session_start: time = time(0, 0)
        self.session_end: time = time(23, 59, 59)
        self.session_timezone: str | None = None

    # ── Abstract interface ────────────────────────────────────────────────────

    @property
    @abstractmethod
    def name(self) -> str:
        """Short strategy identifier used in order tags and logs."""
        ...

    @abstractmethod
    def set_defaults(self) -> None:
        """Load parameter defaults from settings."""
        ...

    @abstractmethod
    def data_loaded(self) -> None:
        """Register indicators and validate configuration."""
        ...

    @abstractmethod
    def evaluate(self, bar: Bar) -> list[OrderRequest]:
        """Run the rules for one primary bar. Return requests to submit."""
        ...

    def configure(self) -> None:
        """Declare additional data series."""

    # ── Host callbacks ────────────────────────────────────────────────────────

    def on_state_change(self, state: StrategyState) -> None:
        """Advance the lifecycle. Errors raised here abort initialization."""
        self.state = state
        logger.info("[{}] State -> {}", self.name, state.value)
        if state == StrategyState.SET_DEFAULTS:
            self.set_defaults()
        elif state == StrategyState.CONFIGURE:
            self.configure()
        elif state == StrategyState.DATA_LOADED:
            self.data_loaded()
        elif state in (StrategyState.HISTORICAL, StrategyState.REALTIME):
            self.is_running = True
        elif state == StrategyState.TERMINATED:
            self.is_running = False

    def on_bar_update(self, bar: Bar) -> list[OrderRequest]:
        """Called by the host on every bar close of every series."""
        if not bar.is_primary:
            return []
        self.current_bar += 1
        self.position = self.host.get_position()
        return self.evaluate(bar)

    def on_execution_update(self, execution: Execution) -> None:
        """Called by the host for every execution."""
        logger.debug(
            "[{}] Execution {} {} x{} @ {}",
            self.name, execution.order_name, execution.order_state,
            execution.quantity, execution.price,
        )

    def get_status(self) -> dict:
        """Return current strategy status for logs."""
        return {
            "strategy": self.name,
            "state": self.state.value if self.state else None,
            "is_running": self.is_running,
            "current_bar": self.current_bar,
            "position": {
                "side": self.position.market_position,
                "quantity": self.position.quantity,
                "average_price": self.position.average_price,
            },
        }

    # ── Shared rule helpers ───────────────────────────────────────────────────

    def _in_session(self, ts: datetime) -> bool:
        """True inside the configured trading window (inclusive)."""
        return in_time_window(ts, self.session_start, self.session_end, self.session_timezone)

    def _is_warm(self, min_bars: int) -> bool:
        """True once *min_bars* primary bars precede the current one."""
        return self.current_bar >= min_bars

    @staticmethod
    def _bias(fast: float, slow: float) -> tuple[bool, bool]:
        """Return ``(long_bias, short_bias)`` from a fast/slow EMA pair."""
        return fast > slow, fast < slow

    @staticmethod
    def cross_above(series: IndicatorSeries, threshold: float) -> bool:
        """True when *series* moved from at/below *threshold* to above it."""
        return series[1] <= threshold < series[0]

    @staticmethod
    def cross_below(series: IndicatorSeries, threshold: float) -> bool:
        """True when *series* moved from at/above *threshold* to below it."""
        return series[1] >= threshold > series[0]

    @staticmethod
    def _has_nan(*values: float) -> bool:
        return any(math.isnan(v) for v in values)

    def _order(self, action: OrderAction, bar: Bar | None = None, **kwargs) -> OrderRequest:
        """Build an :class:`OrderRequest` tagged with this strategy."""
        return OrderRequest(
            action=action,
            strategy=self.name,
            bar_time=bar.timestamp if bar is not None else None,
            **kwargs,
        )
