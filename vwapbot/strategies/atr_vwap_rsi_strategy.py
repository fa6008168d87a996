"""ATR / weekly-VWAP / RSI multi-contract strategy for VWAPBot.

Trades RSI reversals from extreme levels, but only while price sits inside
the one-sigma funnel on the trend side of the weekly VWAP. Exits are
host-managed brackets: one ATR profit target per contract, a shared ATR stop
and a break-even stop once the trade has run far enough.
"""

from __future__ import annotations

from loguru import logger

from vwapbot.config.settings import Settings
from vwapbot.data import indicators
from vwapbot.data.indicator_provider import (
    BaseIndicatorProvider,
    IndicatorKind,
    IndicatorSpec,
)
from vwapbot.host.base_client import BaseHostClient
from vwapbot.models.bar import Bar
from vwapbot.models.execution import Execution
from vwapbot.models.order import OrderAction, OrderRequest
from vwapbot.models.position import MarketPosition
from vwapbot.risk.position_sizer import (
    breakeven_stop,
    compute_brackets,
    validate_contract_targets,
)
from vwapbot.risk.risk_manager import DailyLossGuard
from vwapbot.strategies.base_strategy import BaseStrategy
from vwapbot.utils.helpers import parse_clock

LONG_ENTRY = "ATRLong"
SHORT_ENTRY = "ATRShort"


class ATRVWAPRSIStrategy(BaseStrategy):
    """EMA-biased weekly VWAP funnel with RSI crossover entries.

    Entry (inside the session window, after warm-up):
    * LONG  - EMA fast > slow, VWAP < bid < VWAP + std*mult, RSI crosses
      above ``RSI_LONG_CROSS``.
    * SHORT - EMA fast < slow, VWAP - std*mult < ask < VWAP, RSI crosses
      below ``RSI_SHORT_CROSS``.

    Every signal is sent, whatever the current position: an opposite signal
    reverses it and a repeated one re-bases the entry price. The host's
    one-entry-per-direction limit drops duplicate same-side entries.

    Management while in a position, after the entry checks, per contract leg ``i``:
    * Profit target ``targets[i]`` ATRs from the entry price.
    * Stop loss ``stop_mult`` ATRs from the entry price.
    * Stop moves to break-even plus two ticks after ``breakeven_trigger`` ATRs.

    Trading stops for the session once cash falls ``DAILY_LOSS_PCT`` percent
    below the session-start balance.
    """

    def __init__(
        self,
        host_client: BaseHostClient,
        indicator_provider: BaseIndicatorProvider,
        settings: Settings,
    ) -> None:
        super().__init__(host_client, indicator_provider, settings)
        self.targets: list[float] = []
        self.entry_price: float | None = None
        self.loss_guard = DailyLossGuard(max_loss_pct=settings.ATR_VWAP_DAILY_LOSS_PCT)

    @property
    def name(self) -> str:
        return "atr_vwap_rsi"

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def set_defaults(self) -> None:
        s = self.settings
        self.num_contracts = s.ATR_VWAP_NUM_CONTRACTS
        self.targets = list(s.ATR_VWAP_TARGET_MULTIPLIERS)
        self.stop_mult = s.ATR_VWAP_STOP_MULT
        self.breakeven_trigger = s.ATR_VWAP_BREAKEVEN_TRIGGER_ATR
        self.breakeven_offset_ticks = s.BREAKEVEN_OFFSET_TICKS
        self.std_dev_multiplier = s.ATR_VWAP_STDDEV_MULTIPLIER
        self.rsi_long_cross = s.ATR_VWAP_RSI_LONG_CROSS
        self.rsi_short_cross = s.ATR_VWAP_RSI_SHORT_CROSS
        self.warmup_bars = s.ATR_VWAP_WARMUP_BARS
        self.session_start = parse_clock(s.ATR_VWAP_SESSION_START)
        self.session_end = parse_clock(s.ATR_VWAP_SESSION_END)
        self.session_timezone = s.ATR_VWAP_SESSION_TIMEZONE

    def configure(self) -> None:
        self.data_series.append("1 Week")

    def data_loaded(self) -> None:
        s = self.settings
        self.ema_fast = self.indicators.register(IndicatorSpec(kind=IndicatorKind.EMA, period=s.ATR_VWAP_EMA_FAST))
        self.ema_slow = self.indicators.register(IndicatorSpec(kind=IndicatorKind.EMA, period=s.ATR_VWAP_EMA_SLOW))
        self.rsi = self.indicators.register(
            IndicatorSpec(kind=IndicatorKind.RSI, period=s.ATR_VWAP_RSI_LENGTH, smooth=s.ATR_VWAP_RSI_SMOOTH)
        )
        self.atr = self.indicators.register(IndicatorSpec(kind=IndicatorKind.ATR, period=s.ATR_VWAP_ATR_PERIOD))
        self.weekly_vwap = self.indicators.register(IndicatorSpec(kind=IndicatorKind.VWAP, anchor="week"))
        self.weekly_std = self.indicators.register(
            IndicatorSpec(kind=IndicatorKind.STDDEV, source="vwap_week", period=s.ATR_VWAP_STDDEV_PERIOD)
        )

        validate_contract_targets(self.num_contracts, self.targets)
        logger.info(
            "[ATRVWAP] Ready | contracts={} targets={} stop={}xATR loss={}%",
            self.num_contracts, self.targets, self.stop_mult, s.ATR_VWAP_DAILY_LOSS_PCT,
        )

    # ── Per-bar rules ─────────────────────────────────────────────────────────

    def evaluate(self, bar: Bar) -> list[OrderRequest]:
        orders: list[OrderRequest] = []

        if bar.is_first_bar_of_session:
            self.loss_guard.start_session(self.host.get_cash_value())

        if not self._in_session(bar.timestamp):
            return orders

        current_balance = self.host.get_cash_value()
        if self.loss_guard.session_start_balance is None:
            self.loss_guard.start_session(current_balance)
        allowed, reason = self.loss_guard.can_trade(current_balance)
        if not allowed:
            logger.debug("[ATRVWAP] Blocked at {}: {}", bar.timestamp, reason)
            return orders

        if not self._is_warm(self.warmup_bars):
            return orders

        ema_fast = self.ema_fast[0]
        ema_slow = self.ema_slow[0]
        vwap = self.weekly_vwap[0]
        std = self.weekly_std[0]
        atr = self.atr[0]
        if self._has_nan(ema_fast, ema_slow, vwap, std, atr):
            logger.debug("[ATRVWAP] Indicators not ready at {}", bar.timestamp)
            return orders

        long_bias, short_bias = self._bias(ema_fast, ema_slow)
        lower, upper = indicators.vwap_funnel(vwap, std, self.std_dev_multiplier)
        bid = self.host.get_current_bid()
        ask = self.host.get_current_ask()

        allow_long = long_bias and vwap < bid < upper
        allow_short = short_bias and lower < ask < vwap

        if allow_long and self.cross_above(self.rsi, self.rsi_long_cross):
            self.entry_price = bar.close
            orders.append(self._order(
                OrderAction.ENTER_LONG, bar,
                quantity=self.num_contracts, signal_name=LONG_ENTRY,
            ))
            logger.info(
                "[ATRVWAP] LONG signal {} | close={} bid={} funnel=({:.2f}, {:.2f}) rsi={:.1f}",
                bar.timestamp, bar.close, bid, vwap, upper, self.rsi[0],
            )

        if allow_short and self.cross_below(self.rsi, self.rsi_short_cross):
            self.entry_price = bar.close
            orders.append(self._order(
                OrderAction.ENTER_SHORT, bar,
                quantity=self.num_contracts, signal_name=SHORT_ENTRY,
            ))
            logger.info(
                "[ATRVWAP] SHORT signal {} | close={} ask={} funnel=({:.2f}, {:.2f}) rsi={:.1f}",
                bar.timestamp, bar.close, ask, lower, vwap, self.rsi[0],
            )

        if not self.position.is_flat:
            orders.extend(self._manage_position(bar, atr))

        return orders

    def _manage_position(self, bar: Bar, atr: float) -> list[OrderRequest]:
        """Refresh bracket targets/stops and the break-even stop."""
        pos = self.position
        side = MarketPosition.LONG if pos.is_long else MarketPosition.SHORT
        entry = LONG_ENTRY if pos.is_long else SHORT_ENTRY
        reference = self.entry_price if self.entry_price is not None else pos.average_price

        orders: list[OrderRequest] = []
        for lv in compute_brackets(side, reference, atr, self.stop_mult, self.targets, legs=self.num_contracts):
            orders.append(self._order(
                OrderAction.SET_PROFIT_TARGET, bar, price=lv.target_price,
                from_entry_signal=entry, leg=lv.leg,
            ))
            orders.append(self._order(
                OrderAction.SET_STOP_LOSS, bar, price=lv.stop_price,
                from_entry_signal=entry, leg=lv.leg,
            ))

        be_price = breakeven_stop(
            side, reference, bar.close, atr,
            self.breakeven_trigger, self.host.tick_size, self.breakeven_offset_ticks,
        )
        if be_price is not None:
            orders.append(self._order(
                OrderAction.SET_STOP_LOSS, bar, price=be_price, from_entry_signal=entry,
            ))
            logger.debug("[ATRVWAP] Break-even stop {} at {}", be_price, bar.timestamp)
        return orders

    # ── Executions ────────────────────────────────────────────────────────────

    def on_execution_update(self, execution: Execution) -> None:
        super().on_execution_update(execution)
        if execution.is_filled and execution.market_position == MarketPosition.FLAT:
            self.entry_price = None

    def get_status(self) -> dict:
        status = super().get_status()
        status["entry_price"] = self.entry_price
        status["targets"] = self.targets
        status["risk"] = self.loss_guard.get_status()
        return status
