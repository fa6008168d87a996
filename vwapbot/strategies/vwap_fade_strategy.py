"""VWAP Fade mean-reversion strategy for VWAPBot.

Fades stretched moves away from the session VWAP in the direction of the
EMA bias: buys a dip below VWAP in an uptrend, sells a spike above VWAP in a
downtrend, then scales out of the position one contract per ATR target.
"""

from __future__ import annotations

import math

from loguru import logger

from vwapbot.config.settings import Settings
from vwapbot.data import indicators
from vwapbot.data.indicator_provider import (
    BaseIndicatorProvider,
    IndicatorKind,
    IndicatorSpec,
)
from vwapbot.errors import IndicatorUnavailableError
from vwapbot.host.base_client import BaseHostClient
from vwapbot.models.bar import Bar
from vwapbot.models.execution import Execution
from vwapbot.models.order import OrderAction, OrderRequest
from vwapbot.models.position import MarketPosition
from vwapbot.risk.position_sizer import (
    breakeven_stop,
    compute_brackets,
    parse_target_multiples,
    validate_contract_targets,
)
from vwapbot.risk.risk_manager import DailyLossGuard
from vwapbot.strategies.base_strategy import BaseStrategy
from vwapbot.utils.helpers import format_usd, parse_clock

LONG_ENTRY = "LongFade"
SHORT_ENTRY = "ShortFade"


class VWAPFadeStrategy(BaseStrategy):
    """VWAP z-score fade with ATR scale-out exits.

    Entry (flat only, inside the session window):
    * LONG  - EMA fast > slow, close < VWAP, z <= -threshold, RSI < oversold.
    * SHORT - EMA fast < slow, close > VWAP, z >= threshold, RSI > overbought.

    Exit, per contract leg ``i``:
    * Stop-market ``stop_mult`` ATRs against the average price.
    * Limit at ``targets[i]`` ATRs in favour.
    * Extra break-even stop once price moved ``breakeven_trigger`` ATRs.

    Every filled stop adds an ATR-based loss estimate to the daily total;
    no trading happens once it reaches ``FADE_DAILY_MAX_LOSS``.
    """

    def __init__(
        self,
        host_client: BaseHostClient,
        indicator_provider: BaseIndicatorProvider,
        settings: Settings,
    ) -> None:
        super().__init__(host_client, indicator_provider, settings)
        self.targets: list[float] = []
        self.loss_guard = DailyLossGuard(max_loss_usd=settings.FADE_DAILY_MAX_LOSS)
        self._warned_leg_overflow = False

    @property
    def name(self) -> str:
        return "vwap_fade"

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def set_defaults(self) -> None:
        s = self.settings
        self.num_contracts = s.FADE_NUM_CONTRACTS
        self.atr_stop_mult = s.FADE_ATR_STOP_MULT
        self.target_multiples_csv = s.FADE_ATR_TARGET_MULTIPLES
        self.zscore_threshold = s.FADE_ZSCORE_THRESHOLD
        self.rsi_oversold = s.FADE_RSI_OVERSOLD
        self.rsi_overbought = s.FADE_RSI_OVERBOUGHT
        self.breakeven_trigger = s.FADE_BREAKEVEN_TRIGGER_ATR
        self.breakeven_offset_ticks = s.BREAKEVEN_OFFSET_TICKS
        self.warmup_bars = s.FADE_WARMUP_BARS
        self.session_start = parse_clock(s.FADE_SESSION_START)
        self.session_end = parse_clock(s.FADE_SESSION_END)
        self.session_timezone = s.FADE_SESSION_TIMEZONE
        self.entries_per_direction = 1
        self.exit_on_session_close = True

    def data_loaded(self) -> None:
        s = self.settings
        self.atr = self.indicators.register(IndicatorSpec(kind=IndicatorKind.ATR, period=s.FADE_ATR_PERIOD))
        self.rsi = self.indicators.register(
            IndicatorSpec(kind=IndicatorKind.RSI, period=s.FADE_RSI_PERIOD, smooth=s.FADE_RSI_SMOOTH)
        )
        self.ema_fast = self.indicators.register(IndicatorSpec(kind=IndicatorKind.EMA, period=s.FADE_EMA_FAST))
        self.ema_slow = self.indicators.register(IndicatorSpec(kind=IndicatorKind.EMA, period=s.FADE_EMA_SLOW))
        self.vwap = self.indicators.register(IndicatorSpec(kind=IndicatorKind.VWAP, anchor="session"))
        self.std_dev = self.indicators.register(
            IndicatorSpec(kind=IndicatorKind.STDDEV, source="close", period=s.FADE_STDDEV_PERIOD)
        )

        self.targets = parse_target_multiples(self.target_multiples_csv)
        validate_contract_targets(self.num_contracts, self.targets)
        logger.info(
            "[FADE] Ready | contracts={} targets={} stop={}xATR z={} RSI {}/{}",
            self.num_contracts, self.targets, self.atr_stop_mult,
            self.zscore_threshold, self.rsi_oversold, self.rsi_overbought,
        )

    # ── Per-bar rules ─────────────────────────────────────────────────────────

    def evaluate(self, bar: Bar) -> list[OrderRequest]:
        orders: list[OrderRequest] = []

        if bar.is_first_bar_of_session:
            self.loss_guard.start_session()

        if not self._is_warm(self.warmup_bars):
            return orders
        if not self._in_session(bar.timestamp):
            return orders

        ema_fast = self.ema_fast[0]
        ema_slow = self.ema_slow[0]
        vwap = self.vwap[0]
        std = self.std_dev[0]
        rsi = self.rsi[0]
        atr = self.atr[0]
        if self._has_nan(ema_fast, ema_slow, vwap, std, rsi, atr):
            logger.debug("[FADE] Indicators not ready at {}", bar.timestamp)
            return orders

        bias_long, bias_short = self._bias(ema_fast, ema_slow)
        price = bar.close
        z = indicators.zscore(price, vwap, std)

        allowed, reason = self.loss_guard.can_trade()
        if not allowed:
            logger.debug("[FADE] Blocked at {}: {}", bar.timestamp, reason)
            return orders

        if self.position.is_flat:
            if (
                bias_long
                and price < vwap
                and z <= -self.zscore_threshold
                and rsi < self.rsi_oversold
            ):
                orders.append(self._order(
                    OrderAction.ENTER_LONG, bar,
                    quantity=self.num_contracts, signal_name=LONG_ENTRY,
                ))
                logger.info(
                    "[FADE] LONG signal {} | price={} vwap={:.2f} z={:.2f} rsi={:.1f}",
                    bar.timestamp, price, vwap, z, rsi,
                )

            if (
                bias_short
                and price > vwap
                and z >= self.zscore_threshold
                and rsi > self.rsi_overbought
            ):
                orders.append(self._order(
                    OrderAction.ENTER_SHORT, bar,
                    quantity=self.num_contracts, signal_name=SHORT_ENTRY,
                ))
                logger.info(
                    "[FADE] SHORT signal {} | price={} vwap={:.2f} z={:.2f} rsi={:.1f}",
                    bar.timestamp, price, vwap, z, rsi,
                )
        else:
            orders.extend(self._manage_position(bar, atr))

        return orders

    def _manage_position(self, bar: Bar, atr: float) -> list[OrderRequest]:
        """Stop, target and break-even exits for every open contract."""
        pos = self.position
        if pos.is_long:
            side, prefix, entry = MarketPosition.LONG, "Long", LONG_ENTRY
            stop_action, limit_action = OrderAction.EXIT_LONG_STOP_MARKET, OrderAction.EXIT_LONG_LIMIT
        else:
            side, prefix, entry = MarketPosition.SHORT, "Short", SHORT_ENTRY
            stop_action, limit_action = OrderAction.EXIT_SHORT_STOP_MARKET, OrderAction.EXIT_SHORT_LIMIT

        if pos.quantity > len(self.targets) and not self._warned_leg_overflow:
            logger.warning(
                "[FADE] Position of {} exceeds {} target legs; extra contracts get no exits",
                pos.quantity, len(self.targets),
            )
            self._warned_leg_overflow = True

        levels = compute_brackets(side, pos.average_price, atr, self.atr_stop_mult, self.targets, legs=pos.quantity)
        be_price = breakeven_stop(
            side, pos.average_price, bar.close, atr,
            self.breakeven_trigger, self.host.tick_size, self.breakeven_offset_ticks,
        )

        orders: list[OrderRequest] = []
        for lv in levels:
            orders.append(self._order(
                stop_action, bar, quantity=1, price=lv.stop_price,
                signal_name=f"{prefix}Stop_{lv.leg}", from_entry_signal=entry, leg=lv.leg,
            ))
            orders.append(self._order(
                limit_action, bar, quantity=1, price=lv.target_price,
                signal_name=f"{prefix}Target_{lv.leg}", from_entry_signal=entry, leg=lv.leg,
            ))
            if be_price is not None:
                orders.append(self._order(
                    stop_action, bar, quantity=1, price=be_price,
                    signal_name=f"{prefix}BE_{lv.leg}", from_entry_signal=entry, leg=lv.leg,
                ))
        return orders

    # ── Executions ────────────────────────────────────────────────────────────

    def on_execution_update(self, execution: Execution) -> None:
        super().on_execution_update(execution)
        if not (execution.is_filled and execution.is_stop):
            return
        try:
            atr = self.atr[0]
        except IndicatorUnavailableError:
            atr = math.nan
        if self._has_nan(atr):
            logger.warning("[FADE] Stop fill {} with no ATR; loss not recorded", execution.order_name)
            return
        loss = execution.quantity * atr * self.atr_stop_mult * self.host.tick_size
        self.loss_guard.record_loss(loss)
        logger.info(
            "[FADE] Stop filled {} x{} | est. loss {} | daily {}",
            execution.order_name, execution.quantity,
            format_usd(loss), format_usd(self.loss_guard.daily_loss),
        )

    def get_status(self) -> dict:
        status = super().get_status()
        status["targets"] = self.targets
        status["risk"] = self.loss_guard.get_status()
        return status
