"""Recording host client used to replay bar files through a strategy."""

from __future__ import annotations

import pandas as pd
from loguru import logger

from vwapbot.host.base_client import BaseHostClient
from vwapbot.models.bar import Bar
from vwapbot.models.order import REQUEST_COLUMNS, OrderRequest
from vwapbot.models.position import Position


class ReplayHostClient(BaseHostClient):
    """Host stand-in that records requests and never fills them.

    Quotes come from the last primary bar. The position and cash value stay
    where the caller puts them with :meth:`set_position` / :meth:`set_cash_value`.
    """

    def __init__(self, cash_value: float = 50_000.0, tick_size: float = 0.25) -> None:
        self.tick_size = tick_size
        self.submitted: list[OrderRequest] = []
        self._position = Position.flat()
        self._cash_value = cash_value
        self._last_bar: Bar | None = None

    def on_bar(self, bar: Bar) -> None:
        if bar.is_primary:
            self._last_bar = bar

    def submit(self, request: OrderRequest) -> None:
        self.submitted.append(request)
        logger.debug(
            "[REPLAY] {} qty={} price={} name={} from={}",
            request.action, request.quantity, request.price,
            request.signal_name, request.from_entry_signal,
        )

    def get_position(self) -> Position:
        return self._position

    def set_position(self, position: Position) -> None:
        self._position = position

    def get_cash_value(self) -> float:
        return self._cash_value

    def set_cash_value(self, value: float) -> None:
        self._cash_value = value

    def get_current_bid(self) -> float:
        if self._last_bar is None:
            raise RuntimeError("No bar received yet; bid is undefined")
        return self._last_bar.current_bid

    def get_current_ask(self) -> float:
        if self._last_bar is None:
            raise RuntimeError("No bar received yet; ask is undefined")
        return self._last_bar.current_ask

    def entries(self) -> list[OrderRequest]:
        return [r for r in self.submitted if r.is_entry]

    def to_frame(self) -> pd.DataFrame:
        """Return the request log as a DataFrame (one row per request)."""
        return pd.DataFrame([r.to_row() for r in self.submitted], columns=list(REQUEST_COLUMNS))
