"""Abstract host client interface for VWAPBot."""

from __future__ import annotations

from abc import ABC, abstractmethod

from vwapbot.models.bar import Bar
from vwapbot.models.order import OrderRequest
from vwapbot.models.position import Position


class BaseHostClient(ABC):
    """Abstract base class every host platform adapter must implement.

    The host owns order routing, fills, the position and the account. This
    interface is the whole surface a strategy touches.
    """

    tick_size: float = 0.25

    @abstractmethod
    def submit(self, request: OrderRequest) -> None:
        """Hand an order-management request to the host."""
        ...

    @abstractmethod
    def get_position(self) -> Position:
        """Return the host's current position for the traded instrument."""
        ...

    @abstractmethod
    def get_cash_value(self) -> float:
        """Return the account cash value in USD."""
        ...

    @abstractmethod
    def get_current_bid(self) -> float:
        """Return the best bid."""
        ...

    @abstractmethod
    def get_current_ask(self) -> float:
        """Return the best ask."""
        ...

    # ── Optional hooks ────────────────────────────────────────────────────────

    def on_bar(self, bar: Bar) -> None:
        """Called by the engine for every bar before the strategy runs."""
