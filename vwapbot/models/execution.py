"""Execution (fill report) model for VWAPBot."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field

from vwapbot.models.order import OrderState
from vwapbot.models.position import MarketPosition


class Execution(BaseModel):
    """An execution reported by the host's fill callback."""

    execution_id: str = Field(default_factory=lambda: str(uuid4()))
    order_id: str | None = None
    order_name: str
    order_state: OrderState = OrderState.FILLED
    price: float
    quantity: int
    market_position: MarketPosition = MarketPosition.FLAT
    time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        """Pydantic configuration."""

        use_enum_values = True

    @property
    def is_filled(self) -> bool:
        return self.order_state == OrderState.FILLED

    @property
    def is_stop(self) -> bool:
        """True when the originating order was a protective stop."""
        return "Stop" in self.order_name
