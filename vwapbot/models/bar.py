"""Price bar model for VWAPBot."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class Bar(BaseModel):
    """One closed bar as delivered by the host."""

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    series: int = 0  # 0 = primary data series
    is_first_bar_of_session: bool = False
    bid: float | None = None
    ask: float | None = None

    class Config:
        """Pydantic configuration."""

        frozen = True

    @property
    def is_primary(self) -> bool:
        """True for bars of the series the strategy trades."""
        return self.series == 0

    @property
    def current_bid(self) -> float:
        """Best bid at bar close, falling back to the close price."""
        return self.bid if self.bid is not None else self.close

    @property
    def current_ask(self) -> float:
        """Best ask at bar close, falling back to the close price."""
        return self.ask if self.ask is not None else self.close
