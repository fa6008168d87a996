"""Read-only position mirror for VWAPBot."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class MarketPosition(str, Enum):
    """Market position reported by the host."""

    FLAT = "FLAT"
    LONG = "LONG"
    SHORT = "SHORT"


class Position(BaseModel):
    """Mirror of the host's position for the traded instrument.

    The host owns this state; strategies only read it.
    """

    market_position: MarketPosition = MarketPosition.FLAT
    quantity: int = 0
    average_price: float = 0.0

    class Config:
        """Pydantic configuration."""

        use_enum_values = True
        frozen = True

    @classmethod
    def flat(cls) -> "Position":
        return cls()

    @property
    def is_flat(self) -> bool:
        return self.market_position == MarketPosition.FLAT or self.quantity <= 0

    @property
    def is_long(self) -> bool:
        return not self.is_flat and self.market_position == MarketPosition.LONG

    @property
    def is_short(self) -> bool:
        return not self.is_flat and self.market_position == MarketPosition.SHORT
