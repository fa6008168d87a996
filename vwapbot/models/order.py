"""Order request model for VWAPBot."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class OrderAction(str, Enum):
    """Order primitives accepted by the host."""

    ENTER_LONG = "ENTER_LONG"
    ENTER_SHORT = "ENTER_SHORT"
    EXIT_LONG_STOP_MARKET = "EXIT_LONG_STOP_MARKET"
    EXIT_LONG_LIMIT = "EXIT_LONG_LIMIT"
    EXIT_SHORT_STOP_MARKET = "EXIT_SHORT_STOP_MARKET"
    EXIT_SHORT_LIMIT = "EXIT_SHORT_LIMIT"
    SET_STOP_LOSS = "SET_STOP_LOSS"          # Host-managed bracket stop
    SET_PROFIT_TARGET = "SET_PROFIT_TARGET"  # Host-managed bracket target


class OrderState(str, Enum):
    """Order lifecycle state reported back by the host."""

    SUBMITTED = "SUBMITTED"
    ACCEPTED = "ACCEPTED"
    WORKING = "WORKING"
    PART_FILLED = "PART_FILLED"
    FILLED = "FILLED"
    CANCELLED = "CANCELLED"
    REJECTED = "REJECTED"


_ENTRY_ACTIONS = {OrderAction.ENTER_LONG, OrderAction.ENTER_SHORT}

# Column order of tabular request logs
REQUEST_COLUMNS = (
    "bar_time",
    "strategy",
    "action",
    "quantity",
    "price",
    "signal_name",
    "from_entry_signal",
    "leg",
)


class OrderRequest(BaseModel):
    """A single order-management call a strategy asks the host to make."""

    internal_id: str = Field(default_factory=lambda: str(uuid4()))
    action: OrderAction
    quantity: int = 0  # 0 = host decides (bracket primitives)
    price: float | None = None  # None for market entries
    signal_name: str = ""
    from_entry_signal: str = ""
    leg: int | None = None  # Contract index for scale-out exits
    strategy: str = ""
    bar_time: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    class Config:
        """Pydantic configuration."""

        use_enum_values = True

    @property
    def is_entry(self) -> bool:
        return self.action in _ENTRY_ACTIONS

    @property
    def is_exit(self) -> bool:
        return not self.is_entry

    def to_row(self) -> dict:
        """Flatten for tabular request logs."""
        return {
            "bar_time": self.bar_time.isoformat() if self.bar_time else "",
            "strategy": self.strategy,
            "action": self.action,
            "quantity": self.quantity,
            "price": self.price,
            "signal_name": self.signal_name,
            "from_entry_signal": self.from_entry_signal,
            "leg": self.leg,
        }
