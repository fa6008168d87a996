"""Bracket arithmetic: ATR stops, scale-out targets and break-even stops.

Every multi-contract position is split into legs of one contract. Each leg
shares the same ATR stop and gets its own ATR profit target, so a position
of three contracts with multiples ``[3, 6, 9]`` scales out at 3, 6 and 9 ATR.
"""

from __future__ import annotations

from dataclasses import dataclass

from vwapbot.errors import ConfigurationError
from vwapbot.models.position import MarketPosition


@dataclass(frozen=True)
class BracketLevels:
    """Stop and target prices for one contract leg."""

    leg: int
    stop_price: float
    target_price: float


def parse_target_multiples(csv: str) -> list[float]:
    """Parse ``"3,6,9"`` into ``[3.0, 6.0, 9.0]``.

    Raises:
        ConfigurationError: On an empty list or a non-numeric entry.
    """
    parts = [p.strip() for p in csv.split(",")]
    if not csv.strip() or any(not p for p in parts):
        raise ConfigurationError(f"Target multiples must be a comma-separated list, got '{csv}'")
    try:
        return [float(p) for p in parts]
    except ValueError as exc:
        raise ConfigurationError(f"Target multiples must be numeric, got '{csv}'") from exc


def validate_contract_targets(num_contracts: int, targets: list[float]) -> None:
    """Require exactly one target multiple per contract.

    Raises:
        ConfigurationError: When the counts differ.
    """
    if len(targets) != num_contracts:
        raise ConfigurationError(
            f"Contract count ({num_contracts}) must match the number of "
            f"target multiples ({len(targets)})"
        )


def stop_price(side: MarketPosition | str, reference: float, atr: float, stop_mult: float) -> float:
    """Protective stop ``stop_mult`` ATRs against the position."""
    if side == MarketPosition.LONG:
        return reference - stop_mult * atr
    if side == MarketPosition.SHORT:
        return reference + stop_mult * atr
    raise ValueError(f"No stop for a {side} position")


def target_price(side: MarketPosition | str, reference: float, atr: float, multiple: float) -> float:
    """Profit target ``multiple`` ATRs in favour of the position."""
    if side == MarketPosition.LONG:
        return reference + multiple * atr
    if side == MarketPosition.SHORT:
        return reference - multiple * atr
    raise ValueError(f"No target for a {side} position")


def compute_brackets(
    side: MarketPosition | str,
    reference: float,
    atr: float,
    stop_mult: float,
    targets: list[float],
    legs: int | None = None,
) -> list[BracketLevels]:
    """Return stop/target levels for each contract leg.

    Args:
        side: LONG or SHORT.
        reference: Entry or average fill price.
        atr: Current ATR value.
        stop_mult: ATR multiple for the stop.
        targets: ATR multiple of each leg's target.
        legs: Number of legs to price; defaults to ``len(targets)`` and is
            capped by it.
    """
    count = len(targets) if legs is None else min(legs, len(targets))
    stop = stop_price(side, reference, atr, stop_mult)
    return [
        BracketLevels(leg=i, stop_price=stop, target_price=target_price(side, reference, atr, targets[i]))
        for i in range(count)
    ]


def breakeven_stop(
    side: MarketPosition | str,
    reference: float,
    close: float,
    atr: float,
    trigger_mult: float,
    tick_size: float,
    offset_ticks: int = 2,
) -> float | None:
    """Return a break-even stop once price moved ``trigger_mult`` ATRs in favour.

    The stop sits ``offset_ticks`` ticks beyond *reference* so a stop-out
    still books a small gain. Returns None while the trigger is not reached.
    """
    offset = offset_ticks * tick_size
    if side == MarketPosition.LONG:
        if close - reference >= trigger_mult * atr:
            return reference + offset
        return None
    if side == MarketPosition.SHORT:
        if reference - close >= trigger_mult * atr:
            return reference - offset
        return None
    return None
