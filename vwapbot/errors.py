"""Exception types raised by VWAPBot."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Strategy parameters are inconsistent; initialization must abort."""


class IndicatorUnavailableError(KeyError):
    """An indicator value was requested that the provider cannot supply.

    Raised for keys that were never registered and for look-backs deeper
    than the pushed history.
    """

    def __init__(self, key: str, bars_ago: int = 0, reason: str = "") -> None:
        self.key = key
        self.bars_ago = bars_ago
        self.reason = reason
        super().__init__(f"{key}[{bars_ago}]: {reason}" if reason else f"{key}[{bars_ago}]")
