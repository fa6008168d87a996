"""Utility / helper functions for VWAPBot."""

from __future__ import annotations

from datetime import datetime, time
from zoneinfo import ZoneInfo


def parse_clock(value: str) -> time:
    """Parse ``"HH:MM"`` or ``"HH:MM:SS"`` into a :class:`datetime.time`."""
    parts = [int(p) for p in value.strip().split(":")]
    while len(parts) < 3:
        parts.append(0)
    return time(parts[0], parts[1], parts[2])


def to_time_int(moment: datetime | time) -> int:
    """Encode a clock time as the integer ``HHMMSS``.

    Examples::

        to_time_int(time(6, 30))  -> 63000
        to_time_int(time(13, 30)) -> 133000
    """
    return moment.hour * 10000 + moment.minute * 100 + moment.second


def to_local(ts: datetime, tz_name: str | None) -> datetime:
    """Convert an aware *ts* to *tz_name*.

    Naive timestamps are assumed to be local to *tz_name* already.
    """
    if tz_name and ts.tzinfo is not None:
        return ts.astimezone(ZoneInfo(tz_name))
    return ts


def local_clock(ts: datetime, tz_name: str | None) -> time:
    """Return the wall-clock time of *ts* in *tz_name*."""
    return to_local(ts, tz_name).time()


def iso_week_id(ts: datetime, tz_name: str | None = None) -> int:
    """Return ``iso_year * 100 + iso_week`` of *ts* in *tz_name*.

    Examples::

        iso_week_id(datetime(2024, 3, 5))  -> 202410
        iso_week_id(datetime(2024, 12, 30)) -> 202501
    """
    year, week, _ = to_local(ts, tz_name).isocalendar()
    return year * 100 + week


def in_time_window(ts: datetime, start: time, end: time, tz_name: str | None = None) -> bool:
    """True when *ts* falls inside ``[start, end]`` (both ends inclusive)."""
    now = to_time_int(local_clock(ts, tz_name))
    return to_time_int(start) <= now <= to_time_int(end)


def format_usd(amount: float) -> str:
    """Format a USD amount with a dollar sign and commas.

    Examples::

        format_usd(1234.5) -> "$1,234.50"
        format_usd(-50)    -> "-$50.00"
    """
    formatted = f"${abs(amount):,.2f}"
    return f"-{formatted}" if amount < 0 else formatted
