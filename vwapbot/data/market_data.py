"""Bar file loading for VWAPBot replay."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd
from loguru import logger

from vwapbot.models.bar import Bar

REQUIRED_COLUMNS = ("timestamp", "open", "high", "low", "close", "volume")


def mark_session_starts(df: pd.DataFrame, session_timezone: str | None = None) -> pd.Series:
    """Flag the first bar of each calendar day in *session_timezone*.

    Args:
        df: Bars sorted by a datetime ``timestamp`` column.
        session_timezone: IANA zone the session calendar follows. Naive
            timestamps are taken as already local to it.

    Returns:
        Boolean Series aligned with *df*.
    """
    ts = df["timestamp"]
    if session_timezone and ts.dt.tz is not None:
        ts = ts.dt.tz_convert(session_timezone)
    dates = ts.dt.date
    return dates.ne(dates.shift(1))


def frame_to_bars(df: pd.DataFrame) -> list[Bar]:
    """Convert an OHLCV DataFrame into :class:`Bar` objects."""
    has_bid = "bid" in df.columns
    has_ask = "ask" in df.columns
    bars: list[Bar] = []
    for row in df.itertuples(index=False):
        bars.append(Bar(
            timestamp=row.timestamp.to_pydatetime(),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
            is_first_bar_of_session=bool(row.is_first_bar_of_session),
            bid=_optional_float(row.bid) if has_bid else None,
            ask=_optional_float(row.ask) if has_ask else None,
        ))
    return bars


def load_bars_csv(path: str | Path, session_timezone: str | None = None) -> list[Bar]:
    """Load bars from a CSV file.

    The file needs ``timestamp, open, high, low, close, volume`` columns and
    may carry ``bid``, ``ask`` and ``is_first_bar_of_session``. Rows are sorted
    by time; session starts are derived when the file has no flag column.

    Args:
        path: CSV file location.
        session_timezone: Zone used to derive session starts.

    Returns:
        Bars in chronological order.
    """
    df = pd.read_csv(path)
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Bar file {path} is missing columns: {missing}")

    df["timestamp"] = pd.to_datetime(df["timestamp"])
    df = df.sort_values("timestamp", kind="stable").reset_index(drop=True)
    if "is_first_bar_of_session" in df.columns:
        df["is_first_bar_of_session"] = df["is_first_bar_of_session"].astype(bool)
    else:
        df["is_first_bar_of_session"] = mark_session_starts(df, session_timezone)

    bars = frame_to_bars(df)
    logger.info(
        "Loaded {} bars from {} ({} sessions)",
        len(bars), path, int(df["is_first_bar_of_session"].sum()),
    )
    return bars


def _optional_float(value: Any) -> float | None:
    return None if pd.isna(value) else float(value)
