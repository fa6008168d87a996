"""Technical indicators for VWAPBot replay.

These mirror the values a host platform supplies so that bar files can be
replayed offline. Live trading reads the host's own indicator values.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

# Substituted for a zero standard deviation in z-score denominators.
MIN_STD_DEV = 0.0001


def _validate_df(df: pd.DataFrame, required_col: str, min_rows: int) -> None:
    """Validate that the DataFrame has the required column and sufficient rows."""
    if required_col not in df.columns:
        raise ValueError(
            f"DataFrame must contain a '{required_col}' column. "
            f"Available columns: {list(df.columns)}"
        )
    if len(df) < min_rows:
        raise ValueError(
            f"Insufficient data: need at least {min_rows} rows, got {len(df)}"
        )


def ema(df: pd.DataFrame, period: int = 20) -> pd.Series:
    """Calculate Exponential Moving Average of the close.

    Args:
        df: OHLCV DataFrame with a 'close' column.
        period: Look-back period.

    Returns:
        pandas Series of EMA values.
    """
    _validate_df(df, "close", period)
    return df["close"].ewm(span=period, adjust=False).mean()


def rsi(df: pd.DataFrame, period: int = 14) -> pd.Series:
    """Calculate Relative Strength Index with Wilder smoothing.

    Args:
        df: OHLCV DataFrame with a 'close' column.
        period: Look-back period.

    Returns:
        pandas Series of RSI values (0-100). A window with no losses reads
        100; a window with no movement at all reads 50.
    """
    _validate_df(df, "close", period + 1)
    delta = df["close"].diff()
    gain = delta.where(delta > 0, 0.0)
    loss = (-delta).where(delta < 0, 0.0)

    avg_gain = gain.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()
    avg_loss = loss.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()

    rs = avg_gain / avg_loss
    rsi_series = 100.0 - (100.0 / (1.0 + rs))
    rsi_series = rsi_series.where(avg_loss != 0, 100.0)
    flat = (avg_gain == 0) & (avg_loss == 0)
    return rsi_series.where(~flat, 50.0).where(avg_gain.notna())


def atr(df: pd.DataFrame, period: int = 14) -> pd.Series:
    """Calculate Average True Range.

    Args:
        df: OHLCV DataFrame with 'high', 'low', 'close' columns.
        period: Look-back period.

    Returns:
        pandas Series of ATR values (Wilder smoothing, NaN during warm-up).
    """
    for col in ("high", "low", "close"):
        if col not in df.columns:
            raise ValueError(f"DataFrame must contain a '{col}' column.")
    if len(df) < period + 1:
        raise ValueError(
            f"Insufficient data: need at least {period + 1} rows, got {len(df)}"
        )

    high = df["high"]
    low = df["low"]
    close_prev = df["close"].shift(1)

    tr1 = high - low
    tr2 = (high - close_prev).abs()
    tr3 = (low - close_prev).abs()
    true_range = pd.concat([tr1, tr2, tr3], axis=1).max(axis=1)

    return true_range.ewm(alpha=1 / period, min_periods=period, adjust=False).mean()


def anchored_vwap(df: pd.DataFrame, anchor_col: str) -> pd.Series:
    """Calculate VWAP that restarts whenever *anchor_col* changes value.

    Args:
        df: OHLCV DataFrame plus an anchor column (session id, week id, ...).
        anchor_col: Column whose distinct values delimit the VWAP periods.

    Returns:
        pandas Series of anchored VWAP values aligned with *df*.
    """
    _validate_df(df, anchor_col, 1)
    typical_price = (df["high"] + df["low"] + df["close"]) / 3.0
    groups = df[anchor_col]
    cum_tp_vol = (typical_price * df["volume"]).groupby(groups).cumsum()
    cum_vol = df["volume"].groupby(groups).cumsum()
    return cum_tp_vol / cum_vol.replace(0, np.nan)


def std_dev(series: pd.Series, period: int = 20) -> pd.Series:
    """Rolling population standard deviation (divides by *period*).

    Args:
        series: Input values.
        period: Window length.

    Returns:
        pandas Series, NaN until *period* values are available.
    """
    if len(series) < period:
        raise ValueError(
            f"Insufficient data: need at least {period} rows, got {len(series)}"
        )
    return series.rolling(window=period).std(ddof=0)


def zscore(price: float, mean: float, std: float) -> float:
    """Distance of *price* from *mean* in standard deviations.

    A zero deviation is replaced by ``MIN_STD_DEV``.
    """
    return (price - mean) / (MIN_STD_DEV if std == 0 else std)


def vwap_funnel(vwap_value: float, std: float, multiplier: float = 1.0) -> tuple[float, float]:
    """Return the (lower, upper) band ``vwap ± std * multiplier``."""
    width = std * multiplier
    return vwap_value - width, vwap_value + width
