"""Indicator adapters: how strategies read host-computed indicator values.

A strategy registers the indicators it needs while its data loads and then
reads them per bar through :class:`IndicatorSeries` handles, indexing by
"bars ago" the way host indicator series are indexed::

    atr = provider.register(IndicatorSpec(kind=IndicatorKind.ATR, period=14))
    ...
    stop = position.average_price - 2.5 * atr[0]

Two providers ship with the package. :class:`PushIndicatorProvider` is fed by
a host adapter that pushes each bar's values by key. :class:`FrameIndicatorProvider`
derives the values from replayed bars with pandas.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Iterable
from datetime import datetime
from enum import Enum

import pandas as pd
from loguru import logger
from pydantic import BaseModel

from vwapbot.data import indicators
from vwapbot.errors import IndicatorUnavailableError
from vwapbot.models.bar import Bar
from vwapbot.utils.helpers import iso_week_id


class IndicatorKind(str, Enum):
    """Indicators a strategy can request."""

    ATR = "ATR"
    RSI = "RSI"
    EMA = "EMA"
    VWAP = "VWAP"
    STDDEV = "STDDEV"


class IndicatorSpec(BaseModel):
    """Declaration of one indicator a strategy reads."""

    kind: IndicatorKind
    period: int = 14
    smooth: int = 1
    source: str = "close"  # STDDEV input: "close", "vwap_session" or "vwap_week"
    anchor: str = "session"  # VWAP reset period: "session" or "week"

    class Config:
        """Pydantic configuration."""

        frozen = True

    @property
    def key(self) -> str:
        """Stable identifier host adapters use when pushing values."""
        if self.kind == IndicatorKind.RSI:
            return f"RSI({self.period},{self.smooth})"
        if self.kind == IndicatorKind.VWAP:
            return f"VWAP({self.anchor})"
        if self.kind == IndicatorKind.STDDEV:
            return f"STDDEV({self.source},{self.period})"
        return f"{self.kind.value}({self.period})"


class IndicatorSeries:
    """Handle to a registered indicator; ``series[0]`` is the current bar."""

    def __init__(self, provider: "BaseIndicatorProvider", key: str) -> None:
        self._provider = provider
        self.key = key

    def __getitem__(self, bars_ago: int) -> float:
        return self._provider.value(self.key, bars_ago)

    def __repr__(self) -> str:
        return f"IndicatorSeries({self.key})"


class BaseIndicatorProvider(ABC):
    """Abstract base class every indicator adapter must implement."""

    def __init__(self) -> None:
        self._specs: dict[str, IndicatorSpec] = {}

    def register(self, spec: IndicatorSpec) -> IndicatorSeries:
        """Declare *spec* and return a handle for reading its values."""
        if spec.key not in self._specs:
            self._specs[spec.key] = spec
            logger.debug("Registered indicator {}", spec.key)
        return IndicatorSeries(self, spec.key)

    @property
    def registered_keys(self) -> list[str]:
        return list(self._specs)

    def _spec_for(self, key: str) -> IndicatorSpec:
        spec = self._specs.get(key)
        if spec is None:
            raise IndicatorUnavailableError(key, reason="not registered")
        return spec

    def on_bar(self, bar: Bar) -> None:
        """Called by the engine before the strategy sees *bar*."""

    @abstractmethod
    def value(self, key: str, bars_ago: int = 0) -> float:
        """Return the value of indicator *key* ``bars_ago`` bars back."""
        ...


class PushIndicatorProvider(BaseIndicatorProvider):
    """Holds values a host adapter pushes once per bar."""

    def __init__(self, max_history: int = 512) -> None:
        super().__init__()
        self._max_history = max_history
        self._history: dict[str, deque[float]] = {}

    def push(self, key: str, value: float) -> None:
        """Append the current bar's *value* for *key*."""
        self._spec_for(key)
        if key not in self._history:
            self._history[key] = deque(maxlen=self._max_history)
        self._history[key].append(float(value))

    def push_many(self, values: dict[str, float]) -> None:
        for key, value in values.items():
            self.push(key, value)

    def value(self, key: str, bars_ago: int = 0) -> float:
        self._spec_for(key)
        history = self._history.get(key, ())
        if bars_ago < 0 or bars_ago >= len(history):
            raise IndicatorUnavailableError(
                key, bars_ago, f"only {len(history)} values pushed"
            )
        return history[-1 - bars_ago]


class FrameIndicatorProvider(BaseIndicatorProvider):
    """Derives indicator values from replayed primary-series bars.

    Call :meth:`load` with the whole replay before running it: every
    indicator is then computed once over the full frame and :meth:`on_bar`
    only moves a cursor forward. Without a load, bars accumulate through
    :meth:`on_bar` and values are recomputed over the history once per bar.

    All indicators are causal and their warm-up rows are masked, so both
    modes read the same value at a given bar. Anything that lacks enough
    history reads as NaN. Session and week anchors follow
    *session_timezone*.
    """

    def __init__(self, max_bars: int = 20_000, session_timezone: str | None = None) -> None:
        super().__init__()
        self.session_timezone = session_timezone
        self._rows: deque[dict] = deque(maxlen=max_bars)
        self._session_id = 0
        self._frame: pd.DataFrame | None = None
        self._cache: dict[str, pd.Series] = {}
        self._loaded_times: list[datetime] | None = None
        self._cursor = 0

    def load(self, bars: Iterable[Bar]) -> None:
        """Take every bar of a replay up front."""
        self._rows = deque()
        self._session_id = 0
        for bar in bars:
            if bar.is_primary:
                self._append(bar)
        self._loaded_times = [row["timestamp"] for row in self._rows]
        self._cursor = 0
        self._frame = None
        self._cache.clear()
        logger.info(
            "Replay frame loaded | bars={} sessions={}",
            len(self._rows), self._session_id + 1 if self._rows else 0,
        )

    @property
    def is_loaded(self) -> bool:
        return self._loaded_times is not None

    def on_bar(self, bar: Bar) -> None:
        if not bar.is_primary:
            return
        if self._loaded_times is not None:
            if (
                self._cursor >= len(self._loaded_times)
                or self._loaded_times[self._cursor] != bar.timestamp
            ):
                raise ValueError(
                    f"Bar {bar.timestamp} does not match loaded bar #{self._cursor}"
                )
            self._cursor += 1
            return
        self._append(bar)
        self._frame = None
        self._cache.clear()

    def _append(self, bar: Bar) -> None:
        if bar.is_first_bar_of_session and self._rows:
            self._session_id += 1
        self._rows.append({
            "timestamp": bar.timestamp,
            "open": bar.open,
            "high": bar.high,
            "low": bar.low,
            "close": bar.close,
            "volume": bar.volume,
            "session": self._session_id,
            "week": iso_week_id(bar.timestamp, self.session_timezone),
        })

    @property
    def bar_count(self) -> int:
        """Primary bars seen so far."""
        if self._loaded_times is not None:
            return self._cursor
        return len(self._rows)

    @property
    def frame(self) -> pd.DataFrame:
        if self._frame is None:
            self._frame = pd.DataFrame(list(self._rows))
        return self._frame

    def value(self, key: str, bars_ago: int = 0) -> float:
        spec = self._spec_for(key)
        idx = self.bar_count - 1 - bars_ago
        if idx < 0:
            return math.nan
        if key not in self._cache:
            self._cache[key] = self._compute(spec)
        result = self._cache[key].iloc[idx]
        return math.nan if pd.isna(result) else float(result)

    def _compute(self, spec: IndicatorSpec) -> pd.Series:
        df = self.frame
        n = len(df)
        empty = pd.Series(math.nan, index=df.index)

        if spec.kind == IndicatorKind.ATR:
            if n < spec.period + 1:
                return empty
            return _mask_warmup(indicators.atr(df, spec.period), spec.period + 1)
        if spec.kind == IndicatorKind.RSI:
            if n < spec.period + 1:
                return empty
            return _mask_warmup(indicators.rsi(df, spec.period), spec.period + 1)
        if spec.kind == IndicatorKind.EMA:
            if n < spec.period:
                return empty
            return _mask_warmup(indicators.ema(df, spec.period), spec.period)
        if spec.kind == IndicatorKind.VWAP:
            return indicators.anchored_vwap(df, spec.anchor)
        if spec.kind == IndicatorKind.STDDEV:
            if n < spec.period:
                return empty
            return indicators.std_dev(self._source(spec.source), spec.period)
        raise ValueError(f"Unsupported indicator kind: {spec.kind}")

    def _source(self, source: str) -> pd.Series:
        df = self.frame
        if source == "close":
            return df["close"]
        if source == "vwap_session":
            return indicators.anchored_vwap(df, "session")
        if source == "vwap_week":
            return indicators.anchored_vwap(df, "week")
        raise ValueError(f"Unsupported indicator source: {source}")


def _mask_warmup(series: pd.Series, min_rows: int) -> pd.Series:
    """NaN out the rows before *min_rows* bars of history exist."""
    out = series.copy()
    out.iloc[: min_rows - 1] = math.nan
    return out
