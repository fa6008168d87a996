"""Tests for the technical indicators module."""

from __future__ import annotations

import math

import numpy as np
import pandas as pd
import pytest

from vwapbot.data.indicators import (
    MIN_STD_DEV,
    anchored_vwap,
    atr,
    ema,
    rsi,
    std_dev,
    vwap_funnel,
    zscore,
)


@pytest.fixture
def sample_df() -> pd.DataFrame:
    """Create a sample OHLCV DataFrame for testing."""
    np.random.seed(42)
    n = 100
    close = pd.Series(np.cumsum(np.random.randn(n)) + 100)
    return pd.DataFrame(
        {
            "open": close + np.random.randn(n) * 0.5,
            "high": close + abs(np.random.randn(n)),
            "low": close - abs(np.random.randn(n)),
            "close": close,
            "volume": np.random.randint(1000, 10000, n).astype(float),
        }
    )


class TestEMA:
    """Tests for Exponential Moving Average."""

    def test_ema_length(self, sample_df: pd.DataFrame) -> None:
        result = ema(sample_df, period=20)
        assert len(result) == len(sample_df)

    def test_ema_constant_series(self) -> None:
        df = pd.DataFrame({"close": [5.0] * 10})
        assert ema(df, period=5).iloc[-1] == pytest.approx(5.0)

    def test_ema_insufficient_data(self) -> None:
        df = pd.DataFrame({"close": [1, 2]})
        with pytest.raises(ValueError):
            ema(df, period=5)


class TestRSI:
    """Tests for Relative Strength Index."""

    def test_rsi_range(self, sample_df: pd.DataFrame) -> None:
        result = rsi(sample_df, period=14).dropna()
        assert (result >= 0).all() and (result <= 100).all()

    def test_rsi_all_gains_reads_100(self) -> None:
        df = pd.DataFrame({"close": [float(i) for i in range(1, 21)]})
        assert rsi(df, period=5).iloc[-1] == pytest.approx(100.0)

    def test_rsi_all_losses_reads_0(self) -> None:
        df = pd.DataFrame({"close": [float(i) for i in range(20, 0, -1)]})
        assert rsi(df, period=5).iloc[-1] == pytest.approx(0.0)

    def test_rsi_flat_reads_50(self) -> None:
        df = pd.DataFrame({"close": [10.0] * 20})
        assert rsi(df, period=5).iloc[-1] == pytest.approx(50.0)

    def test_rsi_warmup_is_nan(self) -> None:
        df = pd.DataFrame({"close": [float(i) for i in range(1, 21)]})
        assert math.isnan(rsi(df, period=5).iloc[2])

    def test_rsi_missing_column(self) -> None:
        with pytest.raises(ValueError):
            rsi(pd.DataFrame({"open": [1.0] * 20}), period=5)


class TestATR:
    """Tests for Average True Range."""

    def test_atr_constant_range(self) -> None:
        n = 40
        df = pd.DataFrame({
            "high": [101.0] * n,
            "low": [99.0] * n,
            "close": [100.0] * n,
        })
        assert atr(df, period=14).iloc[-1] == pytest.approx(2.0)

    def test_atr_positive(self, sample_df: pd.DataFrame) -> None:
        assert (atr(sample_df, period=14).dropna() > 0).all()

    def test_atr_insufficient_data(self) -> None:
        df = pd.DataFrame({"high": [1.0] * 5, "low": [0.5] * 5, "close": [0.8] * 5})
        with pytest.raises(ValueError):
            atr(df, period=14)


class TestVWAP:
    """Tests for VWAP calculations."""

    def test_anchored_vwap_resets_per_group(self) -> None:
        df = pd.DataFrame({
            "high": [11.0, 21.0, 31.0],
            "low": [9.0, 19.0, 29.0],
            "close": [10.0, 20.0, 30.0],
            "volume": [1.0, 1.0, 1.0],
            "session": [0, 0, 1],
        })
        result = anchored_vwap(df, "session")
        assert result.iloc[1] == pytest.approx(15.0)
        assert result.iloc[2] == pytest.approx(30.0)

    def test_anchored_vwap_zero_volume_is_nan(self) -> None:
        df = pd.DataFrame({
            "high": [11.0], "low": [9.0], "close": [10.0], "volume": [0.0], "session": [0],
        })
        assert math.isnan(anchored_vwap(df, "session").iloc[0])

    def test_anchored_vwap_missing_anchor(self) -> None:
        df = pd.DataFrame({"high": [1.0], "low": [1.0], "close": [1.0], "volume": [1.0]})
        with pytest.raises(ValueError):
            anchored_vwap(df, "week")


class TestStdDev:
    """Tests for population standard deviation."""

    def test_population_std(self) -> None:
        result = std_dev(pd.Series([1.0, 2.0, 3.0, 4.0]), period=4)
        assert result.iloc[-1] == pytest.approx(math.sqrt(1.25))

    def test_warmup_is_nan(self) -> None:
        result = std_dev(pd.Series([1.0, 2.0, 3.0, 4.0]), period=3)
        assert math.isnan(result.iloc[1])

    def test_insufficient_data(self) -> None:
        with pytest.raises(ValueError):
            std_dev(pd.Series([1.0]), period=3)


class TestZScoreAndFunnel:
    """Tests for z-score and VWAP funnel helpers."""

    def test_zscore(self) -> None:
        assert zscore(98.0, 100.0, 1.0) == pytest.approx(-2.0)

    def test_zscore_zero_std_substitution(self) -> None:
        assert zscore(100.5, 100.0, 0.0) == pytest.approx(0.5 / MIN_STD_DEV)

    def test_funnel(self) -> None:
        lower, upper = vwap_funnel(100.0, 2.0, 1.5)
        assert lower == pytest.approx(97.0)
        assert upper == pytest.approx(103.0)
