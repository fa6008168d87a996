"""Shared pytest fixtures for VWAPBot tests."""

from __future__ import annotations

from datetime import datetime
from unittest.mock import MagicMock

import pytest

from vwapbot.config.settings import Settings
from vwapbot.data.indicator_provider import PushIndicatorProvider
from vwapbot.host.base_client import BaseHostClient
from vwapbot.models.bar import Bar
from vwapbot.models.position import Position


@pytest.fixture
def mock_settings(tmp_path) -> Settings:
    """Return a Settings object with safe test defaults."""
    return Settings(
        STRATEGY="vwap_fade",
        TICK_SIZE=0.25,
        FADE_NUM_CONTRACTS=3,
        FADE_ATR_TARGET_MULTIPLES="3,6,9",
        FADE_DAILY_MAX_LOSS=50.0,
        FADE_WARMUP_BARS=0,
        ATR_VWAP_NUM_CONTRACTS=3,
        ATR_VWAP_TARGET_MULTIPLIERS=[3.0, 6.0, 9.0],
        ATR_VWAP_DAILY_LOSS_PCT=1.0,
        ATR_VWAP_WARMUP_BARS=0,
        REPLAY_START_CASH=50000.0,
        LOG_LEVEL="DEBUG",
        LOG_FILE=str(tmp_path / "vwapbot.log"),
    )


@pytest.fixture
def mock_host_client() -> MagicMock:
    """Return a MagicMock of BaseHostClient: flat, $50k cash, 0.25 tick."""
    client = MagicMock(spec=BaseHostClient)
    client.tick_size = 0.25
    client.get_position.return_value = Position.flat()
    client.get_cash_value.return_value = 50000.0
    client.get_current_bid.return_value = 101.0
    client.get_current_ask.return_value = 101.25
    return client


@pytest.fixture
def push_provider() -> PushIndicatorProvider:
    return PushIndicatorProvider()


def make_bar(
    hour: int = 7,
    minute: int = 0,
    close: float = 100.0,
    day: int = 5,
    first: bool = False,
    series: int = 0,
) -> Bar:
    """Return a one-minute bar on 2024-03-<day> at hour:minute."""
    return Bar(
        timestamp=datetime(2024, 3, day, hour, minute),
        open=close,
        high=close + 0.5,
        low=close - 0.5,
        close=close,
        volume=1000.0,
        series=series,
        is_first_bar_of_session=first,
    )


@pytest.fixture
def bar_factory():
    return make_bar
