"""Tests for StrategyEngine."""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from vwapbot.core.engine import StrategyEngine
from vwapbot.data.indicator_provider import FrameIndicatorProvider
from vwapbot.errors import ConfigurationError
from vwapbot.host.replay_client import ReplayHostClient
from vwapbot.models.bar import Bar
from vwapbot.models.execution import Execution
from vwapbot.models.order import OrderAction, OrderRequest
from vwapbot.strategies.base_strategy import BaseStrategy, StrategyState
from vwapbot.strategies.vwap_fade_strategy import VWAPFadeStrategy

from conftest import make_bar


@pytest.fixture
def mock_strategy() -> MagicMock:
    strategy = MagicMock(spec=BaseStrategy)
    strategy.name = "mock"
    strategy.state = None
    strategy.on_bar_update.return_value = [
        OrderRequest(action=OrderAction.ENTER_LONG, quantity=1, signal_name="Test"),
    ]
    return strategy


def synthetic_bars(count: int = 240) -> list[Bar]:
    start = datetime(2024, 3, 5, 6, 30)
    bars = []
    for i in range(count):
        close = 100.0 + 3.0 * math.sin(i / 8.0)
        bars.append(Bar(
            timestamp=start + timedelta(minutes=i),
            open=close,
            high=close + 0.75,
            low=close - 0.75,
            close=close,
            volume=500.0 + (i % 7) * 50,
            is_first_bar_of_session=i == 0,
        ))
    return bars


class TestLifecycle:
    def test_start_walks_states(self, mock_strategy, mock_host_client, push_provider) -> None:
        engine = StrategyEngine(mock_strategy, mock_host_client, push_provider)
        engine.start()
        states = [c.args[0] for c in mock_strategy.on_state_change.call_args_list]
        assert states == [
            StrategyState.SET_DEFAULTS,
            StrategyState.CONFIGURE,
            StrategyState.DATA_LOADED,
            StrategyState.HISTORICAL,
        ]

    def test_start_realtime(self, mock_strategy, mock_host_client, push_provider) -> None:
        StrategyEngine(mock_strategy, mock_host_client, push_provider).start(realtime=True)
        mock_strategy.on_state_change.assert_called_with(StrategyState.REALTIME)

    def test_configuration_error_terminates(self, mock_host_client, push_provider, mock_settings) -> None:
        settings = mock_settings.model_copy(update={"FADE_NUM_CONTRACTS": 2})
        strategy = VWAPFadeStrategy(mock_host_client, push_provider, settings)
        engine = StrategyEngine(strategy, mock_host_client, push_provider)
        with pytest.raises(ConfigurationError):
            engine.start()
        assert strategy.state == StrategyState.TERMINATED
        assert strategy.is_running is False
        with pytest.raises(RuntimeError):
            engine.process_bar(make_bar())

    def test_stop_terminates(self, mock_strategy, mock_host_client, push_provider) -> None:
        engine = StrategyEngine(mock_strategy, mock_host_client, push_provider)
        engine.start()
        engine.stop()
        mock_strategy.on_state_change.assert_called_with(StrategyState.TERMINATED)


class TestProcessing:
    def test_process_bar_requires_start(self, mock_strategy, mock_host_client, push_provider) -> None:
        engine = StrategyEngine(mock_strategy, mock_host_client, push_provider)
        with pytest.raises(RuntimeError):
            engine.process_bar(make_bar())

    def test_requests_forwarded_to_host(self, mock_strategy, mock_host_client, push_provider) -> None:
        engine = StrategyEngine(mock_strategy, mock_host_client, push_provider)
        engine.start()
        bar = make_bar()
        requests = engine.process_bar(bar)

        mock_host_client.on_bar.assert_called_once_with(bar)
        mock_strategy.on_bar_update.assert_called_once_with(bar)
        mock_host_client.submit.assert_called_once_with(requests[0])
        assert engine.bars_processed == 1
        assert engine.requests_submitted == 1

    def test_strategy_error_propagates(self, mock_strategy, mock_host_client, push_provider) -> None:
        mock_strategy.on_bar_update.side_effect = ValueError("boom")
        engine = StrategyEngine(mock_strategy, mock_host_client, push_provider)
        engine.start()
        with pytest.raises(ValueError):
            engine.process_bar(make_bar())
        mock_host_client.submit.assert_not_called()

    def test_execution_routed(self, mock_strategy, mock_host_client, push_provider) -> None:
        engine = StrategyEngine(mock_strategy, mock_host_client, push_provider)
        execution = Execution(order_name="LongStop_0", price=95.0, quantity=1)
        engine.process_execution(execution)
        mock_strategy.on_execution_update.assert_called_once_with(execution)
        assert engine.get_status()["executions_processed"] == 1


class TestReplay:
    def test_run_over_synthetic_bars(self, mock_settings) -> None:
        settings = mock_settings.model_copy(update={"FADE_EMA_SLOW": 60, "FADE_EMA_FAST": 20})
        host = ReplayHostClient(cash_value=50000.0)
        provider = FrameIndicatorProvider()
        strategy = VWAPFadeStrategy(host, provider, settings)
        engine = StrategyEngine(strategy, host, provider)

        bars = synthetic_bars()
        submitted = engine.run(bars)

        assert engine.bars_processed == len(bars)
        assert provider.bar_count == len(bars)
        assert submitted == host.submitted
        assert all(r.is_entry for r in submitted)
        assert strategy.state == StrategyState.TERMINATED

    def test_loaded_replay_matches_incremental(self, mock_settings) -> None:
        settings = mock_settings.model_copy(update={"FADE_EMA_SLOW": 60, "FADE_EMA_FAST": 20})
        bars = synthetic_bars()

        def replay(preload: bool) -> list[tuple]:
            host = ReplayHostClient(cash_value=50000.0)
            provider = FrameIndicatorProvider(session_timezone="America/Los_Angeles")
            if preload:
                provider.load(bars)
            engine = StrategyEngine(VWAPFadeStrategy(host, provider, settings), host, provider)
            return [(r.action, r.signal_name, r.bar_time) for r in engine.run(bars)]

        assert replay(preload=True) == replay(preload=False)
