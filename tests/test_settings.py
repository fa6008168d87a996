"""Tests for Settings validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from vwapbot.config.settings import Settings


class TestDefaults:
    def test_fade_defaults(self) -> None:
        s = Settings(_env_file=None)
        assert s.FADE_NUM_CONTRACTS == 3
        assert s.FADE_ATR_TARGET_MULTIPLES == "3,6,9"
        assert s.FADE_RSI_PERIOD == 5
        assert s.FADE_SESSION_START == "06:30"

    def test_atr_vwap_defaults(self) -> None:
        s = Settings(_env_file=None)
        assert s.ATR_VWAP_TARGET_MULTIPLIERS == [3.0, 6.0, 9.0]
        assert s.ATR_VWAP_SESSION_END == "13:30"
        assert s.ATR_VWAP_WARMUP_BARS == 200


class TestEnvironment:
    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STRATEGY", "ATR_VWAP_RSI")
        monkeypatch.setenv("FADE_DAILY_MAX_LOSS", "125")
        s = Settings(_env_file=None)
        assert s.STRATEGY == "atr_vwap_rsi"
        assert s.FADE_DAILY_MAX_LOSS == 125.0

    def test_target_multipliers_csv_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ATR_VWAP_TARGET_MULTIPLIERS", "3,6,9")
        assert Settings(_env_file=None).ATR_VWAP_TARGET_MULTIPLIERS == [3.0, 6.0, 9.0]

    def test_target_multipliers_json_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ATR_VWAP_TARGET_MULTIPLIERS", "[2, 4.5]")
        assert Settings(_env_file=None).ATR_VWAP_TARGET_MULTIPLIERS == [2.0, 4.5]

    def test_target_multipliers_single_value_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ATR_VWAP_TARGET_MULTIPLIERS", "5")
        assert Settings(_env_file=None).ATR_VWAP_TARGET_MULTIPLIERS == [5.0]

    def test_target_multipliers_dotenv(self, tmp_path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("ATR_VWAP_TARGET_MULTIPLIERS=2,4\nATR_VWAP_NUM_CONTRACTS=2\n")
        s = Settings(_env_file=env_file)
        assert s.ATR_VWAP_TARGET_MULTIPLIERS == [2.0, 4.0]
        assert s.ATR_VWAP_NUM_CONTRACTS == 2

    def test_target_multipliers_csv(self) -> None:
        s = Settings(_env_file=None, ATR_VWAP_TARGET_MULTIPLIERS="2, 4")
        assert s.ATR_VWAP_TARGET_MULTIPLIERS == [2.0, 4.0]

    def test_target_multipliers_json(self) -> None:
        s = Settings(_env_file=None, ATR_VWAP_TARGET_MULTIPLIERS="[1.5, 3]")
        assert s.ATR_VWAP_TARGET_MULTIPLIERS == [1.5, 3.0]


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"STRATEGY": "grid"},
            {"FADE_NUM_CONTRACTS": 11},
            {"FADE_NUM_CONTRACTS": 0},
            {"FADE_ZSCORE_THRESHOLD": 0.05},
            {"FADE_RSI_PERIOD": 51},
            {"FADE_RSI_OVERSOLD": 120.0},
            {"ATR_VWAP_RSI_SHORT_CROSS": -1.0},
            {"FADE_SESSION_START": "6h30"},
            {"ATR_VWAP_SESSION_END": "25:00"},
            {"TICK_SIZE": 0.0},
            {"LOG_LEVEL": "chatty"},
            {"FADE_EMA_FAST": 200, "FADE_EMA_SLOW": 50},
            {"ATR_VWAP_NUM_CONTRACTS": 0},
        ],
    )
    def test_rejects(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **overrides)

    def test_log_level_normalised(self) -> None:
        assert Settings(_env_file=None, LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"
