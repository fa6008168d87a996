"""Pydantic-based settings management for VWAPBot."""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Strategy parameters loaded from environment variables / .env file.

    VWAPBot evaluates two intraday rule sets on bars supplied by a host
    trading platform. Every value here is static for the lifetime of a run.
    """

    # ── Strategy Selection ────────────────────────────────────────────────────
    STRATEGY: str = "vwap_fade"  # "vwap_fade" or "atr_vwap_rsi"

    # ── Instrument ────────────────────────────────────────────────────────────
    TICK_SIZE: float = 0.25  # Normally reported by the host

    # ── VWAP Fade Mean-Reversion ─────────────────────────────────────────────
    FADE_NUM_CONTRACTS: int = 3
    FADE_ATR_STOP_MULT: float = 2.5
    FADE_ATR_TARGET_MULTIPLES: str = "3,6,9"  # One multiple per contract
    FADE_ZSCORE_THRESHOLD: float = 1.0
    FADE_RSI_PERIOD: int = 5
    FADE_RSI_SMOOTH: int = 3
    FADE_RSI_OVERSOLD: float = 30.0
    FADE_RSI_OVERBOUGHT: float = 70.0
    FADE_DAILY_MAX_LOSS: float = 50.0  # USD, accumulated from stop fills
    FADE_ATR_PERIOD: int = 14
    FADE_EMA_FAST: int = 50
    FADE_EMA_SLOW: int = 200
    FADE_STDDEV_PERIOD: int = 20
    FADE_WARMUP_BARS: int = 50
    FADE_BREAKEVEN_TRIGGER_ATR: float = 3.0
    FADE_SESSION_START: str = "06:30"
    FADE_SESSION_END: str = "10:30"
    FADE_SESSION_TIMEZONE: str = "America/Los_Angeles"

    # ── ATR / VWAP / RSI Multi-Contract ──────────────────────────────────────
    ATR_VWAP_NUM_CONTRACTS: int = 3
    ATR_VWAP_TARGET_MULTIPLIERS: Annotated[list[float], NoDecode] = [3.0, 6.0, 9.0]
    ATR_VWAP_STOP_MULT: float = 2.5
    ATR_VWAP_BREAKEVEN_TRIGGER_ATR: float = 3.0
    ATR_VWAP_DAILY_LOSS_PCT: float = 1.0  # % of session-start cash
    ATR_VWAP_RSI_LENGTH: int = 14
    ATR_VWAP_RSI_SMOOTH: int = 1
    ATR_VWAP_EMA_FAST: int = 50
    ATR_VWAP_EMA_SLOW: int = 200
    ATR_VWAP_STDDEV_MULTIPLIER: float = 1.0
    ATR_VWAP_STDDEV_PERIOD: int = 20
    ATR_VWAP_ATR_PERIOD: int = 14
    ATR_VWAP_RSI_LONG_CROSS: float = 20.0
    ATR_VWAP_RSI_SHORT_CROSS: float = 80.0
    ATR_VWAP_WARMUP_BARS: int = 200
    ATR_VWAP_SESSION_START: str = "09:30"
    ATR_VWAP_SESSION_END: str = "13:30"
    ATR_VWAP_SESSION_TIMEZONE: str = "America/New_York"

    # ── Break-even ────────────────────────────────────────────────────────────
    BREAKEVEN_OFFSET_TICKS: int = 2

    # ── Replay ────────────────────────────────────────────────────────────────
    REPLAY_START_CASH: float = 50000.0

    # ── Logging ───────────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/vwapbot.log"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # ── Validators ────────────────────────────────────────────────────────────

    @field_validator("STRATEGY")
    @classmethod
    def validate_strategy(cls, v: str) -> str:
        """Ensure strategy name is valid."""
        allowed = {"vwap_fade", "atr_vwap_rsi"}
        if v.lower() not in allowed:
            raise ValueError(f"STRATEGY must be one of {allowed}, got '{v}'")
        return v.lower()

    @field_validator("ATR_VWAP_TARGET_MULTIPLIERS", mode="before")
    @classmethod
    def parse_target_multipliers(cls, v: Any) -> list[float]:
        """Accept JSON string, comma-separated string, or list."""
        if isinstance(v, str):
            try:
                parsed = json.loads(v)
            except json.JSONDecodeError:
                return [float(s.strip()) for s in v.split(",") if s.strip()]
            if isinstance(parsed, list):
                return [float(x) for x in parsed]
            return [float(parsed)]
        return v

    @field_validator("FADE_NUM_CONTRACTS")
    @classmethod
    def validate_fade_contracts(cls, v: int) -> int:
        """Contract count is limited to 1..10."""
        if not 1 <= v <= 10:
            raise ValueError(f"FADE_NUM_CONTRACTS must be in [1, 10], got {v}")
        return v

    @field_validator("ATR_VWAP_NUM_CONTRACTS")
    @classmethod
    def validate_atr_contracts(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"ATR_VWAP_NUM_CONTRACTS must be >= 1, got {v}")
        return v

    @field_validator("FADE_ZSCORE_THRESHOLD")
    @classmethod
    def validate_zscore(cls, v: float) -> float:
        """Z-score threshold is limited to 0.1..5."""
        if not 0.1 <= v <= 5:
            raise ValueError(f"FADE_ZSCORE_THRESHOLD must be in [0.1, 5], got {v}")
        return v

    @field_validator("FADE_RSI_PERIOD")
    @classmethod
    def validate_rsi_period(cls, v: int) -> int:
        if not 1 <= v <= 50:
            raise ValueError(f"FADE_RSI_PERIOD must be in [1, 50], got {v}")
        return v

    @field_validator(
        "FADE_RSI_OVERSOLD",
        "FADE_RSI_OVERBOUGHT",
        "ATR_VWAP_RSI_LONG_CROSS",
        "ATR_VWAP_RSI_SHORT_CROSS",
    )
    @classmethod
    def validate_rsi_level(cls, v: float) -> float:
        """RSI levels live on the 0..100 oscillator scale."""
        if not 0 <= v <= 100:
            raise ValueError(f"RSI level must be in [0, 100], got {v}")
        return v

    @field_validator(
        "FADE_SESSION_START",
        "FADE_SESSION_END",
        "ATR_VWAP_SESSION_START",
        "ATR_VWAP_SESSION_END",
    )
    @classmethod
    def validate_session_time(cls, v: str) -> str:
        """Session boundaries are ``HH:MM`` or ``HH:MM:SS`` strings."""
        parts = v.strip().split(":")
        if len(parts) not in (2, 3) or not all(p.isdigit() for p in parts):
            raise ValueError(f"Session time must look like HH:MM, got '{v}'")
        hour, minute = int(parts[0]), int(parts[1])
        second = int(parts[2]) if len(parts) == 3 else 0
        if hour > 23 or minute > 59 or second > 59:
            raise ValueError(f"Session time out of range: '{v}'")
        return v.strip()

    @field_validator("TICK_SIZE")
    @classmethod
    def validate_tick_size(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"TICK_SIZE must be positive, got {v}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of {allowed}, got '{v}'")
        return v.upper()

    @model_validator(mode="after")
    def validate_ema_order(self) -> "Settings":
        """The fast EMA must use a shorter period than the slow EMA."""
        if self.FADE_EMA_FAST >= self.FADE_EMA_SLOW:
            raise ValueError("FADE_EMA_FAST must be shorter than FADE_EMA_SLOW")
        if self.ATR_VWAP_EMA_FAST >= self.ATR_VWAP_EMA_SLOW:
            raise ValueError("ATR_VWAP_EMA_FAST must be shorter than ATR_VWAP_EMA_SLOW")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton Settings instance."""
    return Settings()
