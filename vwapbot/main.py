"""VWAPBot command-line entry point.

Usage:
    vwapbot replay --strategy vwap_fade --bars data/es_1m.csv --out signals.csv
    vwapbot strategies
"""

from __future__ import annotations

import argparse
import sys

from loguru import logger

from vwapbot.config.settings import Settings, get_settings
from vwapbot.core.engine import StrategyEngine
from vwapbot.data.indicator_provider import FrameIndicatorProvider
from vwapbot.data.market_data import load_bars_csv
from vwapbot.errors import ConfigurationError
from vwapbot.host.replay_client import ReplayHostClient
from vwapbot.strategies.factory import create_strategy, list_strategies
from vwapbot.utils.logger import setup_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vwapbot", description="VWAPBot strategy tools")
    sub = parser.add_subparsers(dest="command", required=True)

    replay = sub.add_parser("replay", help="Replay a bar file and log order requests")
    replay.add_argument("--strategy", choices=list_strategies(), help="Overrides STRATEGY")
    replay.add_argument("--bars", required=True, help="CSV with timestamp,open,high,low,close,volume")
    replay.add_argument("--out", help="Write the request log to this CSV")
    replay.add_argument("--log-level", help="Overrides LOG_LEVEL")

    sub.add_parser("strategies", help="List available strategies")
    return parser


def _session_timezone(settings: Settings, strategy: str) -> str:
    if strategy == "atr_vwap_rsi":
        return settings.ATR_VWAP_SESSION_TIMEZONE
    return settings.FADE_SESSION_TIMEZONE


def replay(args: argparse.Namespace, settings: Settings) -> int:
    """Replay bars through a strategy. Returns a process exit code."""
    strategy_name = args.strategy or settings.STRATEGY
    setup_logger(args.log_level or settings.LOG_LEVEL, settings.LOG_FILE)

    session_timezone = _session_timezone(settings, strategy_name)
    bars = load_bars_csv(args.bars, session_timezone)
    host = ReplayHostClient(cash_value=settings.REPLAY_START_CASH, tick_size=settings.TICK_SIZE)
    provider = FrameIndicatorProvider(session_timezone=session_timezone)
    provider.load(bars)
    strategy = create_strategy(strategy_name, host, provider, settings)
    engine = StrategyEngine(strategy, host, provider)

    try:
        engine.run(bars)
    except ConfigurationError:
        return 2

    entries = host.entries()
    logger.info(
        "Replay finished | strategy={} bars={} requests={} entries={}",
        strategy_name, len(bars), len(host.submitted), len(entries),
    )
    if args.out:
        host.to_frame().to_csv(args.out, index=False)
        logger.info("Request log written to {}", args.out)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "strategies":
        for name in list_strategies():
            print(name)
        return 0
    return replay(args, get_settings())


def run() -> None:
    """Synchronous wrapper suitable for ``python -m`` or console_scripts."""
    sys.exit(main())


if __name__ == "__main__":
    run()
