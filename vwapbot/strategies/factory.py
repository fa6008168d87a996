"""Strategy registry for VWAPBot."""

from __future__ import annotations

from vwapbot.config.settings import Settings
from vwapbot.data.indicator_provider import BaseIndicatorProvider
from vwapbot.host.base_client import BaseHostClient
from vwapbot.strategies.atr_vwap_rsi_strategy import ATRVWAPRSIStrategy
from vwapbot.strategies.base_strategy import BaseStrategy
from vwapbot.strategies.vwap_fade_strategy import VWAPFadeStrategy

STRATEGY_REGISTRY: dict[str, type[BaseStrategy]] = {
    "vwap_fade": VWAPFadeStrategy,
    "atr_vwap_rsi": ATRVWAPRSIStrategy,
}


def list_strategies() -> list[str]:
    return sorted(STRATEGY_REGISTRY)


def create_strategy(
    name: str,
    host_client: BaseHostClient,
    indicator_provider: BaseIndicatorProvider,
    settings: Settings,
) -> BaseStrategy:
    """Instantiate the strategy registered under *name*.

    Raises:
        ValueError: If *name* is not registered.
    """
    try:
        cls = STRATEGY_REGISTRY[name.lower()]
    except KeyError:
        raise ValueError(
            f"Unknown strategy '{name}'. Available: {list_strategies()}"
        ) from None
    return cls(host_client, indicator_provider, settings)
