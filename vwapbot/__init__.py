"""VWAPBot: VWAP / ATR / RSI intraday rule sets for host trading platforms."""

__version__ = "0.1.0"
