"""TradingView market data: candle models, chart options, event handling, session commands, search and news."""

__version__ = "0.1.0"

__all__ = ["callbacks", "events", "models", "news", "options", "search", "session", "study"]