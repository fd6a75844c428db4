"""Top-level package for the indicator and trading-signal analyzer."""

__all__ = [
    "analysis",
    "config",
    "currency",
    "data",
    "indicators",
    "monitoring",
    "strategy",
    "watchlist",
]

__version__ = "0.1.0"
