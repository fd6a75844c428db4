"""Exception hierarchy for the collaborators around the analysis engine.

The indicator and signal engines never raise on degraded input; these errors
belong to data sources, storage and configuration.
"""

from __future__ import annotations


class TradingAnalyzerError(Exception):
    """Base class for every error raised by this package."""


class DataUnavailableError(TradingAnalyzerError):
    """A quote or history source returned nothing usable for a symbol."""

    def __init__(self, symbol: str, reason: str = "no data") -> None:
        super().__init__(f"{symbol}: {reason}")
        self.symbol = symbol
        self.reason = reason


class UnsupportedAssetError(TradingAnalyzerError):
    """The requested asset type is not served by the configured source."""


class ConfigError(TradingAnalyzerError):
    """Configuration file missing, unreadable or in an unknown format."""
