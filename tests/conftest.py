"""Shared fixtures for analyzer tests."""

from datetime import datetime, timezone

import pytest

from trading_analyzer.data.models import BollingerBands, Indicators, MacdValues, PricePoint
from trading_analyzer.data.providers import FixedTimeProvider

DAY_MS = 24 * 60 * 60 * 1000


def build_series(prices, volumes=None):
    if volumes is None:
        volumes = [None] * len(prices)
    return tuple(
        PricePoint(timestamp=i * DAY_MS, price=float(p), volume=v)
        for i, (p, v) in enumerate(zip(prices, volumes))
    )


@pytest.fixture
def make_series():
    return build_series


@pytest.fixture
def make_indicators():
    def _make(
        rsi=50.0,
        macd=(0.0, 0.0, 0.0),
        sma20=100.0,
        sma50=100.0,
        sma200=100.0,
        bands=(110.0, 100.0, 90.0),
        volume=0.0,
    ):
        return Indicators(
            rsi=rsi,
            macd=MacdValues(*macd),
            sma20=sma20,
            sma50=sma50,
            sma200=sma200,
            bollinger=BollingerBands(*bands),
            volume=volume,
        )

    return _make


@pytest.fixture
def fixed_clock():
    return FixedTimeProvider(datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc))
