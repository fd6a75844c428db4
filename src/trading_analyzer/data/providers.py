from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from .models import Asset, AssetType, PricePoint, PriceSeries
from .provider_base import QuoteSource, TimeProvider

ONE_DAY_MS = 24 * 60 * 60 * 1000

STOCK_PRICES = {
    "AAPL": 175.50,
    "GOOGL": 142.30,
    "MSFT": 378.85,
    "AMZN": 151.20,
    "TSLA": 248.50,
    "META": 485.20,
    "NVDA": 875.60,
    "NFLX": 485.30,
}

CRYPTO_PRICES = {
    "BITCOIN": 43250.00,
    "ETHEREUM": 2650.50,
    "SOLANA": 98.75,
    "CARDANO": 0.52,
    "POLKADOT": 7.25,
    "CHAINLINK": 14.80,
    "AVALANCHE": 36.40,
    "POLYGON": 0.85,
}

CRYPTO_NAMES = {symbol: symbol.capitalize() for symbol in CRYPTO_PRICES}


class SystemTimeProvider(TimeProvider):
    def now(self) -> datetime:
        return datetime.now(tz=timezone.utc)


class FixedTimeProvider(TimeProvider):
    """Clock pinned to one instant; used for reproducible runs and tests."""

    def __init__(self, instant: datetime) -> None:
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta


def seeded_random(seed: int) -> Callable[[], float]:
    value = seed

    def _next() -> float:
        nonlocal value
        value = (value * 9301 + 49297) % 233280
        return value / 233280

    return _next


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def string_seed(text: str) -> int:
    """31-multiplier string hash wrapped to 32 bits, made non-negative."""
    acc = 0
    for char in text:
        acc = _to_int32(acc * 31 + ord(char))
    return abs(acc)


def _round_half_up(value: float, digits: int = 0) -> float:
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


class MockQuoteSource(QuoteSource):
    """Deterministic synthetic quotes and daily history.

    Prices depend only on the symbol; the 24h change also depends on the
    calendar day of the injected clock.
    """

    STOCK_UNIVERSE = tuple(STOCK_PRICES)
    CRYPTO_UNIVERSE = tuple(symbol.lower() for symbol in CRYPTO_PRICES)

    def __init__(
        self,
        time_provider: TimeProvider | None = None,
        history_days: int = 100,
        search_limit: int = 5,
    ) -> None:
        self._time = time_provider or SystemTimeProvider()
        self._history_days = history_days
        self._search_limit = search_limit

    def daily_seed(self) -> int:
        today = self._time.now()
        # zero-based month keeps seeds stable with previously generated data
        return string_seed(f"{today.year}-{today.month - 1}-{today.day}")

    async def fetch_quote(self, symbol: str, asset_type: AssetType) -> Asset:
        if asset_type == AssetType.CRYPTO:
            return self._crypto_quote(symbol)
        return self._stock_quote(symbol)

    def _stock_quote(self, symbol: str) -> Asset:
        upper = symbol.upper()
        seed = string_seed(upper)
        random = seeded_random(seed)
        base_price = STOCK_PRICES.get(upper) or (50 + random() * 200)
        change_percent = (seeded_random(seed + self.daily_seed())() - 0.5) * 4
        return self._build_asset(
            upper, f"{symbol} Inc.", AssetType.STOCK, base_price, change_percent
        )

    def _crypto_quote(self, symbol: str) -> Asset:
        upper = symbol.upper()
        seed = string_seed(symbol.lower())
        random = seeded_random(seed)
        base_price = CRYPTO_PRICES.get(upper) or (0.1 + random() * 100)
        change_percent = (seeded_random(seed + self.daily_seed())() - 0.5) * 6
        name = CRYPTO_NAMES.get(upper) or symbol.capitalize()
        return self._build_asset(upper, name, AssetType.CRYPTO, base_price, change_percent)

    @staticmethod
    def _build_asset(
        symbol: str,
        name: str,
        asset_type: AssetType,
        base_price: float,
        change_percent: float,
    ) -> Asset:
        change = base_price * (change_percent / 100)
        return Asset(
            symbol=symbol,
            name=name,
            type=asset_type,
            price=_round_half_up(base_price, 2),
            change_24h=_round_half_up(change, 2),
            change_percent_24h=_round_half_up(change_percent, 2),
        )

    async def fetch_history(
        self, symbol: str, asset_type: Optional[AssetType] = None
    ) -> PriceSeries:
        return self.generate_history(symbol, self._history_days)

    def generate_history(self, symbol: str, days: int) -> PriceSeries:
        random = seeded_random(string_seed(symbol))
        current = 100 + random() * 200
        now_ms = int(self._time.now().timestamp() * 1000)
        points: list[PricePoint] = []
        for offset in range(days, -1, -1):
            change = (random() - 0.48) * 0.05  # slight upward bias
            current = current * (1 + change)
            volume = 1_000_000 + random() * 5_000_000
            points.append(
                PricePoint(
                    timestamp=now_ms - offset * ONE_DAY_MS,
                    price=max(1.0, current),
                    volume=int(_round_half_up(volume)),
                )
            )
        return tuple(points)

    async def search(self, query: str, asset_type: AssetType) -> list[Asset]:
        if asset_type == AssetType.CRYPTO:
            universe = self.CRYPTO_UNIVERSE
        else:
            universe = self.STOCK_UNIVERSE

        needle = query.strip().lower()
        if needle:
            matches = [s for s in universe if needle in s.lower()][: self._search_limit]
        else:
            matches = list(universe)
        return [self._search_hit(symbol, asset_type) for symbol in matches]

    @staticmethod
    def _search_hit(symbol: str, asset_type: AssetType) -> Asset:
        if asset_type == AssetType.CRYPTO:
            return Asset(symbol=symbol.upper(), name=symbol.capitalize(), type=asset_type)
        return Asset(symbol=symbol, name=f"{symbol} Inc.", type=asset_type)
