"""Watchlist and display-currency preference on top of a key-value repository."""

from __future__ import annotations

import logging
from typing import List

from trading_analyzer.currency.converter import Currency
from trading_analyzer.data.models import Asset, AssetType

from .repository import KeyValueRepository

logger = logging.getLogger(__name__)

WATCHLIST_KEY = "trading-analyzer-watchlist"
CURRENCY_KEY = "trading-analyzer-currency"


class WatchlistStore:
    """Ordered list of assets, unique on (symbol, type)."""

    def __init__(self, repository: KeyValueRepository, key: str = WATCHLIST_KEY) -> None:
        self._repo = repository
        self._key = key

    def list(self) -> List[Asset]:
        raw = self._repo.get(self._key)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("Watchlist entry %r is not a list, treating as empty", self._key)
            return []
        assets: List[Asset] = []
        for item in raw:
            try:
                assets.append(Asset.from_dict(item))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed watchlist item %r: %s", item, exc)
        return assets

    def add(self, asset: Asset) -> bool:
        assets = self.list()
        if any(a.key == asset.key for a in assets):
            return False
        assets.append(asset)
        self._write(assets)
        logger.info("Added %s (%s) to watchlist", asset.symbol, asset.type.value)
        return True

    def remove(self, symbol: str, asset_type: AssetType) -> bool:
        assets = self.list()
        kept = [a for a in assets if a.key != (symbol, asset_type)]
        self._write(kept)
        return len(kept) != len(assets)

    def contains(self, symbol: str, asset_type: AssetType) -> bool:
        return any(a.key == (symbol, asset_type) for a in self.list())

    def _write(self, assets: List[Asset]) -> None:
        self._repo.put(self._key, [a.to_dict() for a in assets])


class CurrencyPreference:
    def __init__(
        self,
        repository: KeyValueRepository,
        key: str = CURRENCY_KEY,
        default: Currency = Currency.USD,
    ) -> None:
        self._repo = repository
        self._key = key
        self._default = default

    def get(self) -> Currency:
        stored = self._repo.get(self._key)
        if stored is None:
            return self._default
        try:
            return Currency(str(stored).upper())
        except ValueError:
            logger.warning("Unknown stored currency %r, using %s", stored, self._default.value)
            return self._default

    def set(self, currency: Currency) -> None:
        self._repo.put(self._key, currency.value)
