from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from .models import Asset, AssetType, PriceSeries


class QuoteSource(ABC):
    @abstractmethod
    async def fetch_quote(self, symbol: str, asset_type: AssetType) -> Asset:
        raise NotImplementedError

    @abstractmethod
    async def fetch_history(
        self, symbol: str, asset_type: Optional[AssetType] = None
    ) -> PriceSeries:
        raise NotImplementedError

    @abstractmethod
    async def search(self, query: str, asset_type: AssetType) -> list[Asset]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class TimeProvider(ABC):
    @abstractmethod
    def now(self) -> datetime:
        raise NotImplementedError
