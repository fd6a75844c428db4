"""CoinGecko quote/history source with retry and timeout handling."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from trading_analyzer.config.models import HttpConfig
from trading_analyzer.errors import DataUnavailableError, UnsupportedAssetError

from .models import Asset, AssetType, PricePoint, PriceSeries
from .provider_base import QuoteSource

logger = logging.getLogger(__name__)


class CoinGeckoQuoteSource(QuoteSource):
    """Crypto quotes and daily history from the public CoinGecko REST API.

    Symbols are CoinGecko coin ids in upper case (``BITCOIN`` -> ``bitcoin``).
    """

    def __init__(
        self,
        config: HttpConfig | None = None,
        history_days: int = 100,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._cfg = config or HttpConfig()
        self._history_days = history_days
        headers = {"x-cg-demo-api-key": self._cfg.api_key} if self._cfg.api_key else {}
        self._client = client or httpx.AsyncClient(
            base_url=self._cfg.base_url,
            timeout=self._cfg.timeout_seconds,
            headers=headers,
        )

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            wait=wait_exponential(multiplier=1, min=1, max=8),
            stop=stop_after_attempt(self._cfg.retry_attempts),
            retry=retry_if_exception_type(httpx.HTTPError),
            reraise=True,
        )

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        async for attempt in self._retrying():
            with attempt:
                response = await self._client.get(path, params=params)
                response.raise_for_status()
                return response.json()
        raise RuntimeError("Unreachable _get_json")

    async def fetch_quote(self, symbol: str, asset_type: AssetType) -> Asset:
        coin_id = self._coin_id(symbol, asset_type)
        payload = await self._get_json(
            "/simple/price",
            {"ids": coin_id, "vs_currencies": "usd", "include_24hr_change": "true"},
        )
        quote = payload.get(coin_id) if isinstance(payload, dict) else None
        if not quote or "usd" not in quote:
            raise DataUnavailableError(symbol.upper(), "no quote returned")

        price = float(quote["usd"])
        change_percent = float(quote.get("usd_24h_change") or 0.0)
        return Asset(
            symbol=symbol.upper(),
            name=coin_id.capitalize(),
            type=AssetType.CRYPTO,
            price=round(price, 2),
            change_24h=round(price * change_percent / 100, 2),
            change_percent_24h=round(change_percent, 2),
        )

    async def fetch_history(
        self, symbol: str, asset_type: Optional[AssetType] = None
    ) -> PriceSeries:
        coin_id = self._coin_id(symbol, asset_type or AssetType.CRYPTO)
        payload = await self._get_json(
            f"/coins/{coin_id}/market_chart",
            {"vs_currency": "usd", "days": self._history_days, "interval": "daily"},
        )
        prices = payload.get("prices") or []
        volumes = payload.get("total_volumes") or []
        points = [self._parse_point(row, volumes, idx) for idx, row in enumerate(prices)]
        points = [p for p in points if p.price > 0]
        points.sort(key=lambda p: p.timestamp)
        logger.debug("Fetched %d history points for %s", len(points), coin_id)
        return tuple(points)

    async def search(self, query: str, asset_type: AssetType) -> list[Asset]:
        if asset_type != AssetType.CRYPTO:
            return []
        payload = await self._get_json("/search", {"query": query})
        return [
            Asset(symbol=coin["id"].upper(), name=coin.get("name", coin["id"]), type=AssetType.CRYPTO)
            for coin in payload.get("coins", [])[:5]
        ]

    @staticmethod
    def _parse_point(row: list, volumes: list, idx: int) -> PricePoint:
        volume: int | None = None
        if idx < len(volumes) and volumes[idx][1] is not None:
            volume = max(0, int(round(float(volumes[idx][1]))))
        return PricePoint(timestamp=int(row[0]), price=float(row[1]), volume=volume)

    @staticmethod
    def _coin_id(symbol: str, asset_type: AssetType) -> str:
        if asset_type != AssetType.CRYPTO:
            raise UnsupportedAssetError(f"{symbol}: CoinGecko serves crypto assets only")
        return symbol.strip().lower()

    async def aclose(self) -> None:
        await self._client.aclose()
