from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, Sequence

from trading_analyzer.data.models import (
    Asset,
    AssetType,
    Indicators,
    PricePoint,
    PriceSeries,
    as_series,
    series_to_dicts,
    validate_series,
)
from trading_analyzer.data.provider_base import QuoteSource, TimeProvider
from trading_analyzer.data.providers import SystemTimeProvider
from trading_analyzer.errors import DataUnavailableError
from trading_analyzer.indicators.engine import IndicatorEngine
from trading_analyzer.strategy.base import SignalStrategy
from trading_analyzer.strategy.models import TradingSignal
from trading_analyzer.strategy.signal_engine import SignalEngine

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AssetAnalysis:
    asset: Asset
    indicators: Indicators
    signal: TradingSignal
    series: PriceSeries
    computed_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset": self.asset.to_dict(),
            "indicators": self.indicators.to_dict(),
            "signal": self.signal.to_dict(),
            "series": series_to_dicts(self.series),
            "computed_at": self.computed_at.isoformat(),
        }


class AnalysisOrchestrator:
    def __init__(
        self,
        indicator_engine: IndicatorEngine | None = None,
        signal_engine: SignalStrategy | None = None,
        time_provider: TimeProvider | None = None,
        quote_source: QuoteSource | None = None,
    ) -> None:
        self._indicator_engine = indicator_engine or IndicatorEngine()
        self._signal_engine = signal_engine or SignalEngine()
        self._time = time_provider or SystemTimeProvider()
        self._quote_source = quote_source

    def analyze(self, asset: Asset, series: Sequence[PricePoint]) -> AssetAnalysis:
        frozen = as_series(series)
        indicators = self._indicator_engine.compute(frozen)
        signal = self._signal_engine.generate(frozen, indicators)
        return AssetAnalysis(
            asset=asset,
            indicators=indicators,
            signal=signal,
            series=frozen,
            computed_at=self._time.now(),
        )

    async def analyze_symbol(self, symbol: str, asset_type: AssetType) -> AssetAnalysis:
        source = self._require_source()
        asset = await source.fetch_quote(symbol, asset_type)
        series = await source.fetch_history(asset.symbol, asset_type)
        if not series:
            raise DataUnavailableError(asset.symbol, "empty price history")
        if not validate_series(series):
            logger.warning("History for %s has out-of-order or non-positive points", asset.symbol)
        analysis = self.analyze(asset, series)
        logger.info(
            "Analyzed %s: %s strength=%.0f confidence=%d",
            asset.symbol,
            analysis.signal.classification.value,
            analysis.signal.strength,
            analysis.signal.confidence,
        )
        return analysis

    async def analyze_many(
        self, targets: Iterable[tuple[str, AssetType]]
    ) -> list[AssetAnalysis]:
        targets = list(targets)
        results = await asyncio.gather(
            *(self.analyze_symbol(symbol, asset_type) for symbol, asset_type in targets),
            return_exceptions=True,
        )
        analyses: list[AssetAnalysis] = []
        for (symbol, _), result in zip(targets, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                logger.error("Analysis failed for %s: %s", symbol, result, exc_info=result)
                continue
            analyses.append(result)
        return analyses

    def _require_source(self) -> QuoteSource:
        if self._quote_source is None:
            raise RuntimeError("AnalysisOrchestrator was built without a quote source")
        return self._quote_source
