from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from trading_analyzer.data.models import Indicators, PricePoint

from .models import TradingSignal


class SignalStrategy(ABC):
    @abstractmethod
    def generate(
        self, series: Sequence[PricePoint], indicators: Indicators
    ) -> TradingSignal:
        raise NotImplementedError
