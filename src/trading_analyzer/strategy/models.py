from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from trading_analyzer.data.models import Indicators


class SignalClass(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


@dataclass(slots=True, frozen=True)
class Probability:
    up: int
    down: int


@dataclass(slots=True, frozen=True)
class PriceTarget:
    bullish: float
    bearish: float


@dataclass(slots=True, frozen=True)
class ScoreState:
    """Running totals threaded through the factor evaluators."""

    buy_score: float = 0.0
    sell_score: float = 0.0
    reasoning: Tuple[str, ...] = field(default_factory=tuple)

    def buy(self, points: float, reason: str | None = None) -> "ScoreState":
        return replace(
            self,
            buy_score=self.buy_score + points,
            reasoning=self._with(reason),
        )

    def sell(self, points: float, reason: str | None = None) -> "ScoreState":
        return replace(
            self,
            sell_score=self.sell_score + points,
            reasoning=self._with(reason),
        )

    def _with(self, reason: str | None) -> Tuple[str, ...]:
        return self.reasoning + (reason,) if reason else self.reasoning


@dataclass(slots=True, frozen=True)
class TradingSignal:
    classification: SignalClass
    strength: float
    probability: Probability
    confidence: int
    reasoning: Tuple[str, ...]
    indicators: Indicators
    price_target: Optional[PriceTarget] = None
    buy_score: float = 0.0
    sell_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classification": self.classification.value,
            "strength": self.strength,
            "probability": {"up": self.probability.up, "down": self.probability.down},
            "confidence": self.confidence,
            "reasoning": list(self.reasoning),
            "indicators": self.indicators.to_dict(),
            "price_target": (
                {"bullish": self.price_target.bullish, "bearish": self.price_target.bearish}
                if self.price_target
                else None
            ),
            "buy_score": self.buy_score,
            "sell_score": self.sell_score,
        }
