"""Rule-based scorer that turns indicators into a BUY/SELL/HOLD signal.

Six factor evaluators run as an ordered fold over a ``ScoreState``. The
volume factor reads the totals accumulated by the five before it, so the
order of ``SignalEngine.factors`` must not change.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import reduce
from typing import Callable, Sequence

from trading_analyzer.config.models import SignalConfig
from trading_analyzer.data.models import Indicators, PricePoint
from trading_analyzer.strategy.base import SignalStrategy
from trading_analyzer.strategy.models import (
    PriceTarget,
    Probability,
    ScoreState,
    SignalClass,
    TradingSignal,
)

logger = logging.getLogger(__name__)

REASON_OVERSOLD = "RSI indicates oversold condition (potential buy opportunity)"
REASON_OVERBOUGHT = "RSI indicates overbought condition (potential sell opportunity)"
REASON_MACD_BULLISH = "MACD shows bullish momentum"
REASON_MACD_BEARISH = "MACD shows bearish momentum"
REASON_TREND_BULLISH = "Price above key moving averages (bullish trend)"
REASON_TREND_BEARISH = "Price below key moving averages (bearish trend)"
REASON_LONG_BULLISH = "Price above 200-day SMA (long-term bullish)"
REASON_LONG_BEARISH = "Price below 200-day SMA (long-term bearish)"
REASON_LOWER_BAND = "Price near lower Bollinger Band (potential bounce)"
REASON_UPPER_BAND = "Price near upper Bollinger Band (potential pullback)"
REASON_VOLUME_BULLISH = "High volume confirms bullish move"
REASON_VOLUME_BEARISH = "High volume confirms bearish move"
REASON_MIXED = "Mixed signals - waiting for clearer trend"


@dataclass(slots=True, frozen=True)
class MarketView:
    """Inputs every factor reads; built once per ``generate`` call."""

    price: float
    indicators: Indicators
    recent_volume: float


Factor = Callable[[ScoreState, MarketView], ScoreState]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def recent_volume(series: Sequence[PricePoint], window: int) -> float:
    if window <= 0:
        return 0.0
    # divisor stays at `window` even when fewer points are available
    return sum(p.volume or 0 for p in series[-window:]) / window


class SignalEngine(SignalStrategy):
    def __init__(self, config: SignalConfig | None = None) -> None:
        self._cfg = config or SignalConfig()
        self.factors: tuple[Factor, ...] = (
            self._rsi_factor,
            self._macd_factor,
            self._trend_factor,
            self._long_trend_factor,
            self._bollinger_factor,
            self._volume_factor,
        )

    def generate(
        self, series: Sequence[PricePoint], indicators: Indicators
    ) -> TradingSignal:
        price = series[-1].price if series else 0.0
        view = MarketView(
            price=price,
            indicators=indicators,
            recent_volume=recent_volume(series, self._cfg.volume_window),
        )
        state = reduce(lambda acc, factor: factor(acc, view), self.factors, ScoreState())
        return self._finalize(state, price, indicators)

    def _finalize(
        self, state: ScoreState, price: float, indicators: Indicators
    ) -> TradingSignal:
        cfg = self._cfg
        buy, sell = state.buy_score, state.sell_score
        raw_strength = abs(buy - sell)

        classification = SignalClass.HOLD
        if buy > sell + cfg.hysteresis:
            classification = SignalClass.BUY
        elif sell > buy + cfg.hysteresis:
            classification = SignalClass.SELL

        total = (buy + sell) or 1
        probability = Probability(
            up=round_half_up(buy / total * 100),
            down=round_half_up(sell / total * 100),
        )

        confidence = raw_strength + len(state.reasoning) * cfg.confidence_per_reason
        confidence = min(cfg.confidence_ceiling, max(cfg.confidence_floor, confidence))

        move = raw_strength / 100 * cfg.target_scale
        target = PriceTarget(bullish=price * (1 + move), bearish=price * (1 - move))

        reasoning = state.reasoning or (REASON_MIXED,)
        logger.debug(
            "Scored buy=%.1f sell=%.1f -> %s", buy, sell, classification.value
        )
        return TradingSignal(
            classification=classification,
            strength=min(100.0, raw_strength),
            probability=probability,
            confidence=round_half_up(confidence),
            reasoning=reasoning,
            indicators=indicators,
            price_target=target,
            buy_score=buy,
            sell_score=sell,
        )

    def _rsi_factor(self, state: ScoreState, view: MarketView) -> ScoreState:
        cfg = self._cfg
        value = view.indicators.rsi
        if value < cfg.rsi_oversold:
            return state.buy(cfg.rsi_extreme_score, REASON_OVERSOLD)
        if value > cfg.rsi_overbought:
            return state.sell(cfg.rsi_extreme_score, REASON_OVERBOUGHT)
        if value < cfg.rsi_neutral:
            return state.buy(cfg.rsi_bias_score)
        return state.sell(cfg.rsi_bias_score)

    def _macd_factor(self, state: ScoreState, view: MarketView) -> ScoreState:
        m = view.indicators.macd
        if m.histogram > 0 and m.macd > m.signal:
            return state.buy(self._cfg.macd_score, REASON_MACD_BULLISH)
        if m.histogram < 0 and m.macd < m.signal:
            return state.sell(self._cfg.macd_score, REASON_MACD_BEARISH)
        return state

    def _trend_factor(self, state: ScoreState, view: MarketView) -> ScoreState:
        ind = view.indicators
        if view.price > ind.sma20 and ind.sma20 > ind.sma50:
            return state.buy(self._cfg.trend_score, REASON_TREND_BULLISH)
        if view.price < ind.sma20 and ind.sma20 < ind.sma50:
            return state.sell(self._cfg.trend_score, REASON_TREND_BEARISH)
        return state

    def _long_trend_factor(self, state: ScoreState, view: MarketView) -> ScoreState:
        if view.price > view.indicators.sma200:
            return state.buy(self._cfg.long_trend_score, REASON_LONG_BULLISH)
        return state.sell(self._cfg.long_trend_score, REASON_LONG_BEARISH)

    def _bollinger_factor(self, state: ScoreState, view: MarketView) -> ScoreState:
        bands = view.indicators.bollinger
        if view.price < bands.lower:
            return state.buy(self._cfg.bollinger_score, REASON_LOWER_BAND)
        if view.price > bands.upper:
            return state.sell(self._cfg.bollinger_score, REASON_UPPER_BAND)
        return state

    def _volume_factor(self, state: ScoreState, view: MarketView) -> ScoreState:
        if view.recent_volume > view.indicators.volume * self._cfg.volume_multiplier:
            if state.buy_score > state.sell_score:
                return state.buy(self._cfg.volume_score, REASON_VOLUME_BULLISH)
            return state.sell(self._cfg.volume_score, REASON_VOLUME_BEARISH)
        return state
