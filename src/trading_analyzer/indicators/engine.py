"""Technical indicators over a price series, built on pandas.

Every function here is total: short or empty input yields a neutral or
fallback value instead of raising.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import pandas as pd

from trading_analyzer.config.models import IndicatorConfig
from trading_analyzer.data.models import (
    BollingerBands,
    Indicators,
    MacdValues,
    PricePoint,
)

logger = logging.getLogger(__name__)

NEUTRAL_RSI = 50.0
HISTOGRAM_TOLERANCE = 1e-9


def _as_float_series(values: Iterable[float] | pd.Series) -> pd.Series:
    if isinstance(values, pd.Series):
        return values.astype("float64").reset_index(drop=True)
    return pd.Series(list(values), dtype="float64")


def _last_or_zero(prices: pd.Series) -> float:
    return float(prices.iloc[-1]) if len(prices) else 0.0


def rsi(prices: Iterable[float] | pd.Series, period: int = 14) -> float:
    closes = _as_float_series(prices)
    if len(closes) < period + 1:
        return NEUTRAL_RSI

    delta = closes.diff().iloc[1:].reset_index(drop=True)
    gain = delta.clip(lower=0)
    loss = -delta.clip(upper=0)

    avg_gain = _wilder_average(gain, period)
    avg_loss = _wilder_average(loss, period)
    if avg_loss == 0:
        # flat series has neither gains nor losses
        return NEUTRAL_RSI if avg_gain == 0 else 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def _wilder_average(values: pd.Series, period: int) -> float:
    seeded = values.iloc[period - 1 :].copy()
    seeded.iloc[0] = values.iloc[:period].mean()
    return float(seeded.ewm(alpha=1 / period, adjust=False).mean().iloc[-1])


def ema(values: Iterable[float] | pd.Series, period: int) -> pd.Series:
    """SMA-seeded exponential moving average aligned to the input index.

    Positions before the seed (the first ``period - 1`` values) are NaN, and
    the whole result is NaN when fewer than ``period`` values are given.
    """
    series = _as_float_series(values)
    if period <= 0 or len(series) < period:
        return pd.Series(float("nan"), index=series.index, dtype="float64")

    k = 2.0 / (period + 1)
    current = float(series.iloc[:period].mean())
    smoothed = [float("nan")] * (period - 1) + [current]
    for value in series.iloc[period:].tolist():
        # prev + k * (value - prev) keeps a flat input exactly flat
        current = current + k * (value - current)
        smoothed.append(current)
    return pd.Series(smoothed, index=series.index, dtype="float64")


def macd(
    prices: Iterable[float] | pd.Series,
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> MacdValues:
    closes = _as_float_series(prices)
    if len(closes) < slow:
        return MacdValues(0.0, 0.0, 0.0)

    macd_line = (ema(closes, fast) - ema(closes, slow)).dropna()
    latest = float(macd_line.iloc[-1])
    if len(macd_line) < signal:
        return MacdValues(macd=latest, signal=0.0, histogram=0.0)

    signal_line = ema(macd_line, signal)
    latest_signal = float(signal_line.iloc[-1])
    histogram = latest - latest_signal
    # EMAs of a linear ramp converge exactly; drop the leftover float noise
    if abs(histogram) <= HISTOGRAM_TOLERANCE * max(1.0, abs(latest)):
        histogram = 0.0
    return MacdValues(macd=latest, signal=latest_signal, histogram=histogram)


def _trailing_window(prices: pd.Series, period: int) -> tuple[float, pd.Series]:
    # deviations from the newest price, so a flat window averages to it exactly
    window = prices.iloc[-period:]
    anchor = float(window.iloc[-1])
    return anchor, window - anchor


def sma(prices: Iterable[float] | pd.Series, period: int) -> float:
    closes = _as_float_series(prices)
    if period <= 0 or len(closes) < period:
        return _last_or_zero(closes)
    anchor, deviations = _trailing_window(closes, period)
    return anchor + float(deviations.mean())


def bollinger_bands(
    prices: Iterable[float] | pd.Series,
    period: int = 20,
    std_dev: float = 2.0,
    fallback_pct: float = 0.02,
) -> BollingerBands:
    closes = _as_float_series(prices)
    if period <= 0 or len(closes) < period:
        current = _last_or_zero(closes)
        return BollingerBands(
            upper=current * (1 + fallback_pct),
            middle=current,
            lower=current * (1 - fallback_pct),
        )

    anchor, deviations = _trailing_window(closes, period)
    middle = anchor + float(deviations.mean())
    sigma = float(deviations.std(ddof=0))
    return BollingerBands(
        upper=middle + std_dev * sigma,
        middle=middle,
        lower=middle - std_dev * sigma,
    )


def average_volume(series: Sequence[PricePoint]) -> float:
    if not series:
        return 0.0
    volumes = pd.Series([p.volume or 0 for p in series], dtype="float64")
    return float(volumes.mean())


@dataclass(slots=True)
class IndicatorEngine:
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    sma_windows: tuple[int, int, int] = (20, 50, 200)
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0
    bollinger_fallback_pct: float = 0.02

    @classmethod
    def from_config(cls, config: IndicatorConfig) -> "IndicatorEngine":
        return cls(
            rsi_period=config.rsi_period,
            macd_fast=config.macd_fast,
            macd_slow=config.macd_slow,
            macd_signal=config.macd_signal,
            sma_windows=(config.sma_short, config.sma_mid, config.sma_long),
            bollinger_period=config.bollinger_period,
            bollinger_std_dev=config.bollinger_std_dev,
            bollinger_fallback_pct=config.bollinger_fallback_pct,
        )

    def compute(self, series: Sequence[PricePoint]) -> Indicators:
        closes = pd.Series([p.price for p in series], dtype="float64")
        if len(closes) < max(self.sma_windows):
            logger.debug(
                "Short series (%d points), fallbacks apply for longer windows",
                len(closes),
            )

        short, mid, long_ = self.sma_windows
        return Indicators(
            rsi=rsi(closes, self.rsi_period),
            macd=macd(closes, self.macd_fast, self.macd_slow, self.macd_signal),
            sma20=sma(closes, short),
            sma50=sma(closes, mid),
            sma200=sma(closes, long_),
            bollinger=bollinger_bands(
                closes,
                self.bollinger_period,
                self.bollinger_std_dev,
                self.bollinger_fallback_pct,
            ),
            volume=average_volume(series),
        )
