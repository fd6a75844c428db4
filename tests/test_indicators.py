"""Tests for the indicator engine."""

import math

import pytest

from trading_analyzer.config.models import IndicatorConfig
from trading_analyzer.data.models import PricePoint
from trading_analyzer.indicators.engine import (
    IndicatorEngine,
    average_volume,
    bollinger_bands,
    ema,
    macd,
    rsi,
    sma,
)


def zigzag(n):
    """Deterministic choppy series with both gains and losses."""
    return [100 + 10 * math.sin(i / 3) + (i % 7) - 3 for i in range(n)]


class TestRSI:
    """Tests for RSI calculation."""

    def test_short_series_is_neutral(self):
        assert rsi(list(range(1, 15)), 14) == 50.0
        assert rsi([], 14) == 50.0

    def test_flat_series_is_neutral(self):
        assert rsi([100.0] * 50) == 50.0

    def test_only_gains_is_100(self):
        assert rsi([float(i) for i in range(1, 40)]) == 100.0

    def test_only_losses_is_0(self):
        assert rsi([float(i) for i in range(40, 1, -1)]) == 0.0

    def test_wilder_smoothing(self):
        """Seed with simple means, then smooth the remaining delta."""
        # deltas +1, -1, +1 -> seed gain/loss 0.5/0.5, then 0.75/0.25 -> RS 3
        assert rsi([1.0, 2.0, 1.0, 2.0], period=2) == pytest.approx(75.0)

    @pytest.mark.parametrize("length", [15, 30, 100, 300])
    def test_bounded(self, length):
        value = rsi(zigzag(length))
        assert 0.0 <= value <= 100.0


class TestEMA:
    """Tests for the SMA-seeded EMA primitive."""

    def test_seed_and_recursion(self):
        result = ema([float(i) for i in range(1, 11)], 5)

        assert all(math.isnan(v) for v in result.iloc[:4])
        assert result.iloc[4] == pytest.approx(3.0)
        # k = 1/3: 3 + (6 - 3) / 3
        assert result.iloc[5] == pytest.approx(4.0)
        assert len(result) == 10

    def test_insufficient_data(self):
        result = ema([100.0, 101.0, 102.0], 10)
        assert len(result) == 3
        assert result.isna().all()

    def test_flat_input_stays_flat(self):
        result = ema([42.0] * 30, 12)
        assert (result.dropna() == 42.0).all()


class TestMACD:
    """Tests for MACD calculation."""

    def test_short_series_returns_zeros(self):
        result = macd([float(i) for i in range(25)])
        assert (result.macd, result.signal, result.histogram) == (0.0, 0.0, 0.0)

    def test_signal_undefined_until_enough_macd_values(self):
        result = macd([100 * 1.01**i for i in range(30)])
        assert result.macd > 0
        assert result.signal == 0.0
        assert result.histogram == 0.0

    def test_flat_series_is_zero(self):
        result = macd([100.0] * 300)
        assert result.macd == 0.0
        assert result.signal == 0.0
        assert result.histogram == 0.0

    def test_linear_ramp_has_zero_histogram(self):
        result = macd([100 + 200 * i / 249 for i in range(250)])
        assert result.macd > 0
        assert result.signal == pytest.approx(result.macd)
        assert result.histogram == 0.0

    def test_accelerating_rise_is_bullish(self):
        result = macd([100 * 1.004**i for i in range(250)])
        assert result.macd > result.signal
        assert result.histogram > 0
        assert result.histogram == pytest.approx(result.macd - result.signal)


class TestSMA:
    """Tests for SMA calculation."""

    def test_trailing_mean(self):
        assert sma([float(i) for i in range(1, 11)], 3) == pytest.approx(9.0)

    def test_constant_series_is_exact(self):
        assert sma([123.456] * 60, 50) == 123.456
        assert sma([100.0] * 300, 200) == 100.0

    def test_short_series_returns_last_price(self):
        assert sma([5.0, 6.0, 7.0], 20) == 7.0

    def test_empty_series_returns_zero(self):
        assert sma([], 20) == 0.0


class TestBollingerBands:
    """Tests for Bollinger Bands."""

    def test_population_std_dev(self):
        bands = bollinger_bands([float(i) for i in range(1, 21)], period=20, std_dev=2)
        sigma = math.sqrt(399 / 12)

        assert bands.middle == pytest.approx(10.5)
        assert bands.upper == pytest.approx(10.5 + 2 * sigma)
        assert bands.lower == pytest.approx(10.5 - 2 * sigma)

    def test_short_series_synthetic_band(self):
        bands = bollinger_bands([50.0] * 10)
        assert bands.middle == 50.0
        assert bands.upper == pytest.approx(51.0)
        assert bands.lower == pytest.approx(49.0)

    def test_empty_series(self):
        bands = bollinger_bands([])
        assert (bands.upper, bands.middle, bands.lower) == (0.0, 0.0, 0.0)

    def test_constant_series_collapses(self):
        bands = bollinger_bands([100.0] * 40)
        assert bands.upper == bands.middle == bands.lower == 100.0

    @pytest.mark.parametrize("length", [0, 1, 5, 19, 20, 21, 80, 300])
    def test_ordering(self, length):
        bands = bollinger_bands(zigzag(length))
        assert bands.upper >= bands.middle >= bands.lower


class TestAverageVolume:
    """Tests for mean volume."""

    def test_missing_volume_counts_as_zero(self):
        series = [
            PricePoint(timestamp=1, price=1.0, volume=100),
            PricePoint(timestamp=2, price=1.0, volume=None),
            PricePoint(timestamp=3, price=1.0, volume=200),
        ]
        assert average_volume(series) == pytest.approx(100.0)

    def test_empty_series(self):
        assert average_volume([]) == 0.0


class TestIndicatorEngine:
    """Tests for the composed engine."""

    def test_fallbacks_on_ten_points(self, make_series):
        prices = [10.0 + i for i in range(10)]
        series = make_series(prices, [1000] * 10)
        result = IndicatorEngine().compute(series)
        last = prices[-1]

        assert result.rsi == 50.0
        assert (result.macd.macd, result.macd.signal, result.macd.histogram) == (0.0, 0.0, 0.0)
        assert result.sma20 == last
        assert result.sma50 == last
        assert result.sma200 == last
        assert result.bollinger.middle == last
        assert result.bollinger.upper == pytest.approx(last * 1.02)
        assert result.bollinger.lower == pytest.approx(last * 0.98)
        assert result.volume == 1000.0

    def test_empty_series(self):
        result = IndicatorEngine().compute(())
        assert result.rsi == 50.0
        assert result.sma20 == result.sma50 == result.sma200 == 0.0
        assert result.volume == 0.0

    def test_from_config(self):
        engine = IndicatorEngine.from_config(IndicatorConfig(rsi_period=7, sma_long=100))
        assert engine.rsi_period == 7
        assert engine.sma_windows == (20, 50, 100)

    def test_does_not_mutate_input(self, make_series):
        series = make_series(zigzag(250), [1000] * 250)
        snapshot = tuple(series)
        IndicatorEngine().compute(series)
        assert series == snapshot

    def test_reproducible(self, make_series):
        series = make_series(zigzag(250), list(range(250)))
        engine = IndicatorEngine()
        assert engine.compute(series) == engine.compute(series)
