"""Configuration models for the analysis pipeline and its collaborators."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Dict, List

from pydantic import BaseModel, Field, field_validator


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"


class IndicatorConfig(BaseModel):
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    sma_short: int = 20
    sma_mid: int = 50
    sma_long: int = 200
    bollinger_period: int = 20
    bollinger_std_dev: float = 2.0
    # synthetic band width used while the series is shorter than bollinger_period
    bollinger_fallback_pct: float = 0.02


class SignalConfig(BaseModel):
    rsi_oversold: float = 30.0
    rsi_overbought: float = 70.0
    rsi_neutral: float = 50.0
    rsi_extreme_score: float = 25.0
    rsi_bias_score: float = 10.0
    macd_score: float = 20.0
    trend_score: float = 15.0
    long_trend_score: float = 10.0
    bollinger_score: float = 15.0
    volume_score: float = 10.0
    volume_window: int = 5
    volume_multiplier: float = 1.2
    hysteresis: float = 15.0
    confidence_per_reason: float = 5.0
    confidence_floor: float = 50.0
    confidence_ceiling: float = 95.0
    target_scale: float = 0.1


class DataConfig(BaseModel):
    source: str = "mock"
    history_days: int = 100
    symbols: List[str] = Field(default_factory=lambda: ["AAPL:stock", "BITCOIN:crypto"])


class HttpConfig(BaseModel):
    base_url: str = "https://api.coingecko.com/api/v3"
    api_key: str | None = None
    timeout_seconds: float = 10.0
    retry_attempts: int = 3


class CurrencyConfig(BaseModel):
    default: Currency = Currency.USD
    rates: Dict[str, float] = Field(default_factory=lambda: {"USD": 1.0, "EUR": 0.92})
    symbols: Dict[str, str] = Field(default_factory=lambda: {"USD": "$", "EUR": "€"})

    @field_validator("default", mode="before")
    @classmethod
    def _upper(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class StorageConfig(BaseModel):
    watchlist_path: Path | None = None
    watchlist_key: str = "trading-analyzer-watchlist"
    currency_key: str = "trading-analyzer-currency"


class AppConfig(BaseModel):
    indicators: IndicatorConfig = Field(default_factory=IndicatorConfig)
    signal: SignalConfig = Field(default_factory=SignalConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    currency: CurrencyConfig = Field(default_factory=CurrencyConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    log_level: str = "INFO"


def default_config() -> AppConfig:
    return AppConfig()
