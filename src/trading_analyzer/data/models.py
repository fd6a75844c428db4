from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple


class AssetType(str, Enum):
    STOCK = "stock"
    CRYPTO = "crypto"


@dataclass(slots=True, frozen=True)
class PricePoint:
    timestamp: int  # epoch millis
    price: float
    volume: Optional[int] = None


PriceSeries = Tuple[PricePoint, ...]


@dataclass(slots=True, frozen=True)
class Asset:
    symbol: str
    name: str
    type: AssetType
    price: float = 0.0
    change_24h: float = 0.0
    change_percent_24h: float = 0.0

    @property
    def key(self) -> tuple[str, AssetType]:
        return self.symbol, self.type

    def to_dict(self) -> Dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "type": self.type.value,
            "price": self.price,
            "change_24h": self.change_24h,
            "change_percent_24h": self.change_percent_24h,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Asset":
        return cls(
            symbol=str(payload["symbol"]),
            name=str(payload.get("name", payload["symbol"])),
            type=AssetType(payload["type"]),
            price=float(payload.get("price", 0.0)),
            change_24h=float(payload.get("change_24h", 0.0)),
            change_percent_24h=float(payload.get("change_percent_24h", 0.0)),
        )


@dataclass(slots=True, frozen=True)
class MacdValues:
    macd: float = 0.0
    signal: float = 0.0
    histogram: float = 0.0


@dataclass(slots=True, frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float


@dataclass(slots=True, frozen=True)
class Indicators:
    rsi: float
    macd: MacdValues
    sma20: float
    sma50: float
    sma200: float
    bollinger: BollingerBands
    volume: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def as_series(points: Sequence[PricePoint]) -> PriceSeries:
    """Freeze any sequence of points into the immutable series form."""
    return tuple(points)


def validate_series(series: Sequence[PricePoint]) -> bool:
    """Return True when timestamps never decrease and prices/volumes are in range.

    The indicator and signal engines accept anything; sources call this before
    handing data over.
    """
    previous: Optional[int] = None
    for point in series:
        if point.price <= 0:
            return False
        if point.volume is not None and point.volume < 0:
            return False
        if previous is not None and point.timestamp < previous:
            return False
        previous = point.timestamp
    return True


def series_to_dicts(series: Sequence[PricePoint]) -> list[Dict[str, Any]]:
    return [
        {"timestamp": p.timestamp, "price": p.price, "volume": p.volume}
        for p in series
    ]
