from __future__ import annotations

from typing import Mapping

from trading_analyzer.config.models import Currency, CurrencyConfig

__all__ = ["Currency", "CurrencyConverter"]


class CurrencyConverter:
    """USD-denominated amounts converted with fixed display rates."""

    def __init__(
        self,
        rates: Mapping[str, float] | None = None,
        symbols: Mapping[str, str] | None = None,
    ) -> None:
        defaults = CurrencyConfig()
        self._rates = {k.upper(): v for k, v in (rates or defaults.rates).items()}
        self._symbols = {k.upper(): v for k, v in (symbols or defaults.symbols).items()}

    @classmethod
    def from_config(cls, config: CurrencyConfig) -> "CurrencyConverter":
        return cls(rates=config.rates, symbols=config.symbols)

    def rate(self, currency: Currency) -> float:
        try:
            return self._rates[currency.value]
        except KeyError:
            raise ValueError(f"No exchange rate configured for {currency.value}") from None

    def convert(self, amount_usd: float, currency: Currency) -> float:
        return amount_usd * self.rate(currency)

    def symbol(self, currency: Currency) -> str:
        return self._symbols.get(currency.value, f"{currency.value} ")

    def format(self, amount_usd: float, currency: Currency) -> str:
        return f"{self.symbol(currency)}{self.convert(amount_usd, currency):.2f}"
