"""Console rendering of analyses and watchlists using Rich."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from trading_analyzer.analysis.orchestrator import AssetAnalysis
from trading_analyzer.currency.converter import Currency, CurrencyConverter
from trading_analyzer.data.models import Asset
from trading_analyzer.strategy.models import SignalClass


class AnalysisReporter:
    _LEVEL_STYLES = {
        "info": "cyan",
        "success": "green",
        "warning": "yellow",
        "error": "red",
    }
    _SIGNAL_STYLES = {
        SignalClass.BUY: "green",
        SignalClass.SELL: "red",
        SignalClass.HOLD: "yellow",
    }

    def __init__(
        self,
        converter: CurrencyConverter | None = None,
        currency: Currency = Currency.USD,
        console: Console | None = None,
    ) -> None:
        self._console = console or Console()
        self._converter = converter or CurrencyConverter()
        self._currency = currency

    def log_event(
        self,
        message: str,
        *,
        level: str = "info",
        details: Mapping[str, Any] | None = None,
    ) -> None:
        style = self._LEVEL_STYLES.get(level, "white")
        if details:
            table = Table.grid(expand=True)
            table.add_column(justify="right", style="bold")
            table.add_column(ratio=1)
            for key, value in details.items():
                table.add_row(str(key), str(value))
            self._console.print(Panel(table, title=f"[bold]{message}", border_style=style))
            return
        self._console.print(f"[bold {style}]{message}[/bold {style}]")

    def _money(self, amount_usd: float) -> str:
        return self._converter.format(amount_usd, self._currency)

    def log_analysis(self, analysis: AssetAnalysis) -> None:
        asset = analysis.asset
        signal = analysis.signal
        ind = analysis.indicators
        style = self._SIGNAL_STYLES[signal.classification]

        table = Table(title=f"{asset.symbol} - {asset.name}", show_lines=True)
        table.add_column("Field")
        table.add_column("Value")
        table.add_row("Signal", f"[bold {style}]{signal.classification.value}[/bold {style}]")
        table.add_row("Price", self._money(asset.price))
        table.add_row("24h", f"{asset.change_percent_24h:+.2f}%")
        table.add_row("Strength", f"{signal.strength:.0f}")
        table.add_row("Confidence", f"{signal.confidence}%")
        table.add_row(
            "Probability",
            f"up {signal.probability.up}% / down {signal.probability.down}%",
        )
        if signal.price_target:
            table.add_row(
                "Targets",
                f"{self._money(signal.price_target.bullish)} / "
                f"{self._money(signal.price_target.bearish)}",
            )
        table.add_row("RSI", f"{ind.rsi:.1f}")
        table.add_row("MACD Hist", f"{ind.macd.histogram:.2f}")
        table.add_row("SMA 20/50/200", " / ".join(self._money(v) for v in (ind.sma20, ind.sma50, ind.sma200)))
        table.add_row(
            "Bollinger",
            f"{self._money(ind.bollinger.lower)} - {self._money(ind.bollinger.upper)}",
        )
        table.add_row("Reasoning", "\n".join(f"- {r}" for r in signal.reasoning))
        self._console.print(table)

    def log_watchlist(self, assets: Iterable[Asset]) -> None:
        assets = list(assets)
        if not assets:
            self.log_event("Watchlist is empty", level="warning")
            return
        table = Table(title="Watchlist")
        for column in ("Symbol", "Name", "Type", "Price", "24h"):
            table.add_column(column)
        for asset in assets:
            table.add_row(
                asset.symbol,
                asset.name,
                asset.type.value,
                self._money(asset.price),
                f"{asset.change_percent_24h:+.2f}%",
            )
        self._console.print(table)

    def log_search(self, query: str, assets: Iterable[Asset]) -> None:
        table = Table(title=f"Search results for {query!r}")
        table.add_column("Symbol")
        table.add_column("Name")
        table.add_column("Type")
        for asset in assets:
            table.add_row(asset.symbol, asset.name, asset.type.value)
        self._console.print(table)
