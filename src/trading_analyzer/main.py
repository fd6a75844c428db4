from __future__ import annotations

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from trading_analyzer.analysis.orchestrator import AnalysisOrchestrator
from trading_analyzer.config.loader import load_config
from trading_analyzer.config.models import AppConfig
from trading_analyzer.currency.converter import Currency, CurrencyConverter
from trading_analyzer.data.coingecko import CoinGeckoQuoteSource
from trading_analyzer.data.models import AssetType
from trading_analyzer.data.provider_base import QuoteSource, TimeProvider
from trading_analyzer.data.providers import MockQuoteSource, SystemTimeProvider
from trading_analyzer.errors import ConfigError
from trading_analyzer.indicators.engine import IndicatorEngine
from trading_analyzer.monitoring.reporter import AnalysisReporter
from trading_analyzer.strategy.signal_engine import SignalEngine
from trading_analyzer.watchlist.repository import JsonFileRepository, KeyValueRepository
from trading_analyzer.watchlist.store import CurrencyPreference, WatchlistStore

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path.home() / ".trading-analyzer" / "store.json"


def parse_target(raw: str) -> tuple[str, AssetType]:
    symbol, _, kind = raw.partition(":")
    return symbol.strip().upper(), AssetType(kind.strip().lower() or "stock")


def resolve_targets(
    requested: Sequence[str], store: WatchlistStore, config: AppConfig
) -> list[tuple[str, AssetType]]:
    if requested:
        return [parse_target(t) for t in requested]
    watched = [a.key for a in store.list()]
    if watched:
        return watched
    logger.info("Watchlist empty, analyzing configured symbols")
    return [parse_target(t) for t in config.data.symbols]


def build_quote_source(config: AppConfig, time_provider: TimeProvider) -> QuoteSource:
    if config.data.source == "coingecko":
        return CoinGeckoQuoteSource(config.http, history_days=config.data.history_days)
    if config.data.source != "mock":
        raise ValueError(f"Unknown data source: {config.data.source}")
    return MockQuoteSource(time_provider=time_provider, history_days=config.data.history_days)


def build_repository(config: AppConfig) -> KeyValueRepository:
    return JsonFileRepository(config.storage.watchlist_path or DEFAULT_STORE_PATH)


async def run_analyze(
    config: AppConfig,
    targets: Sequence[tuple[str, AssetType]],
    reporter: AnalysisReporter,
    as_json: bool = False,
) -> int:
    time_provider = SystemTimeProvider()
    source = build_quote_source(config, time_provider)
    orchestrator = AnalysisOrchestrator(
        indicator_engine=IndicatorEngine.from_config(config.indicators),
        signal_engine=SignalEngine(config.signal),
        time_provider=time_provider,
        quote_source=source,
    )
    try:
        analyses = await orchestrator.analyze_many(targets)
    finally:
        await source.aclose()

    if as_json:
        print(json.dumps([a.to_dict() for a in analyses], indent=2, ensure_ascii=False))
    else:
        for analysis in analyses:
            reporter.log_analysis(analysis)
    return 0 if len(analyses) == len(targets) else 1


async def run_watchlist_add(
    config: AppConfig, store: WatchlistStore, symbol: str, asset_type: AssetType
) -> bool:
    source = build_quote_source(config, SystemTimeProvider())
    try:
        asset = await source.fetch_quote(symbol, asset_type)
    finally:
        await source.aclose()
    return store.add(asset)


async def run_search(config: AppConfig, query: str, asset_type: AssetType, reporter: AnalysisReporter) -> None:
    source = build_quote_source(config, SystemTimeProvider())
    try:
        results = await source.search(query, asset_type)
    finally:
        await source.aclose()
    reporter.log_search(query, results)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Technical analysis and trading signals")
    parser.add_argument("--config", type=str, default=None, help="Path to YAML/TOML/JSON config")
    parser.add_argument(
        "--currency",
        type=str.upper,
        choices=[c.value for c in Currency],
        default=None,
        help="Display currency",
    )
    parser.add_argument("--log-level", type=str, default=None)
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Analyze symbols (SYMBOL[:stock|crypto])")
    analyze.add_argument("targets", nargs="*", help="Defaults to the watchlist, then the config symbols")
    analyze.add_argument("--json", action="store_true", help="Print analyses as JSON")

    search = sub.add_parser("search", help="Search the asset universe")
    search.add_argument("query", nargs="?", default="")
    search.add_argument("--type", choices=[t.value for t in AssetType], default="stock")

    watch = sub.add_parser("watchlist", help="Manage the watchlist")
    watch_sub = watch.add_subparsers(dest="action", required=True)
    watch_sub.add_parser("list")
    for action in ("add", "remove"):
        cmd = watch_sub.add_parser(action)
        cmd.add_argument("symbol")
        cmd.add_argument("--type", choices=[t.value for t in AssetType], default="stock")

    currency = sub.add_parser("currency", help="Show or set the display currency")
    currency.add_argument("value", nargs="?", type=str.upper, choices=[c.value for c in Currency])
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = load_config(args.config)
    except (ConfigError, ValidationError) as exc:
        parser.error(f"invalid configuration: {exc}")
    logging.basicConfig(
        level=(args.log_level or config.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )

    repository = build_repository(config)
    store = WatchlistStore(repository, key=config.storage.watchlist_key)
    preference = CurrencyPreference(
        repository,
        key=config.storage.currency_key,
        default=config.currency.default,
    )
    currency = Currency(args.currency) if args.currency else preference.get()
    reporter = AnalysisReporter(CurrencyConverter.from_config(config.currency), currency)

    if args.command == "analyze":
        try:
            targets = resolve_targets(args.targets, store, config)
        except ValueError as exc:
            parser.error(f"invalid target: {exc}")
        return asyncio.run(run_analyze(config, targets, reporter, as_json=args.json))

    if args.command == "search":
        asyncio.run(run_search(config, args.query, AssetType(args.type), reporter))
        return 0

    if args.command == "watchlist":
        if args.action == "list":
            reporter.log_watchlist(store.list())
            return 0
        symbol, asset_type = args.symbol.upper(), AssetType(args.type)
        if args.action == "add":
            added = asyncio.run(run_watchlist_add(config, store, symbol, asset_type))
            reporter.log_event(f"{symbol} {'added' if added else 'already in watchlist'}")
        else:
            removed = store.remove(symbol, asset_type)
            reporter.log_event(f"{symbol} {'removed' if removed else 'not in watchlist'}")
        return 0

    if args.value:
        preference.set(Currency(args.value))
    reporter.log_event(f"Display currency: {preference.get().value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
