"""Tests for repositories, the watchlist store and currency preference."""

import json

import pytest

from trading_analyzer.currency.converter import Currency
from trading_analyzer.data.models import Asset, AssetType
from trading_analyzer.watchlist.repository import InMemoryRepository, JsonFileRepository
from trading_analyzer.watchlist.store import (
    WATCHLIST_KEY,
    CurrencyPreference,
    WatchlistStore,
)

AAPL = Asset("AAPL", "Apple", AssetType.STOCK, 175.5, 1.2, 0.7)
BTC = Asset("BITCOIN", "Bitcoin", AssetType.CRYPTO, 43250.0, -100.0, -0.2)


@pytest.fixture(params=["memory", "file"])
def repository(request, tmp_path):
    if request.param == "memory":
        return InMemoryRepository()
    return JsonFileRepository(tmp_path / "store.json")


class TestRepositories:
    """Both repositories honour the same get/list/put/delete contract."""

    def test_put_get_delete(self, repository):
        assert repository.get("missing") is None
        repository.put("a", {"x": 1})
        repository.put("b", [1, 2])

        assert repository.get("a") == {"x": 1}
        assert sorted(k for k, _ in repository.list()) == ["a", "b"]

        repository.delete("a")
        repository.delete("a")
        assert repository.get("a") is None

    def test_file_repository_persists(self, tmp_path):
        path = tmp_path / "nested" / "store.json"
        JsonFileRepository(path).put("k", "v")

        assert JsonFileRepository(path).get("k") == "v"
        assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "store.json"
        path.write_text("{not json", encoding="utf-8")

        repo = JsonFileRepository(path)
        assert repo.get("anything") is None
        assert repo.list() == []


class TestWatchlistStore:
    """Tests for watchlist semantics."""

    def test_add_is_idempotent(self, repository):
        store = WatchlistStore(repository)

        assert store.add(AAPL) is True
        assert store.add(AAPL) is False
        assert store.list() == [AAPL]

    def test_key_is_symbol_and_type(self, repository):
        store = WatchlistStore(repository)
        store.add(AAPL)
        store.add(Asset("AAPL", "Apple token", AssetType.CRYPTO))

        assert len(store.list()) == 2
        assert store.contains("AAPL", AssetType.STOCK)
        assert store.contains("AAPL", AssetType.CRYPTO)

    def test_remove(self, repository):
        store = WatchlistStore(repository)
        store.add(AAPL)
        store.add(BTC)

        assert store.remove("AAPL", AssetType.STOCK) is True
        assert store.remove("AAPL", AssetType.STOCK) is False
        assert store.list() == [BTC]
        assert not store.contains("AAPL", AssetType.STOCK)

    def test_preserves_insertion_order(self, repository):
        store = WatchlistStore(repository)
        store.add(BTC)
        store.add(AAPL)
        assert [a.symbol for a in store.list()] == ["BITCOIN", "AAPL"]

    def test_malformed_entries_are_skipped(self):
        repo = InMemoryRepository({WATCHLIST_KEY: [AAPL.to_dict(), {"name": "no symbol"}]})
        assert WatchlistStore(repo).list() == [AAPL]

    def test_non_list_value_is_empty(self):
        repo = InMemoryRepository({WATCHLIST_KEY: "oops"})
        assert WatchlistStore(repo).list() == []


class TestCurrencyPreference:
    """Tests for the stored display currency."""

    def test_defaults_to_usd(self, repository):
        assert CurrencyPreference(repository).get() == Currency.USD

    def test_set_and_get(self, repository):
        pref = CurrencyPreference(repository)
        pref.set(Currency.EUR)
        assert pref.get() == Currency.EUR

    def test_unknown_value_falls_back(self):
        repo = InMemoryRepository({"trading-analyzer-currency": "GBP"})
        assert CurrencyPreference(repo).get() == Currency.USD
