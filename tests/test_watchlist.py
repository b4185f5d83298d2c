import json

import pytest

from coin_market_dashboard.config import WATCHLIST_KEY
from coin_market_dashboard.data.cache import LocalStore
from coin_market_dashboard.data.watchlist import WatchlistStore
from coin_market_dashboard.models import MarketListing


@pytest.fixture
def store(settings) -> LocalStore:
    return LocalStore(settings.db_path)


def test_local_store_items(store):
    assert store.get_item("missing") is None

    store.set_item("a", "1")
    store.set_item("a", "2")
    store.set_item("b", "x")

    assert store.get_item("a") == "2"
    assert store.keys() == ["a", "b"]

    store.remove_item("a")
    assert store.get_item("a") is None


def test_toggle_round_trip_restores_original(store):
    watchlist = WatchlistStore(store)
    watchlist.add("bitcoin")
    before = store.get_item(WATCHLIST_KEY)

    assert watchlist.toggle("ethereum") is True
    assert "ethereum" in watchlist
    assert watchlist.toggle("ethereum") is False

    assert watchlist.ids == ("bitcoin",)
    assert store.get_item(WATCHLIST_KEY) == before


def test_changes_are_persisted_immediately(store):
    watchlist = WatchlistStore(store)
    watchlist.add("bitcoin")
    watchlist.add("solana")

    reloaded = WatchlistStore(store)
    assert reloaded.ids == ("bitcoin", "solana")
    assert json.loads(store.get_item(WATCHLIST_KEY)) == ["bitcoin", "solana"]


def test_add_is_idempotent(store):
    watchlist = WatchlistStore(store)
    watchlist.add("bitcoin")
    watchlist.add("bitcoin")

    assert len(watchlist) == 1


def test_stored_duplicates_collapse_on_load(store):
    store.set_item(WATCHLIST_KEY, json.dumps(["btc", "eth", "btc"]))

    watchlist = WatchlistStore(store)

    assert list(watchlist) == ["btc", "eth"]
    watchlist.remove("btc")
    assert "btc" not in watchlist


@pytest.mark.parametrize("raw", ["not json", '{"a": 1}'])
def test_corrupt_data_reads_as_empty(store, raw):
    store.set_item(WATCHLIST_KEY, raw)

    assert WatchlistStore(store).ids == ()


def test_select_keeps_listing_order(store):
    watchlist = WatchlistStore(store)
    watchlist.add("solana")
    watchlist.add("bitcoin")
    listings = [MarketListing.from_api({"id": i}) for i in ["bitcoin", "ethereum", "solana"]]

    assert [c.id for c in watchlist.select(listings)] == ["bitcoin", "solana"]


def test_sync_applies_table_edits(store):
    watchlist = WatchlistStore(store)
    watchlist.add("bitcoin")
    watchlist.add("dogecoin")

    changed = watchlist.sync({"bitcoin": False, "ethereum": True, "solana": False})

    assert changed == ["bitcoin", "ethereum"]
    assert watchlist.ids == ("dogecoin", "ethereum")
    assert WatchlistStore(store).ids == ("dogecoin", "ethereum")


def test_sync_without_changes_writes_nothing(store):
    watchlist = WatchlistStore(store)
    watchlist.add("bitcoin")

    assert watchlist.sync({"bitcoin": True, "ethereum": False}) == []
    assert watchlist.ids == ("bitcoin",)


def test_listing_table_star_column_reflects_watchlist(store):
    from coin_market_dashboard.ui.dashboard import listings_table

    watchlist = WatchlistStore(store)
    watchlist.add("ethereum")
    listings = [MarketListing.from_api({"id": i, "symbol": i[:3]}) for i in ["bitcoin", "ethereum"]]

    table = listings_table(listings, watchlist)

    assert table["Watch"].tolist() == [False, True]
    assert watchlist.sync(dict(zip([c.id for c in listings], [True, True]))) == ["bitcoin"]
    assert listings_table(listings, watchlist)["Watch"].tolist() == [True, True]
