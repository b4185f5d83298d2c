import pytest

from coin_market_dashboard.listing import FilterOptions, apply_filters
from coin_market_dashboard.models import MarketListing


def coin(id, name, symbol, rank, price, cap, change, volume=1.0):
    return MarketListing.from_api({
        "id": id,
        "name": name,
        "symbol": symbol,
        "market_cap_rank": rank,
        "current_price": price,
        "market_cap": cap,
        "price_change_percentage_24h": change,
        "total_volume": volume,
    })


@pytest.fixture
def listings():
    return [
        coin("bitcoin", "Bitcoin", "btc", 1, 64000.0, 1.2e12, -1.0, 30e9),
        coin("ethereum", "Ethereum", "eth", 2, 3100.0, 3.7e11, 2.5, 12e9),
        coin("tether", "Tether", "usdt", 3, 1.0, 1.1e11, 0.0, 50e9),
        coin("bitcoin-cash", "Bitcoin Cash", "bch", 18, 450.0, 8.9e9, None, 0.3e9),
    ]


def ids(result):
    return [c.id for c in result]


def test_defaults_keep_rank_order(listings):
    assert ids(apply_filters(listings, FilterOptions())) == [
        "bitcoin", "ethereum", "tether", "bitcoin-cash",
    ]


def test_search_matches_name_or_symbol_case_insensitive(listings):
    assert ids(apply_filters(listings, FilterOptions(search="BITCOIN"))) == [
        "bitcoin", "bitcoin-cash",
    ]
    assert ids(apply_filters(listings, FilterOptions(search="usd"))) == ["tether"]


def test_range_bounds_are_inclusive(listings):
    options = FilterOptions(price_range=(450.0, 3100.0))

    assert ids(apply_filters(listings, options)) == ["ethereum", "bitcoin-cash"]


def test_missing_value_excluded_by_range(listings):
    options = FilterOptions(change_range=(-5.0, None))

    assert ids(apply_filters(listings, options)) == ["bitcoin", "ethereum", "tether"]


def test_sort_descending_puts_missing_last(listings):
    options = FilterOptions(sort_by="price_change_percentage_24h", sort_order="desc")

    assert ids(apply_filters(listings, options)) == [
        "ethereum", "tether", "bitcoin", "bitcoin-cash",
    ]


def test_unknown_sort_key_falls_back_to_rank(listings):
    options = FilterOptions(sort_by="name", sort_order="desc")

    assert ids(apply_filters(listings, options)) == [
        "bitcoin-cash", "tether", "ethereum", "bitcoin",
    ]


def test_empty_input():
    assert apply_filters([], FilterOptions(search="x")) == []


def test_active_filter_count():
    assert FilterOptions().active_filter_count() == 0
    assert FilterOptions(price_range=(1.0, None), change_range=(None, 5.0)).active_filter_count() == 2
