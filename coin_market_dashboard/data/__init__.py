"""Data fetching and local storage."""

from .coingecko_fetcher import CoinGeckoFetcher
from .executor import RequestExecutor
from .cache import LocalStore
from .watchlist import WatchlistStore

__all__ = ["CoinGeckoFetcher", "RequestExecutor", "LocalStore", "WatchlistStore"]
