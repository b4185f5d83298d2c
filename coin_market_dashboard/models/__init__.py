"""Market data entities."""

from .market_data import (
    CoinDetail,
    CoinImage,
    MarketListing,
    MarketSnapshot,
    PriceSeries,
    SearchResult,
)

__all__ = [
    "CoinDetail",
    "CoinImage",
    "MarketListing",
    "MarketSnapshot",
    "PriceSeries",
    "SearchResult",
]
