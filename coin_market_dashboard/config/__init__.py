"""Settings and fixed constants."""

from .settings import (
    API_KEY_HEADER,
    CHART_PRE_DELAY_MS,
    CHART_RANGES,
    COINS_PER_PAGE,
    FALLBACK_RANGE,
    MAX_PAGE,
    VS_CURRENCY,
    WATCHLIST_KEY,
    WATCHLIST_PAGE_SIZE,
    RetryPolicy,
    Settings,
)

__all__ = [
    "API_KEY_HEADER",
    "CHART_PRE_DELAY_MS",
    "CHART_RANGES",
    "COINS_PER_PAGE",
    "FALLBACK_RANGE",
    "MAX_PAGE",
    "VS_CURRENCY",
    "WATCHLIST_KEY",
    "WATCHLIST_PAGE_SIZE",
    "RetryPolicy",
    "Settings",
]
