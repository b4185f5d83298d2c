"""Client-side listing filters."""

from coin_market_dashboard.listing.filters import FilterOptions, SORT_FIELDS, apply_filters

__all__ = ["FilterOptions", "SORT_FIELDS", "apply_filters"]
