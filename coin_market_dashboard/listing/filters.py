"""Search, range filters and sorting for a fetched markets page."""

from dataclasses import asdict, dataclass
from typing import Sequence

import pandas as pd

from coin_market_dashboard.models import MarketListing


# Sortable columns and their display labels
SORT_FIELDS: dict[str, str] = {
    "market_cap_rank": "Rank",
    "current_price": "Price",
    "price_change_percentage_24h": "24h Change",
    "market_cap": "Market Cap",
    "total_volume": "Volume",
}
DEFAULT_SORT = "market_cap_rank"

Range = tuple[float | None, float | None]


@dataclass
class FilterOptions:
    """User-selected search, sort and range criteria."""

    search: str = ""
    sort_by: str = DEFAULT_SORT
    sort_order: str = "asc"  # asc or desc
    price_range: Range = (None, None)
    market_cap_range: Range = (None, None)
    change_range: Range = (None, None)

    def active_filter_count(self) -> int:
        """Number of range filters with at least one bound set."""
        ranges = [self.price_range, self.market_cap_range, self.change_range]
        return sum(1 for low, high in ranges if low is not None or high is not None)


def listings_to_frame(listings: Sequence[MarketListing]) -> pd.DataFrame:
    """One row per listing, indexed by position in the input."""
    if not listings:
        return pd.DataFrame(columns=list(MarketListing.__dataclass_fields__))
    return pd.DataFrame([asdict(coin) for coin in listings])


def _within(series: pd.Series, bounds: Range) -> pd.Series:
    low, high = bounds
    mask = pd.Series(True, index=series.index)
    values = pd.to_numeric(series, errors="coerce")
    if low is not None:
        mask &= values >= low
    if high is not None:
        mask &= values <= high
    return mask


def apply_filters(
    listings: Sequence[MarketListing], options: FilterOptions
) -> list[MarketListing]:
    """
    Filter and sort listings on the client side.

    Search matches name or symbol, case-insensitive. Range bounds are
    inclusive; a coin missing the filtered figure is dropped. Sorting is
    stable and puts missing values last.
    """
    df = listings_to_frame(listings)
    if df.empty:
        return []

    mask = pd.Series(True, index=df.index)

    query = options.search.strip()
    if query:
        in_name = df["name"].str.contains(query, case=False, regex=False, na=False)
        in_symbol = df["symbol"].str.contains(query, case=False, regex=False, na=False)
        mask &= in_name | in_symbol

    mask &= _within(df["current_price"], options.price_range)
    mask &= _within(df["market_cap"], options.market_cap_range)
    mask &= _within(df["price_change_percentage_24h"], options.change_range)

    df = df[mask]

    sort_by = options.sort_by if options.sort_by in SORT_FIELDS else DEFAULT_SORT
    df = df.assign(_key=pd.to_numeric(df[sort_by], errors="coerce")).sort_values(
        "_key",
        ascending=options.sort_order != "desc",
        kind="stable",
        na_position="last",
    )

    return [listings[i] for i in df.index]
