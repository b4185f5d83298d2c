"""Streamlit dashboard for cryptocurrency market data.

Three tabs:
- Markets: ranked listing with search, filters and sorting
- Coin: detail view with price history chart
- Watchlist: favorited coins, persisted locally
"""

import asyncio
import logging

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from coin_market_dashboard.config import (
    CHART_RANGES,
    COINS_PER_PAGE,
    MAX_PAGE,
    WATCHLIST_PAGE_SIZE,
    Settings,
)
from coin_market_dashboard.data import CoinGeckoFetcher, LocalStore, WatchlistStore
from coin_market_dashboard.data.errors import CoinGeckoError, PageLimitExceeded
from coin_market_dashboard.listing import SORT_FIELDS, FilterOptions, apply_filters
from coin_market_dashboard.models import CoinDetail, MarketListing, PriceSeries


logger = logging.getLogger(__name__)

CACHE_TTL = 60  # seconds


def format_currency(value: float | None) -> str:
    """Format a USD price, keeping precision for sub-dollar coins."""
    if value is None:
        return "N/A"
    if abs(value) >= 1:
        return f"${value:,.2f}"
    return f"${value:,.6f}"


def format_large_number(value: float | None) -> str:
    if value is None:
        return "N/A"
    for threshold, suffix in [(1e12, "T"), (1e9, "B"), (1e6, "M"), (1e3, "K")]:
        if abs(value) >= threshold:
            return f"${value / threshold:.2f}{suffix}"
    return f"${value:,.2f}"


def format_change(value: float | None) -> tuple[str, str]:
    """Format a percent change with color."""
    if value is None:
        return "N/A", "#6b7280"
    if value >= 0:
        return f"+{value:.2f}%", "#10b981"
    return f"{value:.2f}%", "#ef4444"


# =============================================================================
# DATA ACCESS
# =============================================================================

async def _call(operation: str, *args):
    async with CoinGeckoFetcher(Settings()) as fetcher:
        return await getattr(fetcher, operation)(*args)


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_markets(page: int, per_page: int = COINS_PER_PAGE) -> list[MarketListing]:
    return asyncio.run(_call("fetch_market_listing", page, per_page))


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_coin(coin_id: str) -> CoinDetail:
    return asyncio.run(_call("fetch_coin_detail", coin_id))


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def load_chart(coin_id: str, days: str) -> PriceSeries:
    return asyncio.run(_call("fetch_price_series", coin_id, days))


@st.cache_data(ttl=CACHE_TTL, show_spinner=False)
def search(query: str):
    return asyncio.run(_call("search_coins", query))


def get_watchlist() -> WatchlistStore:
    """One store per browser session, read once on first use."""
    if "watchlist" not in st.session_state:
        st.session_state["watchlist"] = WatchlistStore(LocalStore(Settings().db_path))
    return st.session_state["watchlist"]


def listings_table(listings: list[MarketListing], watchlist: WatchlistStore) -> pd.DataFrame:
    rows = []
    for coin in listings:
        change, _ = format_change(coin.price_change_percentage_24h)
        rows.append({
            "Watch": coin.id in watchlist,
            "#": coin.market_cap_rank,
            "Logo": coin.image,
            "Name": coin.name,
            "Symbol": coin.symbol.upper(),
            "Price": format_currency(coin.current_price),
            "24h": change,
            "Market Cap": format_large_number(coin.market_cap),
            "Volume": format_large_number(coin.total_volume),
        })
    return pd.DataFrame(rows)


def render_table(listings: list[MarketListing], watchlist: WatchlistStore, key: str) -> None:
    """Listing table whose star column toggles watchlist membership."""
    if not listings:
        st.info("No cryptocurrencies found. Try adjusting your search or filters.")
        return

    table = listings_table(listings, watchlist)
    # A fresh editor key after each toggle drops edits already applied
    version = st.session_state.get(f"{key}_version", 0)
    edited = st.data_editor(
        table,
        hide_index=True,
        use_container_width=True,
        disabled=[column for column in table.columns if column != "Watch"],
        column_config={
            "Watch": st.column_config.CheckboxColumn("★", help="Add to or remove from watchlist"),
            "Logo": st.column_config.ImageColumn(width="small"),
        },
        key=f"{key}_table_{version}",
    )

    selection = {coin.id: bool(watched) for coin, watched in zip(listings, edited["Watch"])}
    if watchlist.sync(selection):
        st.session_state[f"{key}_version"] = version + 1
        st.rerun()


# =============================================================================
# TAB 1: MARKETS
# =============================================================================

def render_filters() -> FilterOptions:
    """Render search/sort/range inputs and return the selected options."""
    col_search, col_sort, col_order = st.columns([3, 1, 1])
    with col_search:
        query = st.text_input("Search", placeholder="Search cryptocurrencies...")
    with col_sort:
        sort_by = st.selectbox(
            "Sort by", options=list(SORT_FIELDS), format_func=SORT_FIELDS.get
        )
    with col_order:
        sort_order = st.selectbox("Order", options=["asc", "desc"])

    def bounds(label: str, key: str) -> tuple[float | None, float | None]:
        col_min, col_max = st.columns(2)
        with col_min:
            low = st.number_input(f"{label} min", value=None, key=f"{key}_min")
        with col_max:
            high = st.number_input(f"{label} max", value=None, key=f"{key}_max")
        return low, high

    with st.expander("Advanced Filters"):
        options = FilterOptions(
            search=query,
            sort_by=sort_by,
            sort_order=sort_order,
            price_range=bounds("Price (USD)", "price"),
            market_cap_range=bounds("Market Cap (USD)", "mcap"),
            change_range=bounds("24h Change (%)", "change"),
        )

    active = options.active_filter_count()
    if active:
        st.caption(f"{active} filter(s) active")
    return options


def render_markets_tab(watchlist: WatchlistStore) -> None:
    page = int(st.number_input("Page", min_value=1, max_value=MAX_PAGE, value=1, step=1))
    options = render_filters()

    try:
        with st.spinner("Loading..."):
            listings = load_markets(page)
    except PageLimitExceeded as e:
        st.warning(str(e))
        return
    except CoinGeckoError as e:
        logger.error(f"Markets fetch failed: {e}")
        st.error(f"Failed to fetch cryptocurrency data. {e}")
        return

    st.session_state["listings"] = listings
    render_table(apply_filters(listings, options), watchlist, key="markets")
    st.caption(f"Page {page} of {MAX_PAGE}")


# =============================================================================
# TAB 2: COIN DETAIL
# =============================================================================

def render_chart(coin_id: str) -> None:
    """Render price history for the selected range."""
    days = st.radio(
        "Range",
        options=list(CHART_RANGES),
        index=1,
        format_func=CHART_RANGES.get,
        horizontal=True,
        label_visibility="collapsed",
    )

    try:
        with st.spinner("Loading chart..."):
            series = load_chart(coin_id, days)
    except CoinGeckoError as e:
        # Chart failures degrade quietly
        logger.error(f"Chart fetch failed: {e}")
        st.info("Chart data unavailable. Please try again later.")
        return

    if series.is_fallback:
        st.caption(f"24H data unavailable, showing {CHART_RANGES[series.days]} instead")

    df = series.to_frame()
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=df.index, y=df["price"],
        mode="lines", line=dict(color="#3b82f6", width=2),
        name="Price",
        hovertemplate="$%{y:,.4f}<extra></extra>",
    ))
    fig.update_layout(
        height=400, margin=dict(l=0, r=0, t=30, b=0),
        paper_bgcolor="rgba(0,0,0,0)", plot_bgcolor="rgba(0,0,0,0)",
        showlegend=False,
        xaxis=dict(
            showgrid=True, gridcolor="#1e293b",
            tickformat="%H:%M" if series.days == "1" else "%b %d",
        ),
        yaxis=dict(showgrid=True, gridcolor="#1e293b", tickprefix="$"),
        hovermode="x unified",
    )
    st.plotly_chart(fig, use_container_width=True, config={"displayModeBar": False})


def pick_coin() -> str | None:
    """Choose a coin from the loaded listing or a search."""
    listings: list[MarketListing] = st.session_state.get("listings", [])
    choices = {coin.id: f"{coin.name} ({coin.symbol.upper()})" for coin in listings}

    query = st.text_input("Find a coin", placeholder="e.g. solana")
    if query:
        try:
            results = search(query)
        except CoinGeckoError as e:
            st.error(f"Search failed. {e}")
            results = []
        choices = {r.id: f"{r.name} ({r.symbol.upper()})" for r in results} or choices

    if not choices:
        st.info("Load the Markets tab or search for a coin.")
        return None

    return st.selectbox("Coin", options=list(choices), format_func=choices.get)


def render_coin_tab(watchlist: WatchlistStore) -> None:
    coin_id = pick_coin()
    if coin_id is None:
        return

    try:
        with st.spinner("Loading..."):
            coin = load_coin(coin_id)
    except CoinGeckoError as e:
        logger.error(f"Coin detail fetch failed: {e}")
        st.error(f"Failed to fetch coin details. {e}")
        return

    md = coin.market_data
    col_title, col_watch = st.columns([4, 1])
    with col_title:
        rank = f"Rank #{coin.market_cap_rank}" if coin.market_cap_rank else ""
        st.subheader(f"{coin.name} ({coin.symbol.upper()}) {rank}")
    with col_watch:
        watching = coin.id in watchlist
        label = "Remove from Watchlist" if watching else "Add to Watchlist"
        if st.button(label, key=f"watch_{coin.id}"):
            watchlist.toggle(coin.id)
            st.rerun()

    change, _ = format_change(md.price_change_percentage_24h)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Price", format_currency(md.current_price), change)
    c2.metric("Market Cap", format_large_number(md.market_cap))
    c3.metric("24h Volume", format_large_number(md.total_volume))
    c4.metric("24h High / Low", f"{format_currency(md.high_24h)} / {format_currency(md.low_24h)}")

    render_chart(coin.id)

    s1, s2, s3 = st.columns(3)
    s1.metric("Circulating Supply", f"{md.circulating_supply:,.0f}" if md.circulating_supply else "N/A")
    s2.metric("Total Supply", f"{md.total_supply:,.0f}" if md.total_supply else "N/A")
    s3.metric("Max Supply", f"{md.max_supply:,.0f}" if md.max_supply else "∞")

    if coin.description:
        with st.expander(f"About {coin.name}"):
            st.markdown(coin.description, unsafe_allow_html=True)


# =============================================================================
# TAB 3: WATCHLIST
# =============================================================================

def render_watchlist_tab(watchlist: WatchlistStore) -> None:
    if not len(watchlist):
        st.info("Your watchlist is empty. Star coins in the Markets tab or add them from the Coin tab.")
        return

    try:
        with st.spinner("Loading..."):
            listings = watchlist.select(load_markets(1, WATCHLIST_PAGE_SIZE))
    except CoinGeckoError as e:
        logger.error(f"Watchlist fetch failed: {e}")
        st.error(f"Failed to fetch watchlist data. {e}")
        return

    render_table(listings, watchlist, key="watchlist")

    missing = [coin_id for coin_id in watchlist if coin_id not in {c.id for c in listings}]
    if missing:
        st.caption(f"Outside the top {WATCHLIST_PAGE_SIZE}: {', '.join(missing)}")

    to_remove = st.selectbox("Remove coin", options=list(watchlist), index=None)
    if to_remove and st.button("Remove"):
        watchlist.remove(to_remove)
        st.rerun()


# =============================================================================
# MAIN APP
# =============================================================================

def main() -> None:
    """Main dashboard entry point."""
    st.set_page_config(
        page_title="Crypto Market Dashboard",
        page_icon="",
        layout="wide",
    )

    st.markdown(
        """<div style="padding: 0.5rem 0 1rem 0; border-bottom: 1px solid #334155; margin-bottom: 1rem;">
            <h1 style="margin: 0; font-size: 1.5rem;">Crypto Market Dashboard</h1>
            <div style="color: #64748b; font-size: 0.75rem; margin-top: 0.25rem;">Data: CoinGecko</div>
        </div>""",
        unsafe_allow_html=True,
    )

    watchlist = get_watchlist()

    tab1, tab2, tab3 = st.tabs(["Markets", "Coin", f"Watchlist ({len(watchlist)})"])

    with tab1:
        render_markets_tab(watchlist)

    with tab2:
        render_coin_tab(watchlist)

    with tab3:
        render_watchlist_tab(watchlist)


if __name__ == "__main__":
    main()
