"""CoinGecko endpoint operations: markets, coin detail, charts and search."""

import asyncio
import logging
from urllib.parse import quote, urlencode

from coin_market_dashboard.config import (
    CHART_PRE_DELAY_MS,
    CHART_RANGES,
    COINS_PER_PAGE,
    FALLBACK_RANGE,
    MAX_PAGE,
    VS_CURRENCY,
    Settings,
)
from coin_market_dashboard.data.errors import (
    ChartFallbackExhausted,
    CoinGeckoError,
    EmptyChartData,
    InvalidPage,
    PageLimitExceeded,
    UnexpectedPayload,
)
from coin_market_dashboard.data.executor import RequestExecutor, Sleep
from coin_market_dashboard.models import (
    CoinDetail,
    MarketListing,
    PriceSeries,
    SearchResult,
)


logger = logging.getLogger(__name__)


def chart_interval(days: str) -> str:
    """Hourly points for the 24h window, daily points otherwise."""
    return "hourly" if days == "1" else "daily"


class CoinGeckoFetcher:
    """Typed access to the CoinGecko endpoints used by the dashboard."""

    def __init__(
        self,
        settings: Settings | None = None,
        executor: RequestExecutor | None = None,
        sleep: Sleep | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self._sleep = sleep or asyncio.sleep
        self.executor = executor or RequestExecutor(self.settings, sleep=self._sleep)

    async def close(self) -> None:
        await self.executor.close()

    async def __aenter__(self) -> "CoinGeckoFetcher":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def fetch_market_listing(
        self, page: int = 1, per_page: int = COINS_PER_PAGE
    ) -> list[MarketListing]:
        """
        Fetch one page of coins ordered by market cap.

        Raises:
            InvalidPage: page is below 1 (no request is made)
            PageLimitExceeded: page is beyond MAX_PAGE (no request is made)
        """
        if page < 1:
            raise InvalidPage(page)
        if page > MAX_PAGE:
            raise PageLimitExceeded(page, MAX_PAGE)

        logger.info(f"Fetching markets page {page} ({per_page} per page)...")
        params = {
            "vs_currency": VS_CURRENCY,
            "order": "market_cap_desc",
            "per_page": per_page,
            "page": page,
            "sparkline": "false",
            "price_change_percentage": "24h",
        }
        endpoint = f"/coins/markets?{urlencode(params)}"
        data = await self.executor.execute(endpoint)
        if not isinstance(data, list) or not all(
            isinstance(row, dict) and "id" in row for row in data
        ):
            raise UnexpectedPayload(endpoint, "a list of coins", data)
        return [MarketListing.from_api(row) for row in data]

    async def fetch_coin_detail(self, coin_id: str) -> CoinDetail:
        logger.info(f"Fetching detail for {coin_id}...")
        endpoint = f"/coins/{quote(coin_id, safe='')}"
        data = await self.executor.execute(endpoint)
        if not isinstance(data, dict) or "id" not in data:
            raise UnexpectedPayload(endpoint, "a coin record", data)
        return CoinDetail.from_api(data)

    async def _fetch_chart(self, coin_id: str, days: str, requested_days: str) -> PriceSeries:
        """Single chart request for one window; empty data counts as failure."""
        await self._sleep(CHART_PRE_DELAY_MS / 1000)

        params = {
            "vs_currency": VS_CURRENCY,
            "days": days,
            "interval": chart_interval(days),
        }
        data = await self.executor.execute(
            f"/coins/{quote(coin_id, safe='')}/market_chart?{urlencode(params)}"
        )
        series = PriceSeries.from_api(coin_id, days, data, requested_days=requested_days)
        if series.is_empty:
            raise EmptyChartData(coin_id, days)
        return series

    async def fetch_price_series(self, coin_id: str, days: str = "7") -> PriceSeries:
        """
        Fetch price history, falling back from 24h to 7 days once.

        The 24h/hourly query is the least reliable one upstream. When it fails
        or comes back empty the 7-day window is requested instead. No
        further window is tried after that.

        Args:
            coin_id: CoinGecko coin id (e.g. "bitcoin")
            days: Look-back window, one of CHART_RANGES

        Returns:
            PriceSeries; check ``is_fallback`` to see if the window changed

        Raises:
            EmptyChartData / TransientNetworkFailure / RateLimited: request failed
            ChartFallbackExhausted: 24h request and its 7-day fallback both failed
        """
        days = str(days)
        if days not in CHART_RANGES:
            raise ValueError(
                f"Unsupported chart range {days!r}; expected one of {list(CHART_RANGES)}"
            )

        logger.info(f"Fetching {days}d chart for {coin_id}...")
        try:
            return await self._fetch_chart(coin_id, days, requested_days=days)
        except CoinGeckoError as e:
            if days != "1":
                raise
            primary_error = e

        logger.warning(
            f"24h chart for {coin_id} failed ({primary_error}), "
            f"trying {FALLBACK_RANGE}d range instead"
        )
        try:
            return await self._fetch_chart(coin_id, FALLBACK_RANGE, requested_days=days)
        except CoinGeckoError as e:
            raise ChartFallbackExhausted(coin_id, primary_error, e) from e

    async def search_coins(self, query: str) -> list[SearchResult]:
        """Search coins by name or symbol."""
        query = query.strip()
        if not query:
            return []

        logger.info(f"Searching coins for {query!r}...")
        endpoint = f"/search?{urlencode({'query': query})}"
        data = await self.executor.execute(endpoint)
        if not isinstance(data, dict):
            raise UnexpectedPayload(endpoint, "a search result object", data)
        return [
            SearchResult.from_api(coin)
            for coin in data.get("coins") or []
            if isinstance(coin, dict) and "id" in coin
        ]


def _fmt(value: float | None, fmt: str = ",.2f") -> str:
    return "N/A" if value is None else format(value, fmt)


async def _run(args) -> None:
    async with CoinGeckoFetcher() as fetcher:
        if args.coin:
            detail = await fetcher.fetch_coin_detail(args.coin)
            md = detail.market_data
            print(f"\n{detail.name} ({detail.symbol.upper()}) | Rank #{detail.market_cap_rank}")
            print("-" * 60)
            print(f"  Price:       ${_fmt(md.current_price)}")
            print(f"  Market cap:  ${_fmt(md.market_cap, ',.0f')}")
            print(f"  Volume 24h:  ${_fmt(md.total_volume, ',.0f')}")
            print(f"  Change 24h:  {_fmt(md.price_change_percentage_24h)}%")

        if args.chart:
            series = await fetcher.fetch_price_series(args.chart, args.days)
            df = series.to_frame()
            label = f"{series.days}d" + (" (fallback)" if series.is_fallback else "")
            print(f"\n{args.chart} chart {label}: {len(df)} points")
            print(f"  First: {df.index[0]} ${_fmt(df['price'].iloc[0])}")
            print(f"  Last:  {df.index[-1]} ${_fmt(df['price'].iloc[-1])}")
            print(f"  Range: ${_fmt(df['price'].min())} - ${_fmt(df['price'].max())}")

        if args.search:
            results = await fetcher.search_coins(args.search)
            print(f"\nSearch results for {args.search!r}:")
            for result in results[:20]:
                rank = result.market_cap_rank or "-"
                print(f"  {result.id:30} | {result.symbol:8} | #{rank}")

        if args.markets or not (args.coin or args.chart or args.search):
            coins = await fetcher.fetch_market_listing(args.markets or 1)
            print("\nMarkets:")
            print("-" * 70)
            for coin in coins:
                change = _fmt(coin.price_change_percentage_24h, "+.2f")
                print(
                    f"  #{coin.market_cap_rank or '-':<5} {coin.symbol.upper():8} "
                    f"${_fmt(coin.current_price):>14} | {change:>7}%"
                )


def main() -> None:
    """CLI entry point."""
    import argparse
    import sys

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Fetch CoinGecko market data")
    parser.add_argument(
        "--markets",
        type=int,
        metavar="PAGE",
        help=f"Show a markets listing page (1-{MAX_PAGE})",
    )
    parser.add_argument(
        "--coin",
        type=str,
        help="Show detail for a coin id",
    )
    parser.add_argument(
        "--chart",
        type=str,
        help="Show price history for a coin id",
    )
    parser.add_argument(
        "--days",
        type=str,
        choices=list(CHART_RANGES),
        default="7",
        help="Chart look-back window in days",
    )
    parser.add_argument(
        "--search",
        type=str,
        help="Search coins by name or symbol",
    )
    args = parser.parse_args()

    try:
        asyncio.run(_run(args))
    except ValueError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)
    except CoinGeckoError as e:
        print(f"API error: {e}")
        sys.exit(1)

    print("\nDone.")


if __name__ == "__main__":
    main()
