"""Data models for CoinGecko market data."""

from dataclasses import dataclass
from typing import Any

import pandas as pd

from coin_market_dashboard.config import VS_CURRENCY


def _number(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _quote(value: Any) -> float | None:
    """Pick the USD figure out of a per-currency mapping."""
    if isinstance(value, dict):
        return _number(value.get(VS_CURRENCY))
    return _number(value)


def _rank(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class MarketListing:
    """One row of the markets listing."""

    id: str
    symbol: str
    name: str
    image: str
    current_price: float | None
    market_cap: float | None
    market_cap_rank: int | None
    market_cap_change_24h: float | None
    market_cap_change_percentage_24h: float | None
    price_change_24h: float | None
    price_change_percentage_24h: float | None
    total_volume: float | None
    high_24h: float | None
    low_24h: float | None
    circulating_supply: float | None
    total_supply: float | None
    max_supply: float | None
    fully_diluted_valuation: float | None
    ath: float | None
    ath_change_percentage: float | None
    ath_date: str | None
    atl: float | None
    atl_change_percentage: float | None
    atl_date: str | None
    last_updated: str | None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "MarketListing":
        return cls(
            id=raw["id"],
            symbol=raw.get("symbol", ""),
            name=raw.get("name", ""),
            image=raw.get("image", ""),
            current_price=_number(raw.get("current_price")),
            market_cap=_number(raw.get("market_cap")),
            market_cap_rank=_rank(raw.get("market_cap_rank")),
            market_cap_change_24h=_number(raw.get("market_cap_change_24h")),
            market_cap_change_percentage_24h=_number(
                raw.get("market_cap_change_percentage_24h")
            ),
            price_change_24h=_number(raw.get("price_change_24h")),
            price_change_percentage_24h=_number(raw.get("price_change_percentage_24h")),
            total_volume=_number(raw.get("total_volume")),
            high_24h=_number(raw.get("high_24h")),
            low_24h=_number(raw.get("low_24h")),
            circulating_supply=_number(raw.get("circulating_supply")),
            total_supply=_number(raw.get("total_supply")),
            max_supply=_number(raw.get("max_supply")),
            fully_diluted_valuation=_number(raw.get("fully_diluted_valuation")),
            ath=_number(raw.get("ath")),
            ath_change_percentage=_number(raw.get("ath_change_percentage")),
            ath_date=raw.get("ath_date"),
            atl=_number(raw.get("atl")),
            atl_change_percentage=_number(raw.get("atl_change_percentage")),
            atl_date=raw.get("atl_date"),
            last_updated=raw.get("last_updated"),
        )


@dataclass(frozen=True)
class MarketSnapshot:
    """USD market figures nested in a coin detail record."""

    current_price: float | None
    market_cap: float | None
    total_volume: float | None
    high_24h: float | None
    low_24h: float | None
    price_change_24h: float | None
    price_change_percentage_24h: float | None
    circulating_supply: float | None
    total_supply: float | None
    max_supply: float | None

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "MarketSnapshot":
        return cls(
            current_price=_quote(raw.get("current_price")),
            market_cap=_quote(raw.get("market_cap")),
            total_volume=_quote(raw.get("total_volume")),
            high_24h=_quote(raw.get("high_24h")),
            low_24h=_quote(raw.get("low_24h")),
            price_change_24h=_number(raw.get("price_change_24h")),
            price_change_percentage_24h=_number(raw.get("price_change_percentage_24h")),
            circulating_supply=_number(raw.get("circulating_supply")),
            total_supply=_number(raw.get("total_supply")),
            max_supply=_number(raw.get("max_supply")),
        )


@dataclass(frozen=True)
class CoinImage:
    thumb: str = ""
    small: str = ""
    large: str = ""


@dataclass(frozen=True)
class CoinDetail:
    """Extended single-coin record."""

    id: str
    symbol: str
    name: str
    description: str
    image: CoinImage
    market_cap_rank: int | None
    market_data: MarketSnapshot

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "CoinDetail":
        description = raw.get("description") or {}
        image = raw.get("image") or {}
        return cls(
            id=raw["id"],
            symbol=raw.get("symbol", ""),
            name=raw.get("name", ""),
            description=description.get("en", "") or "",
            image=CoinImage(
                thumb=image.get("thumb", ""),
                small=image.get("small", ""),
                large=image.get("large", ""),
            ),
            market_cap_rank=_rank(raw.get("market_cap_rank")),
            market_data=MarketSnapshot.from_api(raw.get("market_data") or {}),
        )


Point = tuple[int, float]


def _points(raw: Any) -> tuple[Point, ...]:
    """Parse [[timestamp_ms, value], ...] pairs, sorted by timestamp."""
    points = []
    for pair in raw or []:
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            continue
        value = _number(pair[1])
        if pair[0] is None or value is None:
            continue
        points.append((int(pair[0]), value))
    return tuple(sorted(points, key=lambda p: p[0]))


@dataclass(frozen=True)
class PriceSeries:
    """
    Historical price, market cap and volume series for one coin.

    ``days`` is the window actually served; ``requested_days`` is the window
    the caller asked for. They differ when the 24h chart fell back to 7 days.
    """

    coin_id: str
    days: str
    requested_days: str
    prices: tuple[Point, ...]
    market_caps: tuple[Point, ...]
    total_volumes: tuple[Point, ...]

    @classmethod
    def from_api(
        cls, coin_id: str, days: str, raw: dict[str, Any], requested_days: str | None = None
    ) -> "PriceSeries":
        raw = raw if isinstance(raw, dict) else {}
        return cls(
            coin_id=coin_id,
            days=days,
            requested_days=requested_days or days,
            prices=_points(raw.get("prices")),
            market_caps=_points(raw.get("market_caps")),
            total_volumes=_points(raw.get("total_volumes")),
        )

    @property
    def is_empty(self) -> bool:
        return not self.prices

    @property
    def is_fallback(self) -> bool:
        return self.days != self.requested_days

    def to_frame(self) -> pd.DataFrame:
        """
        Merge the three series into one DataFrame.

        Returns:
            DataFrame with a UTC DatetimeIndex and price/market_cap/volume columns
        """
        columns = {
            "price": self.prices,
            "market_cap": self.market_caps,
            "volume": self.total_volumes,
        }
        frames = []
        for name, points in columns.items():
            series = pd.Series(
                [value for _, value in points],
                index=pd.to_datetime([ts for ts, _ in points], unit="ms", utc=True),
                name=name,
                dtype="float64",
            )
            frames.append(series[~series.index.duplicated(keep="last")])

        df = pd.concat(frames, axis=1).sort_index()
        df.index.name = "timestamp"
        return df


@dataclass(frozen=True)
class SearchResult:
    """A coin hit from the search endpoint."""

    id: str
    name: str
    symbol: str
    market_cap_rank: int | None
    thumb: str

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "SearchResult":
        return cls(
            id=raw["id"],
            name=raw.get("name", ""),
            symbol=raw.get("symbol", ""),
            market_cap_rank=_rank(raw.get("market_cap_rank")),
            thumb=raw.get("thumb", ""),
        )
