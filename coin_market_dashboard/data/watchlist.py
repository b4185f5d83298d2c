"""Persisted watchlist of favorited coin ids."""

import json
import logging
from typing import Iterable, Iterator, Mapping

from coin_market_dashboard.config import WATCHLIST_KEY
from coin_market_dashboard.data.cache import LocalStore
from coin_market_dashboard.models import MarketListing


logger = logging.getLogger(__name__)


class WatchlistStore:
    """
    Ordered set of coin ids backed by a LocalStore entry.

    The stored value is a JSON array of ids. It is read once on construction
    and written back on every change. Ids are unique; duplicates found in
    stored data are collapsed on load, keeping the first occurrence.
    """

    def __init__(self, store: LocalStore, key: str = WATCHLIST_KEY) -> None:
        self.store = store
        self.key = key
        self._ids: list[str] = self._load()

    def _load(self) -> list[str]:
        saved = self.store.get_item(self.key)
        if not saved:
            return []

        try:
            data = json.loads(saved)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring corrupt watchlist data: {e}")
            return []
        if not isinstance(data, list):
            logger.warning("Ignoring watchlist data that is not a list")
            return []

        return list(dict.fromkeys(str(coin_id) for coin_id in data))

    def _save(self) -> None:
        self.store.set_item(self.key, json.dumps(self._ids))

    @property
    def ids(self) -> tuple[str, ...]:
        return tuple(self._ids)

    def contains(self, coin_id: str) -> bool:
        return coin_id in self._ids

    __contains__ = contains

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids)

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, coin_id: str) -> None:
        if coin_id in self._ids:
            return
        self._ids.append(coin_id)
        self._save()

    def remove(self, coin_id: str) -> None:
        self._ids = [i for i in self._ids if i != coin_id]
        self._save()

    def toggle(self, coin_id: str) -> bool:
        """Flip membership of a coin; returns True if it is now watched."""
        if self.contains(coin_id):
            self.remove(coin_id)
            return False
        self.add(coin_id)
        return True

    def sync(self, selection: Mapping[str, bool]) -> list[str]:
        """
        Bring membership in line with a coin id -> watched mapping.

        Ids not in the mapping are left alone.

        Returns:
            Ids whose membership changed, in mapping order
        """
        changed = [
            coin_id for coin_id, watched in selection.items()
            if watched != self.contains(coin_id)
        ]
        for coin_id in changed:
            self.toggle(coin_id)
        return changed

    def select(self, listings: Iterable[MarketListing]) -> list[MarketListing]:
        """Listings whose coin is on the watchlist, in listing order."""
        return [coin for coin in listings if coin.id in self._ids]
