from __future__ import annotations

import logging
import sqlite3
from typing import Iterable, Protocol

LOGGER = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10


class HistoryStore(Protocol):
    def load(self) -> list[str]:
        """Return the persisted cities, most recent first."""

    def save(self, cities: list[str]) -> None:
        """Overwrite the persisted cities."""


class MemoryHistoryStore:
    def __init__(self, cities: Iterable[str] = ()) -> None:
        self.cities = list(cities)
        self.saves = 0

    def load(self) -> list[str]:
        return list(self.cities)

    def save(self, cities: list[str]) -> None:
        self.cities = list(cities)
        self.saves += 1


class SearchHistory:
    """Most-recent-first city names, unique without regard to case."""

    def __init__(self, store: HistoryStore, *, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        """Start from the cities already persisted in ``store``, deduplicated and capped."""
        self._store = store
        self._limit = limit
        self._cities: list[str] = []
        for city in store.load():
            text = city.strip()
            if text and all(text.lower() != seen.lower() for seen in self._cities):
                self._cities.append(text)
        del self._cities[limit:]

    @property
    def cities(self) -> list[str]:
        return list(self._cities)

    def __len__(self) -> int:
        return len(self._cities)

    def add(self, city: str) -> None:
        text = city.strip()
        if not text:
            return
        remaining = [item for item in self._cities if item.lower() != text.lower()]
        self._cities = [text, *remaining][: self._limit]
        try:
            self._store.save(self.cities)
        except sqlite3.Error:
            LOGGER.exception("Search history could not be persisted")

    def matching(self, query: str) -> list[str]:
        needle = query.lower()
        return [city for city in self._cities if needle in city.lower()]
