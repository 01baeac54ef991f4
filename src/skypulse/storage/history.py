from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path

from .slots import read_slot, write_slot

LOGGER = logging.getLogger(__name__)

HISTORY_SLOT_KEY = "search.history"


class SqliteHistoryStore:
    def __init__(self, db_path: Path, *, key: str = HISTORY_SLOT_KEY) -> None:
        self._db_path = Path(db_path)
        self._key = key

    def load(self) -> list[str]:
        try:
            stored = read_slot(self._db_path, self._key)
        except (sqlite3.Error, json.JSONDecodeError):
            LOGGER.exception("Search history could not be loaded from '%s'", self._db_path)
            return []
        if not isinstance(stored, list):
            return []
        return [item for item in stored if isinstance(item, str) and item.strip()]

    def save(self, cities: list[str]) -> None:
        write_slot(self._db_path, self._key, list(cities))
