from .cache import (
    CacheEntry,
    get_cache_entry,
    get_cache_payload,
    prune_expired_entries,
    set_cache_entry,
    weather_cache_key,
)
from .db import initialize_database, transaction
from .history import SqliteHistoryStore
from .slots import read_slot, write_slot

__all__ = [
    "CacheEntry",
    "SqliteHistoryStore",
    "get_cache_entry",
    "get_cache_payload",
    "initialize_database",
    "prune_expired_entries",
    "read_slot",
    "set_cache_entry",
    "transaction",
    "weather_cache_key",
    "write_slot",
]
