from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from .db import open_db, transaction

WEATHER_CACHE_PREFIX = "weather.city."


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | str) -> datetime:
    stamp = datetime.fromisoformat(value) if isinstance(value, str) else value
    if stamp.tzinfo is None:
        return stamp.replace(tzinfo=timezone.utc)
    return stamp.astimezone(timezone.utc)


@dataclass(slots=True)
class CacheEntry:
    key: str
    payload: Any
    fetched_at: datetime
    ttl_seconds: int

    @property
    def expires_at(self) -> datetime:
        return self.fetched_at + timedelta(seconds=self.ttl_seconds)

    def is_stale(self, now: datetime | None = None) -> bool:
        return (now or utc_now()) > self.expires_at

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> CacheEntry:
        return cls(
            key=row["key"],
            payload=json.loads(row["json"]),
            fetched_at=as_utc(row["fetched_at"]),
            ttl_seconds=int(row["ttl_seconds"]),
        )


def weather_cache_key(city: str) -> str:
    """Cache key shared by every spelling of a city name that differs only in case or spacing."""
    return WEATHER_CACHE_PREFIX + " ".join(city.lower().split())


def set_cache_entry(
    db_path: Path,
    key: str,
    payload: Any,
    ttl_seconds: int,
    *,
    fetched_at: datetime | None = None,
) -> None:
    if ttl_seconds < 0:
        raise ValueError("ttl_seconds must be >= 0")

    stamp = as_utc(fetched_at) if fetched_at is not None else utc_now()
    encoded = json.dumps(payload, ensure_ascii=True, separators=(",", ":"))
    with transaction(db_path) as connection:
        connection.execute(
            """
            INSERT INTO cache_entries (key, json, fetched_at, ttl_seconds)
            VALUES (:key, :json, :fetched_at, :ttl)
            ON CONFLICT(key) DO UPDATE SET
                json=excluded.json,
                fetched_at=excluded.fetched_at,
                ttl_seconds=excluded.ttl_seconds
            """,
            {"key": key, "json": encoded, "fetched_at": stamp.isoformat(), "ttl": ttl_seconds},
        )


def get_cache_entry(db_path: Path, key: str) -> CacheEntry | None:
    with open_db(db_path) as connection:
        row = connection.execute("SELECT * FROM cache_entries WHERE key = ?", (key,)).fetchone()
    return CacheEntry.from_row(row) if row is not None else None


def get_cache_payload(
    db_path: Path,
    key: str,
    *,
    allow_stale: bool = False,
    now: datetime | None = None,
) -> Any | None:
    entry = get_cache_entry(db_path, key)
    if entry is None or (entry.is_stale(now) and not allow_stale):
        return None
    return entry.payload


def prune_expired_entries(db_path: Path, *, now: datetime | None = None) -> int:
    reference = as_utc(now) if now is not None else utc_now()
    with transaction(db_path) as connection:
        entries = [CacheEntry.from_row(row) for row in connection.execute("SELECT * FROM cache_entries")]
        expired = [(entry.key,) for entry in entries if entry.is_stale(reference)]
        connection.executemany("DELETE FROM cache_entries WHERE key = ?", expired)
    return len(expired)
