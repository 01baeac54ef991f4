from __future__ import annotations

from datetime import datetime, timedelta, timezone

from skypulse.storage.cache import (
    get_cache_entry,
    get_cache_payload,
    prune_expired_entries,
    set_cache_entry,
    weather_cache_key,
)
from skypulse.storage.db import initialize_database
from skypulse.storage.slots import read_slot, write_slot

FETCHED_AT = datetime(2024, 5, 5, 12, 0, tzinfo=timezone.utc)


def test_cache_entry_round_trip(tmp_path):
    db_path = tmp_path / "cache.db"
    initialize_database(db_path)

    set_cache_entry(db_path, "weather.city.paris", {"location": {"name": "Paris"}}, 600, fetched_at=FETCHED_AT)
    entry = get_cache_entry(db_path, "weather.city.paris")

    assert entry.payload == {"location": {"name": "Paris"}}
    assert entry.fetched_at == FETCHED_AT
    assert entry.ttl_seconds == 600
    assert get_cache_entry(db_path, "missing") is None


def test_stale_entries_are_hidden_unless_requested(tmp_path):
    db_path = tmp_path / "cache.db"
    set_cache_entry(db_path, "key", [1, 2], 60, fetched_at=FETCHED_AT)

    fresh = FETCHED_AT + timedelta(seconds=30)
    stale = FETCHED_AT + timedelta(seconds=61)

    assert get_cache_payload(db_path, "key", now=fresh) == [1, 2]
    assert get_cache_payload(db_path, "key", now=stale) is None
    assert get_cache_payload(db_path, "key", allow_stale=True, now=stale) == [1, 2]


def test_upsert_replaces_payload(tmp_path):
    db_path = tmp_path / "cache.db"
    set_cache_entry(db_path, "key", {"v": 1}, 60, fetched_at=FETCHED_AT)
    set_cache_entry(db_path, "key", {"v": 2}, 120, fetched_at=FETCHED_AT)

    entry = get_cache_entry(db_path, "key")
    assert entry.payload == {"v": 2}
    assert entry.ttl_seconds == 120


def test_prune_removes_only_expired_entries(tmp_path):
    db_path = tmp_path / "cache.db"
    set_cache_entry(db_path, "short", 1, 10, fetched_at=FETCHED_AT)
    set_cache_entry(db_path, "long", 2, 3600, fetched_at=FETCHED_AT)

    deleted = prune_expired_entries(db_path, now=FETCHED_AT + timedelta(minutes=5))

    assert deleted == 1
    assert get_cache_entry(db_path, "short") is None
    assert get_cache_entry(db_path, "long") is not None


def test_weather_cache_key_normalizes_city():
    assert weather_cache_key("  New   York ") == "weather.city.new york"
    assert weather_cache_key("PARIS") == weather_cache_key("paris")


def test_slots_round_trip(tmp_path):
    db_path = tmp_path / "slots.db"

    assert read_slot(db_path, "search.history") is None
    write_slot(db_path, "search.history", ["Paris"])
    write_slot(db_path, "search.history", ["Rome", "Paris"])

    assert read_slot(db_path, "search.history") == ["Rome", "Paris"]
