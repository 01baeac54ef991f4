from __future__ import annotations

import sqlite3

from skypulse.session.history import MemoryHistoryStore, SearchHistory
from skypulse.session.suggestions import suggest
from skypulse.storage.db import open_db
from skypulse.storage.history import SqliteHistoryStore

POPULAR = ["New York", "London", "Tokyo", "Toronto", "Los Angeles"]


def test_add_is_case_insensitive_and_keeps_newest_casing():
    store = MemoryHistoryStore()
    history = SearchHistory(store)

    history.add("London")
    history.add("london")

    assert history.cities == ["london"]
    assert len(history) == 1
    assert store.cities == ["london"]


def test_add_moves_city_to_front_and_caps():
    history = SearchHistory(MemoryHistoryStore(), limit=10)

    for index in range(11):
        history.add(f"City {index}")
    history.add("City 5")

    assert len(history) == 10
    assert history.cities[0] == "City 5"
    assert "City 0" not in history.cities
    assert history.cities.count("City 5") == 1


def test_every_mutation_is_persisted():
    store = MemoryHistoryStore()
    history = SearchHistory(store)

    history.add("Paris")
    history.add("  ")
    history.add("Rome")

    assert store.saves == 2
    assert store.cities == ["Rome", "Paris"]


def test_constructor_dedups_and_caps_persisted_entries():
    store = MemoryHistoryStore(["Paris", "paris", "Rome", " ", "Oslo"])

    history = SearchHistory(store, limit=2)

    assert history.cities == ["Paris", "Rome"]
    assert history.matching("RO") == ["Rome"]


def test_persistence_failure_keeps_in_memory_history():
    class BrokenStore(MemoryHistoryStore):
        def save(self, cities):
            raise sqlite3.OperationalError("disk I/O error")

    history = SearchHistory(BrokenStore())
    history.add("Paris")

    assert history.cities == ["Paris"]


def test_sqlite_store_round_trip(tmp_path):
    store = SqliteHistoryStore(tmp_path / "history.db")
    assert store.load() == []

    store.save(["Zürich", "Paris"])

    assert SqliteHistoryStore(tmp_path / "history.db").load() == ["Zürich", "Paris"]


def test_sqlite_store_ignores_corrupt_slot(tmp_path):
    db_path = tmp_path / "history.db"
    with open_db(db_path) as connection:
        connection.execute(
            "INSERT INTO kv_slots (key, json, updated_at) VALUES (?, ?, ?)",
            ("search.history", "{not json", "2024-05-05T00:00:00+00:00"),
        )
        connection.commit()

    assert SqliteHistoryStore(db_path).load() == []


def test_suggestions_match_popular_then_history():
    assert suggest("to", popular=POPULAR, history=["Toledo", "Tokyo"]) == ["Tokyo", "Toronto", "Toledo"]


def test_suggestions_need_minimum_query_length():
    assert suggest("t", popular=POPULAR, history=[]) == []
    assert suggest("t", popular=POPULAR, history=[], min_length=1) == ["Tokyo", "Toronto"]


def test_suggestions_are_capped():
    assert suggest("o", popular=POPULAR, history=[], min_length=1, limit=2) == ["New York", "London"]
