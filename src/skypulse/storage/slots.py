from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .cache import utc_now
from .db import open_db, transaction


def read_slot(db_path: Path, key: str) -> Any | None:
    """Return the JSON value stored under ``key``, or None when the slot is empty."""
    with open_db(db_path) as connection:
        row = connection.execute("SELECT json FROM kv_slots WHERE key = ?", (key,)).fetchone()
    return json.loads(row["json"]) if row is not None else None


def write_slot(db_path: Path, key: str, value: Any) -> None:
    with transaction(db_path) as connection:
        connection.execute(
            "INSERT OR REPLACE INTO kv_slots (key, json, updated_at) VALUES (?, ?, ?)",
            (key, json.dumps(value, ensure_ascii=False), utc_now().isoformat()),
        )
