from __future__ import annotations

from typing import Sequence

DEFAULT_SUGGESTION_LIMIT = 8
DEFAULT_MIN_QUERY_LENGTH = 2


def suggest(
    query: str,
    *,
    popular: Sequence[str],
    history: Sequence[str],
    limit: int = DEFAULT_SUGGESTION_LIMIT,
    min_length: int = DEFAULT_MIN_QUERY_LENGTH,
) -> list[str]:
    """Popular cities containing the query, then matching history entries, capped."""
    if len(query) < min_length:
        return []
    needle = query.lower()
    matched = [city for city in popular if needle in city.lower()]
    recent = [city for city in history if needle in city.lower() and city not in matched]
    return [*matched, *recent][:limit]
