from __future__ import annotations

from typing import Union

from .models import Condition

RawCondition = Union[str, int, None]

DEFAULT_CONDITION = Condition.SUNNY

# Storm keywords are consulted first so "thunderstorm with light rain" stays Stormy.
STORM_KEYWORDS: tuple[str, ...] = ("storm", "thunder")

KEYWORD_GROUPS: tuple[tuple[tuple[str, ...], Condition], ...] = (
    (("sun", "clear"), Condition.SUNNY),
    (("cloud",), Condition.CLOUDY),
    (("rain", "drizzle"), Condition.RAINY),
    (STORM_KEYWORDS, Condition.STORMY),
    (("snow",), Condition.SNOWY),
)


def _code_table() -> dict[int, Condition]:
    table: dict[int, Condition] = {}
    for code in (200, 201, 202, 210, 211, 212, 221, 230, 231, 232):
        table[code] = Condition.STORMY
    for code in (300, 301, 302, 310, 311, 312, 313, 314, 321):
        table[code] = Condition.RAINY
    for code in (500, 501, 502, 503, 504, 520, 521, 522, 531):
        table[code] = Condition.RAINY
    table[511] = Condition.SNOWY
    for code in (600, 601, 602, 611, 612, 613, 615, 616, 620, 621, 622):
        table[code] = Condition.SNOWY
    for code in (701, 711, 721, 731, 741, 751, 761, 762, 771):
        table[code] = Condition.CLOUDY
    table[781] = Condition.STORMY
    table[800] = Condition.SUNNY
    for code in (801, 802, 803, 804):
        table[code] = Condition.CLOUDY
    return table


# OpenWeatherMap condition ids. 511 (freezing rain) and 781 (tornado) are
# intentional exceptions to their groups.
CONDITION_CODES: dict[int, Condition] = _code_table()


def from_code(code: int) -> Condition:
    return CONDITION_CODES.get(code, DEFAULT_CONDITION)


def from_text(text: str) -> Condition:
    lowered = text.strip().lower()
    if not lowered:
        return DEFAULT_CONDITION
    if any(keyword in lowered for keyword in STORM_KEYWORDS):
        return Condition.STORMY
    for keywords, condition in KEYWORD_GROUPS:
        if any(keyword in lowered for keyword in keywords):
            return condition
    return DEFAULT_CONDITION


def normalize(raw: RawCondition) -> Condition:
    """Resolve a text description or a numeric upstream code to a Condition."""
    if raw is None or isinstance(raw, bool):
        return DEFAULT_CONDITION
    if isinstance(raw, Condition):
        return raw
    if isinstance(raw, int):
        return from_code(raw)
    if isinstance(raw, float):
        return from_code(int(raw)) if raw.is_integer() else DEFAULT_CONDITION
    text = str(raw).strip()
    if text.isdigit():
        return from_code(int(text))
    return from_text(text)
