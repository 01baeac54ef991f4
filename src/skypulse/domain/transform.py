from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Mapping

from .conditions import DEFAULT_CONDITION, normalize
from .models import Condition, DayPoint, HourPoint, WeatherSnapshot

MAX_HOURLY_POINTS = 8
MAX_DAILY_POINTS = 7
TODAY_LABEL = "Today"
WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
DEFAULT_CITY = "Unknown City"
DEFAULT_COORDINATES = (40.7128, -74.0060)


@dataclass(slots=True)
class DateGroup:
    date: str
    temps: list[float] = field(default_factory=list)
    conditions: list[Condition] = field(default_factory=list)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _sequence(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _to_float(value: Any, default: float | None = 0.0) -> float | None:
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def _to_humidity(value: Any) -> int:
    number = _to_float(value)
    return min(max(round_half_up(number), 0), 100)


def _to_wind(value: Any) -> float:
    return max(_to_float(value), 0.0)


def _to_text(value: Any, default: str = "") -> str:
    if not isinstance(value, str):
        return default
    return value.strip() or default


def _condition_of(entry: Mapping[str, Any]) -> Condition:
    raw = entry.get("condition")
    if isinstance(raw, Mapping):
        code = raw.get("code")
        text = raw.get("text")
        if text is None and code is not None:
            return normalize(code)
        return normalize(text)
    return normalize(raw)


def _has_condition(entry: Mapping[str, Any]) -> bool:
    raw = entry.get("condition")
    if isinstance(raw, Mapping):
        return raw.get("text") is not None or raw.get("code") is not None
    return raw is not None


def format_clock(raw_time: Any) -> str:
    """Render an upstream time value ("2024-05-01 09:00", "9:00", ...) as HH:MM."""
    text = _to_text(raw_time)
    if not text:
        return "00:00"
    clock = text.replace("T", " ").split(" ")[-1]
    hours, _, rest = clock.partition(":")
    minutes = rest[:2]
    if not hours.isdigit():
        return "00:00"
    if not minutes.isdigit():
        minutes = "00"
    return f"{int(hours) % 24:02d}:{int(minutes) % 60:02d}"


def weekday_label(raw_date: Any) -> str:
    text = _to_text(raw_date)
    try:
        parsed = date.fromisoformat(text[:10])
    except ValueError:
        return "--"
    return WEEKDAY_LABELS[parsed.weekday()]


def dominant_condition(conditions: Iterable[Condition]) -> Condition:
    """Most frequent condition; ties go to the one encountered first."""
    counts = Counter(conditions)
    if not counts:
        return DEFAULT_CONDITION
    best = max(counts.values())
    # Counter keeps first-insertion order.
    return next(condition for condition, count in counts.items() if count == best)


def group_by_date(entries: Iterable[tuple[str, float, Condition]]) -> list[DateGroup]:
    """Fold (date, temperature, condition) entries into per-date groups in input order."""
    groups: dict[str, DateGroup] = {}
    for entry_date, temp, condition in entries:
        group = groups.get(entry_date)
        if group is None:
            group = DateGroup(date=entry_date)
            groups[entry_date] = group
        group.temps.append(temp)
        group.conditions.append(condition)
    return list(groups.values())


def _hour_point(entry: Mapping[str, Any]) -> HourPoint:
    return HourPoint(
        time=format_clock(entry.get("time")),
        temp_c=_to_float(entry.get("temp_c")),
        condition=_condition_of(entry),
        humidity_pct=_to_humidity(entry.get("humidity")),
        wind_kph=_to_wind(entry.get("wind_kph")),
    )


def _hourly_points(forecast_days: list[Any]) -> tuple[HourPoint, ...]:
    """Hours of the first forecast day only; later days feed the daily strip."""
    if not forecast_days:
        return ()
    hours = _sequence(_mapping(forecast_days[0]).get("hour"))
    return tuple(_hour_point(_mapping(entry)) for entry in hours[:MAX_HOURLY_POINTS])


def _daily_points(forecast_days: list[Any]) -> tuple[DayPoint, ...]:
    aggregates: dict[str, list[Mapping[str, Any]]] = {}
    hour_entries: list[tuple[str, float, Condition]] = []
    order: list[str] = []

    for index, forecast_day in enumerate(forecast_days):
        day_data = _mapping(forecast_day)
        day_key = _to_text(day_data.get("date"), default=f"#{index}")
        if day_key not in aggregates:
            aggregates[day_key] = []
            order.append(day_key)
        aggregate = _mapping(day_data.get("day"))
        if aggregate:
            aggregates[day_key].append(aggregate)
        for entry in _sequence(day_data.get("hour")):
            hour = _mapping(entry)
            temp = _to_float(hour.get("temp_c"), default=None)
            if temp is None:
                continue
            hour_entries.append((day_key, temp, _condition_of(hour)))

    groups = {group.date: group for group in group_by_date(hour_entries)}
    points: list[DayPoint] = []
    for day_key in order[:MAX_DAILY_POINTS]:
        group = groups.get(day_key, DateGroup(date=day_key))
        aggregate = aggregates[day_key][0] if aggregates[day_key] else {}

        high = _to_float(aggregate.get("maxtemp_c"), default=None)
        low = _to_float(aggregate.get("mintemp_c"), default=None)
        if high is None:
            high = max(group.temps) if group.temps else 0.0
        if low is None:
            low = min(group.temps) if group.temps else 0.0

        if _has_condition(aggregate):
            condition = _condition_of(aggregate)
        else:
            condition = dominant_condition(group.conditions)

        label = TODAY_LABEL if not points else weekday_label(day_key)
        points.append(DayPoint(label=label, high_c=high, low_c=low, condition=condition))
    return tuple(points)


def transform(payload: Any, *, fallback_city: str | None = None) -> WeatherSnapshot:
    """Convert an upstream weather payload into a WeatherSnapshot.

    Never raises on malformed input: missing sections fall back to defaults and an
    absent forecast yields empty hourly and daily sequences.
    """
    data = _mapping(payload)
    location = _mapping(data.get("location"))
    current = _mapping(data.get("current"))
    forecast_days = _sequence(_mapping(data.get("forecast")).get("forecastday"))

    temperature = _to_float(current.get("temp_c"))
    feels_like = _to_float(current.get("feelslike_c"), default=None)
    lat = _to_float(location.get("lat"), default=None)
    lon = _to_float(location.get("lon"), default=None)
    if lat is None or lon is None:
        lat, lon = DEFAULT_COORDINATES

    return WeatherSnapshot(
        city=_to_text(location.get("name"), default=fallback_city or DEFAULT_CITY),
        country=_to_text(location.get("country")),
        lat=lat,
        lon=lon,
        temperature_c=temperature,
        condition=_condition_of(current),
        feels_like_c=temperature if feels_like is None else feels_like,
        humidity_pct=_to_humidity(current.get("humidity")),
        wind_kph=_to_wind(current.get("wind_kph")),
        pressure_mb=_to_float(current.get("pressure_mb")),
        hourly=_hourly_points(forecast_days),
        daily=_daily_points(forecast_days),
    )
