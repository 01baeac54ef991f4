from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any

from .models import Condition, WeatherSnapshot
from .transform import DEFAULT_CITY, DEFAULT_COORDINATES, round_half_up, transform

MOCK_COUNTRY = "US"
MOCK_FORECAST_DAYS = 7
MOCK_HOURS_PER_DAY = 24
FORECAST_CONDITIONS = (Condition.SUNNY, Condition.CLOUDY, Condition.RAINY)


def _hourly(rng: random.Random) -> list[dict[str, Any]]:
    return [
        {
            "time": f"{hour:02d}:00",
            "temp_c": round_half_up(15 + rng.random() * 10),
            "condition": {"text": rng.choice(FORECAST_CONDITIONS).value},
            "humidity": round_half_up(40 + rng.random() * 40),
            "wind_kph": round_half_up(5 + rng.random() * 15),
        }
        for hour in range(MOCK_HOURS_PER_DAY)
    ]


def _forecast_days(rng: random.Random, today: date) -> list[dict[str, Any]]:
    days: list[dict[str, Any]] = []
    for offset in range(MOCK_FORECAST_DAYS):
        high = round_half_up(20 + rng.random() * 15)
        low = min(round_half_up(10 + rng.random() * 10), high)
        days.append(
            {
                "date": (today + timedelta(days=offset)).isoformat(),
                "day": {
                    "maxtemp_c": high,
                    "mintemp_c": low,
                    "condition": {"text": rng.choice(FORECAST_CONDITIONS).value},
                },
                "hour": _hourly(rng),
            }
        )
    return days


def generate_mock_payload(
    city: str | None,
    *,
    rng: random.Random,
    today: date | None = None,
) -> dict[str, Any]:
    """Build a synthetic upstream payload; reproducible for a seeded ``rng``."""
    condition = rng.choice(list(Condition))
    base_temp = 15 + rng.random() * 20
    lat, lon = DEFAULT_COORDINATES
    return {
        "location": {
            "name": (city or "").strip() or DEFAULT_CITY,
            "country": MOCK_COUNTRY,
            "lat": lat,
            "lon": lon,
        },
        "current": {
            "temp_c": round_half_up(base_temp),
            "temp_f": round_half_up(base_temp * 9 / 5 + 32),
            "condition": {"text": condition.value},
            "feelslike_c": round_half_up(base_temp + (rng.random() * 4 - 2)),
            "humidity": round_half_up(30 + rng.random() * 60),
            "wind_kph": round_half_up(5 + rng.random() * 25),
            "pressure_mb": round_half_up(1000 + rng.random() * 30),
            "uv": round_half_up(rng.random() * 10),
        },
        "forecast": {"forecastday": _forecast_days(rng, today or date.today())},
        "source": "mock",
    }


def fallback_snapshot(
    city: str,
    *,
    rng: random.Random,
    today: date | None = None,
) -> WeatherSnapshot:
    return transform(generate_mock_payload(city, rng=rng, today=today), fallback_city=city)
