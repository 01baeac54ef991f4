from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from skypulse.domain.models import Condition, WeatherSnapshot
from skypulse.settings import AppSettings, EnvSettings, SkyPulseYamlSettings, build_settings


def build_upstream_payload(
    city: str = "Paris",
    *,
    condition: str = "Sunny",
    temp: float = 21.0,
    lat: float = 48.8566,
    lon: float = 2.3522,
    dates: tuple[str, ...] = ("2024-05-05", "2024-05-06", "2024-05-07"),
    hours_per_day: int = 4,
) -> dict[str, Any]:
    return {
        "location": {"name": city, "country": "FR", "lat": lat, "lon": lon},
        "current": {
            "temp_c": temp,
            "condition": {"text": condition},
            "feelslike_c": temp - 1,
            "humidity": 55,
            "wind_kph": 12,
            "pressure_mb": 1013,
        },
        "forecast": {
            "forecastday": [
                {
                    "date": day,
                    "day": {"maxtemp_c": temp + 4, "mintemp_c": temp - 4, "condition": {"text": condition}},
                    "hour": [
                        {
                            "time": f"{day} {hour:02d}:00",
                            "temp_c": temp + hour,
                            "condition": {"text": condition},
                            "humidity": 50,
                            "wind_kph": 10,
                        }
                        for hour in range(hours_per_day)
                    ],
                }
                for day in dates
            ]
        },
    }


def build_owm_current(
    city: str,
    *,
    lat: float,
    lon: float,
    temp: float,
    code: int,
    country: str = "JP",
) -> dict[str, Any]:
    return {
        "name": city,
        "coord": {"lat": lat, "lon": lon},
        "sys": {"country": country},
        "weather": [{"id": code, "main": "Clear", "description": "clear sky", "icon": "01d"}],
        "main": {"temp": temp, "feels_like": temp - 1.2, "humidity": 48, "pressure": 1016},
        "wind": {"speed": 3.5},
        "visibility": 10000,
    }


@pytest.fixture
def make_settings(tmp_path: Path) -> Callable[..., AppSettings]:
    def _make(**sections: dict[str, Any]) -> AppSettings:
        raw: dict[str, Any] = {
            "ui": {"success_flash_seconds": 0, "error_flash_seconds": 0},
            "mock": {"seed": 7},
        }
        for name, values in sections.items():
            raw.setdefault(name, {}).update(values)
        env = EnvSettings(
            _env_file=None,
            skypulse_env="test",
            skypulse_db_path=tmp_path / "skypulse.db",
            openweather_api_key=None,
        )
        return build_settings(env, SkyPulseYamlSettings.model_validate(raw))

    return _make


@pytest.fixture
def settings(make_settings: Callable[..., AppSettings]) -> AppSettings:
    return make_settings()


@pytest.fixture
def upstream_payload() -> Callable[..., dict[str, Any]]:
    return build_upstream_payload


@pytest.fixture
def owm_current() -> Callable[..., dict[str, Any]]:
    return build_owm_current


@pytest.fixture
def make_snapshot() -> Callable[..., WeatherSnapshot]:
    def _make(
        city: str = "Paris",
        condition: Condition = Condition.SUNNY,
        temperature_c: float = 21.0,
        lat: float = 48.8566,
        lon: float = 2.3522,
    ) -> WeatherSnapshot:
        return WeatherSnapshot(
            city=city,
            lat=lat,
            lon=lon,
            temperature_c=temperature_c,
            condition=condition,
            feels_like_c=temperature_c,
            humidity_pct=50,
            wind_kph=10,
            pressure_mb=1013,
        )

    return _make
