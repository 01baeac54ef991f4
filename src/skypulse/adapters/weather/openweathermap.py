from __future__ import annotations

import json
import logging
from typing import Any, Literal
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from ...domain.conditions import normalize
from ...domain.transform import dominant_condition, group_by_date, round_half_up
from .base import WeatherAdapterError

LOGGER = logging.getLogger(__name__)

OPENWEATHERMAP_CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
OPENWEATHERMAP_FORECAST_URL = "https://api.openweathermap.org/data/2.5/forecast"
OPENWEATHERMAP_ICON_URL = "https://openweathermap.org/img/wn/{icon}{suffix}.png"
DEFAULT_TIMEOUT_SECONDS = 10
HOURS_PER_FORECAST_DAY = 8
MS_TO_KPH = 3.6


def _coerce_float(value: Any, *, field_name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise WeatherAdapterError(f"Invalid numeric value for {field_name}") from exc


def _optional_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _icon_url(icon: Any, *, large: bool = False) -> str | None:
    if not isinstance(icon, str) or not icon:
        return None
    return OPENWEATHERMAP_ICON_URL.format(icon=icon, suffix="@2x" if large else "")


def _first_weather(item: dict[str, Any]) -> dict[str, Any]:
    weather = item.get("weather")
    if isinstance(weather, list) and weather and isinstance(weather[0], dict):
        return weather[0]
    return {}


def _fetch_json(url: str, *, timeout: float) -> dict[str, Any]:
    request = Request(url, headers={"User-Agent": "skypulse/0.1"})
    try:
        with urlopen(request, timeout=timeout) as response:
            payload = json.loads(response.read().decode("utf-8"))
    except HTTPError as exc:
        raise WeatherAdapterError(f"Weather API error: {exc.code} {exc.reason}") from exc
    except (URLError, TimeoutError, json.JSONDecodeError) as exc:
        raise WeatherAdapterError("Failed to fetch weather data from OpenWeatherMap") from exc

    if not isinstance(payload, dict):
        raise WeatherAdapterError("Unexpected OpenWeatherMap response shape")
    return payload


class OpenWeatherMapAdapter:
    def __init__(
        self,
        *,
        api_key: str,
        units: Literal["metric"] = "metric",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not api_key.strip():
            raise WeatherAdapterError("OpenWeatherMap API key not configured")
        self._api_key = api_key.strip()
        self._units = units
        self._timeout = timeout_seconds

    def _url(self, base_url: str, city: str) -> str:
        params = {"q": city, "appid": self._api_key, "units": self._units}
        return f"{base_url}?{urlencode(params)}"

    def get_weather(self, city: str) -> dict[str, Any]:
        current = _fetch_json(self._url(OPENWEATHERMAP_CURRENT_URL, city), timeout=self._timeout)
        try:
            forecast = _fetch_json(self._url(OPENWEATHERMAP_FORECAST_URL, city), timeout=self._timeout)
        except WeatherAdapterError as exc:
            LOGGER.warning("Forecast request for '%s' failed, continuing without it: %s", city, exc)
            forecast = None
        return self.transform(current, forecast)

    @classmethod
    def transform(cls, current: dict[str, Any], forecast: dict[str, Any] | None) -> dict[str, Any]:
        main = current.get("main")
        coord = current.get("coord")
        if not isinstance(main, dict) or not isinstance(coord, dict):
            raise WeatherAdapterError("OpenWeatherMap response did not include required fields")

        weather = _first_weather(current)
        sys_data = current.get("sys") if isinstance(current.get("sys"), dict) else {}
        wind = current.get("wind") if isinstance(current.get("wind"), dict) else {}
        temp = _coerce_float(main.get("temp"), field_name="main.temp")
        feels_like = _optional_float(main.get("feels_like"))
        visibility = _optional_float(current.get("visibility"))

        return {
            "location": {
                "name": current.get("name"),
                "country": sys_data.get("country"),
                "lat": _coerce_float(coord.get("lat"), field_name="coord.lat"),
                "lon": _coerce_float(coord.get("lon"), field_name="coord.lon"),
            },
            "current": {
                "temp_c": round_half_up(temp),
                "temp_f": round_half_up(temp * 9 / 5 + 32),
                "condition": {
                    "text": normalize(weather.get("id")).value,
                    "description": weather.get("description"),
                    "icon": _icon_url(weather.get("icon"), large=True),
                },
                "feelslike_c": round_half_up(feels_like if feels_like is not None else temp),
                "humidity": main.get("humidity"),
                "wind_kph": round_half_up((_optional_float(wind.get("speed")) or 0.0) * MS_TO_KPH),
                "pressure_mb": main.get("pressure"),
                "visibility": visibility / 1000 if visibility else 10,
            },
            "forecast": {
                "forecastday": cls._forecast_days(forecast) if forecast is not None else [],
            },
        }

    @staticmethod
    def _forecast_days(forecast: dict[str, Any]) -> list[dict[str, Any]]:
        items = forecast.get("list")
        if not isinstance(items, list):
            return []

        hours_by_date: dict[str, list[dict[str, Any]]] = {}
        entries = []
        for item in items:
            if not isinstance(item, dict):
                continue
            stamp = item.get("dt_txt")
            main = item.get("main")
            if not isinstance(stamp, str) or " " not in stamp or not isinstance(main, dict):
                continue
            temp = _optional_float(main.get("temp"))
            if temp is None:
                continue

            day, clock = stamp.split(" ", 1)
            weather = _first_weather(item)
            condition = normalize(weather.get("id", weather.get("main")))
            wind = item.get("wind") if isinstance(item.get("wind"), dict) else {}
            entries.append((day, temp, condition))
            hours_by_date.setdefault(day, []).append(
                {
                    "time": clock[:5],
                    "temp_c": round_half_up(temp),
                    "condition": {
                        "text": condition.value,
                        "icon": _icon_url(weather.get("icon")),
                    },
                    "humidity": main.get("humidity"),
                    "wind_kph": round_half_up((_optional_float(wind.get("speed")) or 0.0) * MS_TO_KPH),
                }
            )

        return [
            {
                "date": group.date,
                "day": {
                    "maxtemp_c": round_half_up(max(group.temps)),
                    "mintemp_c": round_half_up(min(group.temps)),
                    "condition": {"text": dominant_condition(group.conditions).value},
                },
                "hour": hours_by_date[group.date][:HOURS_PER_FORECAST_DAY],
            }
            for group in group_by_date(entries)
        ]
