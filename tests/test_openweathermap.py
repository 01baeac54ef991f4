from __future__ import annotations

import pytest

from skypulse.adapters.weather import OpenWeatherMapAdapter, WeatherAdapterError
from skypulse.adapters.weather import openweathermap
from skypulse.domain.models import Condition
from skypulse.domain.transform import transform


def _forecast_item(stamp, temp, code, humidity=70, wind=2.0):
    return {
        "dt_txt": stamp,
        "main": {"temp": temp, "humidity": humidity},
        "weather": [{"id": code, "main": "Rain", "icon": "10d"}],
        "wind": {"speed": wind},
    }


FORECAST = {
    "list": [
        _forecast_item("2024-05-05 12:00:00", 18.6, 500),
        _forecast_item("2024-05-05 15:00:00", 21.2, 501),
        _forecast_item("2024-05-05 18:00:00", 16.1, 800),
        _forecast_item("2024-05-06 00:00:00", 12.4, 801),
        {"dt_txt": "garbage"},
    ]
}


def test_transform_maps_current_conditions(owm_current):
    payload = OpenWeatherMapAdapter.transform(
        owm_current("Tokyo", lat=35.6762, lon=139.6503, temp=21.6, code=800), None
    )

    assert payload["location"] == {"name": "Tokyo", "country": "JP", "lat": 35.6762, "lon": 139.6503}
    current = payload["current"]
    assert current["temp_c"] == 22
    assert current["feelslike_c"] == 20
    assert current["condition"]["text"] == "Sunny"
    assert current["condition"]["icon"] == "https://openweathermap.org/img/wn/01d@2x.png"
    assert current["wind_kph"] == 13
    assert current["pressure_mb"] == 1016
    assert current["visibility"] == 10
    assert payload["forecast"]["forecastday"] == []


def test_transform_groups_forecast_by_date(owm_current):
    payload = OpenWeatherMapAdapter.transform(
        owm_current("Tokyo", lat=35.6762, lon=139.6503, temp=21.6, code=800), FORECAST
    )

    days = payload["forecast"]["forecastday"]
    assert [day["date"] for day in days] == ["2024-05-05", "2024-05-06"]
    assert days[0]["day"] == {"maxtemp_c": 21, "mintemp_c": 16, "condition": {"text": "Rainy"}}
    assert [hour["time"] for hour in days[0]["hour"]] == ["12:00", "15:00", "18:00"]
    assert days[0]["hour"][0]["wind_kph"] == 7
    assert days[1]["day"]["condition"]["text"] == "Cloudy"

    snapshot = transform(payload)
    assert snapshot.condition is Condition.SUNNY
    assert [day.condition for day in snapshot.daily] == [Condition.RAINY, Condition.CLOUDY]
    assert [point.time for point in snapshot.hourly] == ["12:00", "15:00", "18:00"]


def test_transform_rejects_incomplete_response():
    with pytest.raises(WeatherAdapterError):
        OpenWeatherMapAdapter.transform({"name": "Nowhere"}, None)


def test_forecast_failure_still_returns_current(monkeypatch, owm_current):
    requested = []

    def fake_fetch_json(url, *, timeout):
        requested.append(url)
        if "/forecast" in url:
            raise WeatherAdapterError("Weather API error: 500 Internal Server Error")
        return owm_current("Oslo", lat=59.91, lon=10.75, temp=-3.5, code=601, country="NO")

    monkeypatch.setattr(openweathermap, "_fetch_json", fake_fetch_json)
    adapter = OpenWeatherMapAdapter(api_key="abc", timeout_seconds=2)

    payload = adapter.get_weather("Oslo")

    assert payload["current"]["condition"]["text"] == "Snowy"
    assert payload["current"]["temp_c"] == -3
    assert payload["forecast"]["forecastday"] == []
    assert "q=Oslo" in requested[0]
    assert "units=metric" in requested[0]


def test_current_failure_propagates(monkeypatch):
    def fake_fetch_json(url, *, timeout):
        raise WeatherAdapterError("Weather API error: 404 Not Found")

    monkeypatch.setattr(openweathermap, "_fetch_json", fake_fetch_json)

    with pytest.raises(WeatherAdapterError, match="404"):
        OpenWeatherMapAdapter(api_key="abc").get_weather("Atlantis")


def test_blank_api_key_is_rejected():
    with pytest.raises(WeatherAdapterError):
        OpenWeatherMapAdapter(api_key="  ")
