from __future__ import annotations

import random

import pytest
from fastapi.testclient import TestClient

from skypulse.adapters.weather import OpenWeatherMapAdapter, WeatherAdapterError
from skypulse.client import HttpWeatherFetcher, ServiceWeatherFetcher
from skypulse.dashboard import build_fetcher
from skypulse.main import create_app
from skypulse.service import WeatherService
from skypulse.session.history import MemoryHistoryStore

from conftest import build_owm_current

KNOWN_CITIES = {
    "New York": {"lat": 40.7128, "lon": -74.0060, "temp": 15.2, "code": 500, "country": "US"},
    "Tokyo": {"lat": 35.6762, "lon": 139.6503, "temp": 21.6, "code": 800},
}


class CityAdapter:
    def get_weather(self, city: str) -> dict:
        if city == "Crashville":
            raise RuntimeError("boom")
        known = KNOWN_CITIES.get(city)
        if known is None:
            raise WeatherAdapterError("Weather API error: 404 Not Found")
        return OpenWeatherMapAdapter.transform(build_owm_current(city, **known), None)


@pytest.fixture
def client(make_settings):
    settings = make_settings(ui={"success_flash_seconds": 30, "error_flash_seconds": 30})
    app = create_app(
        settings,
        adapter=CityAdapter(),
        history_store=MemoryHistoryStore(),
        rng=random.Random(4),
    )
    with TestClient(app) as test_client:
        yield test_client


def test_dashboard_page_shows_default_city(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "<title>SkyPulse</title>" in response.text
    assert "New York" in response.text
    assert "weather-bg-rainy" in response.text


def test_health(client):
    payload = client.get("/api/health").json()

    assert payload["status"] == "OK"
    assert payload["weatherAPI"] == "Configured"
    assert payload["environment"] == "test"
    assert payload["scheduler_running"] is True


def test_weather_requires_city(client):
    for params in ({}, {"city": "   "}):
        response = client.get("/api/weather", params=params)
        assert response.status_code == 400
        assert response.json() == {"success": False, "error": "City parameter is required"}


def test_weather_endpoint_returns_live_envelope(client):
    payload = client.get("/api/weather", params={"city": "Tokyo"}).json()

    assert payload["success"] is True
    assert payload["source"] == "api"
    assert payload["data"]["location"]["name"] == "Tokyo"
    assert payload["data"]["current"]["condition"]["text"] == "Sunny"


def test_weather_endpoint_degrades_gracefully(client):
    unknown = client.get("/api/weather", params={"city": "Atlantis"}).json()
    crashed = client.get("/api/weather", params={"city": "Crashville"}).json()

    assert unknown["source"] == "mock"
    assert crashed["source"] == "mock-fallback"
    assert crashed["note"] == "Using fallback data"
    assert crashed["data"]["location"]["name"] == "Crashville"


def test_unknown_route_is_json_404(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Endpoint not found"}


def test_search_renders_tokyo_everywhere(client):
    response = client.post("/search", params={"city": "Tokyo"})

    assert response.status_code == 200
    assert "Tokyo" in response.text
    assert "weather-bg-sunny" in response.text
    assert "22°" in response.text

    state = client.get("/api/state").json()
    assert state["snapshot"]["city"] == "Tokyo"
    assert state["snapshot"]["condition"] == "Sunny"
    assert state["effect"]["background_class"] == "weather-bg-sunny"
    assert state["particle_count"] == 50
    assert state["applied_render"] == 2
    assert state["session"]["history"] == ["Tokyo", "New York"]
    assert state["session"]["last_source"] == "api"

    globe = client.get("/api/globe", params={"frames": 3}).json()
    highlighted = [marker for marker in globe["markers"] if marker["highlighted"]]
    assert len(globe["markers"]) == 7
    assert len(highlighted) == 1
    assert highlighted[0]["city"] == "Tokyo"
    assert (highlighted[0]["lat"], highlighted[0]["lon"]) == (35.6762, 139.6503)
    assert highlighted[0]["label"] == "22°"
    assert highlighted[0]["condition"] == "Sunny"


def test_startup_refreshes_reference_markers_from_live_data(client):
    globe = client.get("/api/globe").json()
    reference = {marker["city"]: marker for marker in globe["markers"] if not marker["highlighted"]}

    assert reference["Tokyo"]["condition"] == "Sunny"
    assert reference["Tokyo"]["label"] == "22°"
    assert reference["London"]["condition"] == "Cloudy"


def test_blank_search_shows_input_error(client):
    response = client.post("/search", params={"city": "  "})

    assert response.status_code == 200
    assert "Please enter a city name" in response.text
    assert client.get("/api/state").json()["applied_render"] == 1


def test_suggestions_endpoint(client):
    payload = client.get("/api/suggestions", params={"q": "to"}).json()

    assert payload["suggestions"][:2] == ["Tokyo", "Toronto"]
    assert client.delete("/api/suggestions").json() == {"suggestions": []}
    assert client.get("/api/state").json()["session"]["suggestions"] == []


def test_weather_partial(client):
    response = client.get("/partials/weather")

    assert response.status_code == 200
    assert 'id="weather-tile"' in response.text


def test_build_fetcher_follows_client_settings(make_settings):
    local = make_settings()
    remote = make_settings(client={"api_base_url": "http://localhost:3000"})

    assert isinstance(build_fetcher(local, WeatherService(local)), ServiceWeatherFetcher)
    assert isinstance(build_fetcher(remote, WeatherService(remote)), HttpWeatherFetcher)
