from __future__ import annotations

import logging
import random
import sqlite3
from datetime import datetime, timezone
from typing import Any, Literal

from .adapters.weather import OpenWeatherMapAdapter, WeatherAdapter, WeatherAdapterError
from .domain.mock import generate_mock_payload
from .settings import AppSettings
from .storage.cache import get_cache_payload, set_cache_entry, weather_cache_key

LOGGER = logging.getLogger(__name__)

Source = Literal["api", "mock", "mock-fallback"]
FALLBACK_CITY = "New York"


def build_weather_adapter(settings: AppSettings) -> OpenWeatherMapAdapter | None:
    if not settings.weather_api_configured:
        return None
    provider = settings.yaml.weather.provider
    if provider != "openweathermap":
        raise ValueError(f"Unsupported weather provider: {provider}")
    return OpenWeatherMapAdapter(
        api_key=settings.env.openweather_api_key or "",
        units=settings.yaml.weather.units,
        timeout_seconds=settings.yaml.weather.timeout_seconds,
    )


class WeatherService:
    """Backend proxy: real upstream data when configured, synthetic data otherwise."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        adapter: WeatherAdapter | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._settings = settings
        self._adapter = adapter
        self._rng = rng or random.Random(settings.yaml.mock.seed)

    @property
    def api_configured(self) -> bool:
        return self._adapter is not None

    def _envelope(self, data: dict[str, Any], source: Source, **extra: Any) -> dict[str, Any]:
        data["source"] = source
        return {
            "success": True,
            "data": data,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "source": source,
            **extra,
        }

    def _cached(self, city: str) -> dict[str, Any] | None:
        if self._settings.yaml.weather.cache_ttl_seconds == 0:
            return None
        try:
            payload = get_cache_payload(self._settings.db_path, weather_cache_key(city))
        except sqlite3.Error:
            LOGGER.exception("Weather cache lookup failed for '%s'", city)
            return None
        return payload if isinstance(payload, dict) else None

    def _store(self, city: str, payload: dict[str, Any]) -> None:
        ttl_seconds = self._settings.yaml.weather.cache_ttl_seconds
        if ttl_seconds == 0:
            return
        try:
            set_cache_entry(self._settings.db_path, weather_cache_key(city), payload, ttl_seconds)
        except sqlite3.Error:
            LOGGER.exception("Weather cache write failed for '%s'", city)

    def mock_payload(self, city: str | None) -> dict[str, Any]:
        return generate_mock_payload(city, rng=self._rng, today=datetime.now(self._settings.timezone).date())

    def get_weather(self, city: str) -> dict[str, Any]:
        LOGGER.info("Fetching weather for: %s", city)
        if self._adapter is None:
            LOGGER.info("Using mock data (API key not configured)")
            return self._envelope(self.mock_payload(city), "mock")

        cached = self._cached(city)
        if cached is not None:
            return self._envelope(cached, "api", cached=True)

        try:
            payload = self._adapter.get_weather(city)
        except WeatherAdapterError as exc:
            LOGGER.warning("API failed for '%s', falling back to mock data: %s", city, exc)
            return self._envelope(self.mock_payload(city), "mock")

        self._store(city, payload)
        LOGGER.info("Real weather data fetched for %s", city)
        return self._envelope(payload, "api")

    def fallback(self, city: str | None) -> dict[str, Any]:
        return self._envelope(
            self.mock_payload(city or FALLBACK_CITY),
            "mock-fallback",
            note="Using fallback data",
        )
