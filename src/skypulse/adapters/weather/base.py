from __future__ import annotations

from typing import Any, Protocol


class WeatherAdapterError(RuntimeError):
    """Raised when a weather provider request cannot be completed."""


class WeatherAdapter(Protocol):
    def get_weather(self, city: str) -> dict[str, Any]:
        """Fetch an upstream payload (location/current/forecast) for the named city."""
