from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Protocol

import httpx

from .service import WeatherService

LOGGER = logging.getLogger(__name__)

WEATHER_ENDPOINT = "/api/weather"


class UpstreamError(RuntimeError):
    """Raised when the weather endpoint fails or answers with an unusable envelope."""


class PayloadValidationError(UpstreamError):
    """Raised when a success envelope does not carry a payload object."""


@dataclass(frozen=True, slots=True)
class FetchResult:
    data: dict[str, Any]
    source: str


class WeatherFetcher(Protocol):
    async def fetch(self, city: str) -> FetchResult:
        """Request weather for a city; raises UpstreamError on failure."""


def parse_envelope(envelope: Any) -> FetchResult:
    if not isinstance(envelope, Mapping):
        raise UpstreamError("Weather response was not a JSON object")
    if envelope.get("success") is not True:
        raise UpstreamError(str(envelope.get("error") or "Unknown error"))
    data = envelope.get("data")
    if not isinstance(data, dict):
        raise PayloadValidationError("Weather response did not include a payload object")
    source = envelope.get("source") or data.get("source") or "api"
    return FetchResult(data=data, source=str(source))


class HttpWeatherFetcher:
    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._transport = transport

    async def fetch(self, city: str) -> FetchResult:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get(WEATHER_ENDPOINT, params={"city": city})
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Weather request for '{city}' failed") from exc

        try:
            envelope = response.json()
        except ValueError as exc:
            raise UpstreamError("Weather response was not valid JSON") from exc

        if response.is_error:
            message = envelope.get("error") if isinstance(envelope, Mapping) else None
            raise UpstreamError(message or f"Failed to fetch weather data ({response.status_code})")
        return parse_envelope(envelope)


class ServiceWeatherFetcher:
    """Calls the in-process WeatherService without blocking the event loop."""

    def __init__(self, service: WeatherService) -> None:
        self._service = service

    async def fetch(self, city: str) -> FetchResult:
        try:
            envelope = await asyncio.to_thread(self._service.get_weather, city)
        except Exception as exc:
            LOGGER.exception("Weather service failed for '%s'", city)
            raise UpstreamError(f"Weather service failed for '{city}'") from exc
        return parse_envelope(envelope)
