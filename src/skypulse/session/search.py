from __future__ import annotations

import asyncio
import logging
import random
from typing import Sequence

from ..client import UpstreamError, WeatherFetcher
from ..domain.mock import fallback_snapshot
from ..domain.transform import transform
from ..render.coordinator import RenderCoordinator
from .state import AppState, Flash, SessionStatus
from .suggestions import DEFAULT_MIN_QUERY_LENGTH, DEFAULT_SUGGESTION_LIMIT, suggest

LOGGER = logging.getLogger(__name__)

EMPTY_CITY_MESSAGE = "Please enter a city name"
NOT_FOUND_MESSAGE = "City not found. Please try again."

_FLASH_STATUS = {"success": SessionStatus.SUCCESS, "error": SessionStatus.ERROR}


class InputError(ValueError):
    """Raised for search input that is rejected before any request is made."""


def validate_city(raw: str | None) -> str:
    city = (raw or "").strip()
    if not city:
        raise InputError(EMPTY_CITY_MESSAGE)
    return city


class SearchSession:
    """Request lifecycle for city searches: loading, success/error feedback, history."""

    def __init__(
        self,
        state: AppState,
        *,
        fetcher: WeatherFetcher,
        coordinator: RenderCoordinator,
        popular_cities: Sequence[str] = (),
        rng: random.Random | None = None,
        success_flash_seconds: float = 2.0,
        error_flash_seconds: float = 3.0,
        suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT,
        suggestion_min_chars: int = DEFAULT_MIN_QUERY_LENGTH,
    ) -> None:
        self.state = state
        self._fetcher = fetcher
        self._coordinator = coordinator
        self._popular = list(popular_cities)
        self._rng = rng or random.Random()
        self._success_seconds = success_flash_seconds
        self._error_seconds = error_flash_seconds
        self._suggestion_limit = suggestion_limit
        self._suggestion_min_chars = suggestion_min_chars
        self._reset_task: asyncio.Task[None] | None = None

    def on_input(self, text: str) -> list[str]:
        self.state.query = text
        self.state.suggestions = suggest(
            text,
            popular=self._popular,
            history=self.state.history.cities,
            limit=self._suggestion_limit,
            min_length=self._suggestion_min_chars,
        )
        return list(self.state.suggestions)

    def dismiss_suggestions(self) -> None:
        self.state.suggestions = []

    async def choose_suggestion(self, city: str) -> bool:
        self.state.query = city
        return await self.submit(city)

    async def submit(self, text: str | None = None) -> bool:
        try:
            city = validate_city(self.state.query if text is None else text)
        except InputError as exc:
            self._flash("error", str(exc), transition=False)
            return False
        self.dismiss_suggestions()
        return await self.search(city)

    async def search(self, city: str) -> bool:
        ticket = self._coordinator.begin()
        self._begin_request()
        try:
            result = await self._fetcher.fetch(city)
        except UpstreamError as exc:
            LOGGER.warning("Error fetching weather for '%s': %s", city, exc)
            result = None
        finally:
            self._end_request()

        if result is None:
            applied = self._coordinator.render(fallback_snapshot(city, rng=self._rng), ticket)
            if applied:
                self._flash("error", NOT_FOUND_MESSAGE)
            return False

        self.state.last_source = result.source
        applied = self._coordinator.render(transform(result.data, fallback_city=city), ticket)
        self.state.history.add(city)
        if applied:
            self.dismiss_suggestions()
            self._flash("success", None)
        return True

    def _begin_request(self) -> None:
        self.state.pending += 1
        self.state.status = SessionStatus.LOADING
        self.state.input_enabled = False

    def _end_request(self) -> None:
        state = self.state
        state.pending = max(state.pending - 1, 0)
        state.input_enabled = state.pending == 0
        if state.pending == 0 and state.status is SessionStatus.LOADING:
            # A newer request may already have flashed while this one was in flight.
            state.status = _FLASH_STATUS.get(state.flash, SessionStatus.IDLE)

    def _flash(self, kind: Flash, message: str | None, *, transition: bool = True) -> None:
        state = self.state
        state.flash = kind
        state.message = message
        state.message_kind = "error" if kind == "error" and message else None
        if transition and state.pending == 0:
            state.status = _FLASH_STATUS[kind]

        if self._reset_task is not None:
            self._reset_task.cancel()
        delay = self._error_seconds if kind == "error" else self._success_seconds
        self._reset_task = asyncio.get_running_loop().create_task(self._reset_after(delay))

    async def _reset_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        state = self.state
        state.flash = None
        state.message = None
        state.message_kind = None
        if state.pending == 0:
            state.status = SessionStatus.IDLE
        self._reset_task = None

    async def settle(self) -> None:
        """Wait for the current feedback window to close."""
        while self._reset_task is not None:
            await asyncio.wait({self._reset_task})

    def close(self) -> None:
        if self._reset_task is not None:
            self._reset_task.cancel()
            self._reset_task = None
