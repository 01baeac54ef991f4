from __future__ import annotations

import random
from typing import Iterable

from .client import HttpWeatherFetcher, ServiceWeatherFetcher, WeatherFetcher
from .domain.models import GlobeUpdate
from .render.coordinator import RenderCoordinator
from .render.globe import GlobeScene
from .render.particles import EffectLayer
from .render.widgets import WidgetBoard
from .service import WeatherService
from .session.history import HistoryStore, SearchHistory
from .session.search import SearchSession
from .session.state import AppState
from .settings import AppSettings


class Dashboard:
    """Owns one dashboard's state and wires the session to its render targets."""

    def __init__(
        self,
        settings: AppSettings,
        *,
        fetcher: WeatherFetcher,
        history_store: HistoryStore,
        rng: random.Random | None = None,
        reference_markers: Iterable[GlobeUpdate] = (),
    ) -> None:
        ui = settings.yaml.ui
        self.settings = settings
        self.rng = rng or random.Random(settings.yaml.mock.seed)
        self.board = WidgetBoard()
        self.effects = EffectLayer(width=ui.canvas_width, height=ui.canvas_height, rng=self.rng)
        self.globe = GlobeScene(auto_rotate=settings.yaml.globe.auto_rotate)
        self.globe.set_reference_markers(reference_markers)
        self.coordinator = RenderCoordinator(widgets=self.board, effects=self.effects, globe=self.globe)
        self.state = AppState(
            history=SearchHistory(history_store, limit=settings.yaml.search.history_limit),
        )
        self.session = SearchSession(
            self.state,
            fetcher=fetcher,
            coordinator=self.coordinator,
            popular_cities=settings.yaml.search.popular_cities,
            rng=self.rng,
            success_flash_seconds=ui.success_flash_seconds,
            error_flash_seconds=ui.error_flash_seconds,
            suggestion_limit=ui.suggestion_limit,
            suggestion_min_chars=ui.suggestion_min_chars,
        )

    async def load_default(self) -> bool:
        return await self.session.search(self.settings.yaml.search.default_city)

    def tick(self) -> None:
        self.effects.step()
        self.globe.tick()

    def context(self) -> dict[str, object]:
        return {
            **self.board.context(),
            "session": self.state.as_dict(),
            "effect": self.coordinator.effect,
        }

    def close(self) -> None:
        self.session.close()


def build_fetcher(settings: AppSettings, service: WeatherService) -> WeatherFetcher:
    base_url = settings.yaml.client.api_base_url
    if base_url:
        return HttpWeatherFetcher(base_url=base_url, timeout_seconds=settings.yaml.client.timeout_seconds)
    return ServiceWeatherFetcher(service)
