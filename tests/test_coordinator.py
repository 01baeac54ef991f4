from __future__ import annotations

import random

import pytest

from skypulse.domain.models import Condition
from skypulse.domain.transform import transform
from skypulse.render.coordinator import RenderCoordinator, globe_update
from skypulse.render.globe import GlobeScene
from skypulse.render.particles import EffectLayer
from skypulse.render.widgets import WidgetBoard


@pytest.fixture
def coordinator():
    return RenderCoordinator(
        widgets=WidgetBoard(),
        effects=EffectLayer(width=320, height=240, rng=random.Random(3)),
        globe=GlobeScene(),
    )


def test_render_updates_every_target(coordinator, upstream_payload):
    snapshot = transform(upstream_payload("Paris", condition="Heavy snow", temp=-2.4))

    assert coordinator.render(snapshot) is True

    board = coordinator._widgets
    assert board.primary.city == "Paris"
    assert board.primary.temperature == "-2°"
    assert board.primary.feels_like == "-3°"
    assert board.primary.humidity == "55%"
    assert board.primary.wind_speed == "12 km/h"
    assert board.primary.pressure == "1013 hPa"
    assert board.primary.icon == "fas fa-snowflake text-blue-100 animate-spin"
    assert board.background_class == "weather-bg-snowy"
    assert board.overlays == ("snow",)
    assert len(board.hourly) == 4
    assert [widget.day for widget in board.daily] == ["Today", "Mon", "Tue"]
    assert coordinator._effects.profile.particles.motion == "flutter"
    assert coordinator._globe.current_marker.city == "Paris"
    assert coordinator.snapshot is snapshot
    assert coordinator.effect.background_class == "weather-bg-snowy"


def test_late_completion_of_older_request_is_discarded(coordinator, make_snapshot):
    first = coordinator.begin()
    second = coordinator.begin()

    assert coordinator.render(make_snapshot("Tokyo", Condition.SUNNY), second) is True
    assert coordinator.render(make_snapshot("London", Condition.RAINY), first) is False

    assert coordinator._widgets.primary.city == "Tokyo"
    assert coordinator._widgets.background_class == "weather-bg-sunny"
    assert coordinator._effects.profile.background_class == "weather-bg-sunny"
    assert coordinator._globe.current_marker.city == "Tokyo"
    assert coordinator.applied_ticket == second


def test_in_order_completions_both_apply(coordinator, make_snapshot):
    first = coordinator.begin()
    second = coordinator.begin()

    assert coordinator.render(make_snapshot("London"), first) is True
    assert coordinator.render(make_snapshot("Tokyo"), second) is True
    assert coordinator._widgets.primary.city == "Tokyo"


def test_same_ticket_may_render_again(coordinator, make_snapshot):
    ticket = coordinator.begin()

    assert coordinator.render(make_snapshot("Atlantis"), ticket) is True
    assert coordinator.render(make_snapshot("Atlantis", Condition.CLOUDY), ticket) is True
    assert coordinator._widgets.background_class == "weather-bg-cloudy"


def test_globe_update_rounds_temperature_half_up(make_snapshot):
    update = globe_update(make_snapshot("Tokyo", temperature_c=21.5, lat=35.6762, lon=139.6503))

    assert update.temperature == 22
    assert (update.lat, update.lon) == (35.6762, 139.6503)
    assert update.condition is Condition.SUNNY
