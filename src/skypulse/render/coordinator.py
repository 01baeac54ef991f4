from __future__ import annotations

import logging
from itertools import count

from ..domain.effects import select_effect
from ..domain.models import EffectProfile, GlobeUpdate, WeatherSnapshot
from ..domain.transform import round_half_up
from .globe import GlobeView
from .particles import EffectLayer
from .widgets import WidgetSink, day_widget, hour_widget, primary_display

LOGGER = logging.getLogger(__name__)


def globe_update(snapshot: WeatherSnapshot) -> GlobeUpdate:
    return GlobeUpdate(
        city=snapshot.city,
        lat=snapshot.lat,
        lon=snapshot.lon,
        temperature=round_half_up(snapshot.temperature_c),
        condition=snapshot.condition,
    )


class RenderCoordinator:
    """Applies snapshots to widgets, effects and globe; the latest-started render wins.

    Callers take a ticket with ``begin()`` when a request starts and hand it back to
    ``render()`` once the snapshot is ready. A render carrying a ticket older than
    the newest one already applied is dropped.
    """

    def __init__(self, *, widgets: WidgetSink, effects: EffectLayer, globe: GlobeView) -> None:
        self._widgets = widgets
        self._effects = effects
        self._globe = globe
        self._tickets = count(1)
        self.applied_ticket = 0
        self.snapshot: WeatherSnapshot | None = None
        self.effect: EffectProfile | None = None

    def begin(self) -> int:
        return next(self._tickets)

    def is_current(self, ticket: int) -> bool:
        return ticket >= self.applied_ticket

    def render(self, snapshot: WeatherSnapshot, ticket: int | None = None) -> bool:
        if ticket is None:
            ticket = self.begin()
        if not self.is_current(ticket):
            LOGGER.info(
                "Discarding render #%s for '%s'; #%s already applied",
                ticket,
                snapshot.city,
                self.applied_ticket,
            )
            return False

        self.applied_ticket = ticket
        self.snapshot = snapshot
        self._widgets.set_primary(primary_display(snapshot))

        effect = select_effect(snapshot.condition)
        self._effects.apply(effect)
        self._widgets.set_background(effect)
        self.effect = effect

        self._widgets.replace_hourly([hour_widget(point) for point in snapshot.hourly])
        self._widgets.replace_daily([day_widget(point) for point in snapshot.daily])
        self._globe.update_weather_data(globe_update(snapshot))
        return True
