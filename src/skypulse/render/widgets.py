from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict

from ..domain.effects import select_effect
from ..domain.models import DayPoint, EffectProfile, HourPoint, WeatherSnapshot
from ..domain.transform import round_half_up


class PrimaryDisplay(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str
    temperature: str
    condition: str
    feels_like: str
    humidity: str
    wind_speed: str
    pressure: str
    icon: str


class HourWidget(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: str
    temp: str
    icon: str
    animation: str
    humidity: str
    wind: str


class DayWidget(BaseModel):
    model_config = ConfigDict(frozen=True)

    day: str
    high: str
    low: str
    icon: str
    animation: str


def _degrees(value: float) -> str:
    return f"{round_half_up(value)}°"


def primary_display(snapshot: WeatherSnapshot) -> PrimaryDisplay:
    effect = select_effect(snapshot.condition)
    return PrimaryDisplay(
        city=snapshot.city,
        temperature=_degrees(snapshot.temperature_c),
        condition=snapshot.condition.value,
        feels_like=_degrees(snapshot.feels_like_c),
        humidity=f"{snapshot.humidity_pct}%",
        wind_speed=f"{round_half_up(snapshot.wind_kph)} km/h",
        pressure=f"{round_half_up(snapshot.pressure_mb)} hPa",
        icon=" ".join(filter(None, (effect.icon, effect.animation))),
    )


def hour_widget(point: HourPoint) -> HourWidget:
    effect = select_effect(point.condition)
    return HourWidget(
        time=point.time,
        temp=_degrees(point.temp_c),
        icon=effect.icon,
        animation=effect.animation or "",
        humidity=f"{point.humidity_pct}%",
        wind=f"{round_half_up(point.wind_kph)} km/h",
    )


def day_widget(point: DayPoint) -> DayWidget:
    effect = select_effect(point.condition)
    return DayWidget(
        day=point.label,
        high=_degrees(point.high_c),
        low=_degrees(point.low_c),
        icon=effect.icon,
        animation=effect.animation or "",
    )


class WidgetSink(Protocol):
    def set_primary(self, display: PrimaryDisplay) -> None:
        """Replace every primary-display field at once."""

    def set_background(self, effect: EffectProfile) -> None:
        """Swap the page background class and decorative overlays."""

    def replace_hourly(self, widgets: list[HourWidget]) -> None:
        """Replace the hourly forecast region."""

    def replace_daily(self, widgets: list[DayWidget]) -> None:
        """Replace the daily forecast region."""


class WidgetBoard:
    """In-memory widget regions, rendered by the HTTP layer."""

    def __init__(self) -> None:
        self.primary: PrimaryDisplay | None = None
        self.background_class: str | None = None
        self.overlays: tuple[str, ...] = ()
        self.hourly: tuple[HourWidget, ...] = ()
        self.daily: tuple[DayWidget, ...] = ()

    def set_primary(self, display: PrimaryDisplay) -> None:
        self.primary = display

    def set_background(self, effect: EffectProfile) -> None:
        self.background_class = effect.background_class
        self.overlays = effect.overlays

    def replace_hourly(self, widgets: list[HourWidget]) -> None:
        self.hourly = tuple(widgets)

    def replace_daily(self, widgets: list[DayWidget]) -> None:
        self.daily = tuple(widgets)

    def context(self) -> dict[str, object]:
        return {
            "weather_available": self.primary is not None,
            "primary": self.primary,
            "background_class": self.background_class,
            "overlays": list(self.overlays),
            "hourly": list(self.hourly),
            "daily": list(self.daily),
        }
