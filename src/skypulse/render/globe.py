from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Iterable, Literal, Protocol

from ..domain.models import Condition, GlobeUpdate

MARKER_RADIUS = 1.1
LABEL_OFFSET_Y = 0.08
HIGHLIGHT_SCALE = 1.5
CAMERA_DEFAULT_Z = 2.5
CAMERA_MIN_Z = 1.5
CAMERA_MAX_Z = 5.0
GLOBE_SPIN_PER_TICK = 0.001
CLOUD_SPIN_PER_TICK = 0.0005
DRAG_SENSITIVITY = 0.01
ZOOM_SENSITIVITY = 0.01

MarkerShape = Literal["sun", "cloud", "rain", "storm", "snow"]
AnimationKind = Literal["bob", "flash", "spin_bob", "pulse"]

MARKER_STYLES: dict[Condition, tuple[MarkerShape, str]] = {
    Condition.SUNNY: ("sun", "#ffeb3b"),
    Condition.CLOUDY: ("cloud", "#9e9e9e"),
    Condition.RAINY: ("rain", "#2196f3"),
    Condition.STORMY: ("storm", "#9c27b0"),
    Condition.SNOWY: ("snow", "#e3f2fd"),
}


@dataclass(slots=True)
class MarkerAnimation:
    """Animation state advanced by ``tick``; ``phase`` is time, frame count or scale."""

    kind: AnimationKind
    phase: float = 0.0
    step: float = 0.0
    amplitude: float = 0.0
    spin: float = 0.0
    interval: int = 0
    low: float = 0.0
    high: float = 0.0
    growing: bool = False


@dataclass(slots=True)
class Marker:
    city: str
    lat: float
    lon: float
    position: tuple[float, float, float]
    condition: Condition
    shape: MarkerShape
    color: str
    label: str
    highlighted: bool = False
    offset_y: float = 0.0
    rotation_y: float = 0.0
    rotation_z: float = 0.0
    scale: float = 1.0
    visible: bool = True
    animations: list[MarkerAnimation] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        x, y, z = self.position
        return {
            "city": self.city,
            "lat": self.lat,
            "lon": self.lon,
            "position": [x, y + self.offset_y, z],
            "label_position": [x, y + LABEL_OFFSET_Y, z],
            "condition": self.condition.value,
            "shape": self.shape,
            "color": self.color,
            "label": self.label,
            "highlighted": self.highlighted,
            "rotation": [0.0, self.rotation_y, self.rotation_z],
            "scale": self.scale,
            "visible": self.visible,
        }


def lat_lon_to_position(lat: float, lon: float, radius: float = MARKER_RADIUS) -> tuple[float, float, float]:
    phi = math.radians(90 - lat)
    theta = math.radians(lon + 180)
    return (
        -(radius * math.sin(phi) * math.cos(theta)),
        radius * math.cos(phi),
        radius * math.sin(phi) * math.sin(theta),
    )


def _motion_for(shape: MarkerShape) -> list[MarkerAnimation]:
    if shape == "rain":
        return [MarkerAnimation(kind="bob", step=0.1, amplitude=0.02, spin=0.1)]
    if shape == "storm":
        return [MarkerAnimation(kind="flash", interval=30)]
    if shape == "snow":
        return [MarkerAnimation(kind="spin_bob", step=0.05, amplitude=0.01, spin=0.02)]
    return []


def _pulse() -> MarkerAnimation:
    return MarkerAnimation(kind="pulse", phase=HIGHLIGHT_SCALE, step=0.01, low=1.3, high=1.7)


def build_marker(
    *,
    city: str,
    lat: float,
    lon: float,
    temperature: float,
    condition: Condition,
    highlighted: bool = False,
) -> Marker:
    shape, color = MARKER_STYLES[condition]
    marker = Marker(
        city=city,
        lat=lat,
        lon=lon,
        position=lat_lon_to_position(lat, lon),
        condition=condition,
        shape=shape,
        color=color,
        label=f"{temperature:g}°",
        highlighted=highlighted,
        animations=_motion_for(shape),
    )
    if highlighted:
        marker.scale = HIGHLIGHT_SCALE
        marker.animations.append(_pulse())
    return marker


def advance(marker: Marker, animation: MarkerAnimation) -> None:
    if animation.kind == "bob":
        animation.phase += animation.step
        marker.offset_y = math.sin(animation.phase) * animation.amplitude
        marker.rotation_z = math.sin(animation.phase) * animation.spin
    elif animation.kind == "spin_bob":
        animation.phase += animation.step
        marker.offset_y = math.sin(animation.phase) * animation.amplitude
        marker.rotation_y += animation.spin
    elif animation.kind == "flash":
        frame = int(animation.phase)
        if frame % animation.interval == 0:
            marker.visible = (frame // animation.interval) % 2 == 0
        animation.phase = frame + 1
    elif animation.kind == "pulse":
        if animation.growing:
            animation.phase += animation.step
            if animation.phase >= animation.high:
                animation.growing = False
        else:
            animation.phase -= animation.step
            if animation.phase <= animation.low:
                animation.growing = True
        marker.scale = animation.phase


class GlobeView(Protocol):
    def update_weather_data(self, update: GlobeUpdate) -> None:
        """Replace the highlighted city marker."""


class GlobeScene:
    def __init__(self, *, auto_rotate: bool = True) -> None:
        self.auto_rotate = auto_rotate
        self.rotation_x = 0.0
        self.rotation_y = 0.0
        self.cloud_rotation_y = 0.0
        self.camera_z = CAMERA_DEFAULT_Z
        self.reference_markers: list[Marker] = []
        self._reference_updates: tuple[GlobeUpdate, ...] = ()
        self.current_marker: Marker | None = None
        self.last_update: GlobeUpdate | None = None

    @property
    def markers(self) -> list[Marker]:
        if self.current_marker is None:
            return list(self.reference_markers)
        return [*self.reference_markers, self.current_marker]

    def set_reference_markers(self, entries: Iterable[GlobeUpdate]) -> None:
        updates = tuple(entries)
        if updates == self._reference_updates and self.reference_markers:
            return
        self._reference_updates = updates
        self.reference_markers = [
            build_marker(
                city=entry.city,
                lat=entry.lat,
                lon=entry.lon,
                temperature=entry.temperature,
                condition=entry.condition,
            )
            for entry in updates
        ]

    def update_weather_data(self, update: GlobeUpdate) -> None:
        self.current_marker = build_marker(
            city=update.city,
            lat=update.lat,
            lon=update.lon,
            temperature=update.temperature,
            condition=update.condition,
            highlighted=True,
        )
        self.last_update = update

    def tick(self) -> None:
        if self.auto_rotate:
            self.rotation_y += GLOBE_SPIN_PER_TICK
        self.cloud_rotation_y += CLOUD_SPIN_PER_TICK
        for marker in self.markers:
            for animation in marker.animations:
                advance(marker, animation)

    def drag(self, delta_x: float, delta_y: float) -> None:
        self.rotation_y += delta_x * DRAG_SENSITIVITY
        self.rotation_x += delta_y * DRAG_SENSITIVITY

    def zoom(self, delta: float) -> None:
        self.camera_z = min(max(self.camera_z + delta * ZOOM_SENSITIVITY, CAMERA_MIN_Z), CAMERA_MAX_Z)

    def as_dict(self) -> dict[str, object]:
        return {
            "rotation": [self.rotation_x, self.rotation_y, 0.0],
            "cloud_rotation": self.cloud_rotation_y,
            "camera_z": self.camera_z,
            "auto_rotate": self.auto_rotate,
            "markers": [marker.as_dict() for marker in self.markers],
        }
