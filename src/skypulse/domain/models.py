from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Condition(str, Enum):
    SUNNY = "Sunny"
    CLOUDY = "Cloudy"
    RAINY = "Rainy"
    STORMY = "Stormy"
    SNOWY = "Snowy"


class HourPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: str
    temp_c: float
    condition: Condition
    humidity_pct: int = Field(default=0, ge=0, le=100)
    wind_kph: float = Field(default=0.0, ge=0)

    @field_validator("time")
    @classmethod
    def validate_time(cls, value: str) -> str:
        hours, _, minutes = value.partition(":")
        if len(hours) != 2 or len(minutes) != 2 or not (hours + minutes).isdigit():
            raise ValueError("hour point time must be formatted as HH:MM")
        return value


class DayPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    high_c: float
    low_c: float
    condition: Condition


class WeatherSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str
    country: str = ""
    lat: float
    lon: float
    temperature_c: float
    condition: Condition
    feels_like_c: float
    humidity_pct: int = Field(ge=0, le=100)
    wind_kph: float = Field(ge=0)
    pressure_mb: float
    hourly: tuple[HourPoint, ...] = Field(default=(), max_length=8)
    daily: tuple[DayPoint, ...] = Field(default=(), max_length=7)


class ParticleProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=0)
    color: tuple[int, int, int]
    speed: float = Field(ge=0)
    size: float = Field(gt=0)
    motion: Literal["bounce", "fall", "flutter"]


class EffectProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    icon: str
    animation: str | None = None
    particles: ParticleProfile
    background_class: str
    overlays: tuple[str, ...] = ()


class GlobeUpdate(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str
    lat: float
    lon: float
    temperature: int
    condition: Condition
