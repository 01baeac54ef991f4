from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .domain.models import Condition

PROJECT_ROOT = Path(__file__).resolve().parents[2]
PLACEHOLDER_API_KEYS = {"", "your_actual_api_key_here"}

DEFAULT_POPULAR_CITIES = [
    "New York", "London", "Tokyo", "Paris", "Sydney",
    "Berlin", "Mumbai", "Moscow", "Dubai", "Singapore",
    "Toronto", "Los Angeles", "Chicago", "Miami", "Seattle",
    "Beijing", "Shanghai", "Hong Kong", "Seoul", "Bangkok",
    "Rome", "Madrid", "Amsterdam", "Vienna", "Prague",
]


class UiSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = "SkyPulse"
    success_flash_seconds: float = Field(default=2.0, ge=0, le=60)
    error_flash_seconds: float = Field(default=3.0, ge=0, le=60)
    suggestion_limit: int = Field(default=8, ge=1, le=25)
    suggestion_min_chars: int = Field(default=2, ge=1, le=10)
    canvas_width: int = Field(default=1280, ge=1)
    canvas_height: int = Field(default=720, ge=1)


class SearchSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    default_city: str = "New York"
    history_limit: int = Field(default=10, ge=1, le=100)
    popular_cities: list[str] = Field(default_factory=lambda: list(DEFAULT_POPULAR_CITIES))

    @field_validator("default_city")
    @classmethod
    def validate_default_city(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("search.default_city must not be empty")
        return text

    @field_validator("popular_cities")
    @classmethod
    def validate_popular_cities(cls, values: list[str]) -> list[str]:
        cleaned = [" ".join(value.split()) for value in values if isinstance(value, str)]
        return list(dict.fromkeys(city for city in cleaned if city))


class WeatherSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    provider: Literal["openweathermap"] = "openweathermap"
    units: Literal["metric"] = "metric"
    timeout_seconds: float = Field(default=10.0, gt=0, le=60)
    cache_ttl_seconds: int = Field(default=600, ge=0, le=86400)


class MockSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    seed: int | None = None


class ReferenceCity(BaseModel):
    model_config = ConfigDict(extra="ignore")

    city: str
    lat: float = Field(ge=-90, le=90)
    lon: float = Field(ge=-180, le=180)
    temp: float = 20.0
    condition: Condition = Condition.SUNNY

    @field_validator("city")
    @classmethod
    def validate_city(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("globe.reference_cities[].city must not be empty")
        return text


def _default_reference_cities() -> list[ReferenceCity]:
    return [
        ReferenceCity(city="New York", lat=40.7128, lon=-74.0060, temp=22, condition=Condition.SUNNY),
        ReferenceCity(city="London", lat=51.5074, lon=-0.1278, temp=15, condition=Condition.CLOUDY),
        ReferenceCity(city="Tokyo", lat=35.6762, lon=139.6503, temp=18, condition=Condition.RAINY),
        ReferenceCity(city="Sydney", lat=-33.8688, lon=151.2093, temp=25, condition=Condition.SUNNY),
        ReferenceCity(city="Dubai", lat=25.2048, lon=55.2708, temp=35, condition=Condition.SUNNY),
        ReferenceCity(city="Moscow", lat=55.7558, lon=37.6173, temp=5, condition=Condition.SNOWY),
    ]


class GlobeSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    reference_cities: list[ReferenceCity] = Field(default_factory=_default_reference_cities)
    auto_rotate: bool = True


class RefreshSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    interval_minutes: int = Field(default=30, ge=1, le=1440)
    jitter_seconds: int = Field(default=15, ge=0, le=300)


class ClientSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    api_base_url: str | None = None
    timeout_seconds: float = Field(default=10.0, gt=0, le=60)

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip().rstrip("/")
        if not text:
            return None
        if not text.startswith(("http://", "https://")):
            raise ValueError("client.api_base_url must be an absolute http(s) URL")
        return text


class SkyPulseYamlSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ui: UiSettings = Field(default_factory=UiSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    weather: WeatherSettings = Field(default_factory=WeatherSettings)
    mock: MockSettings = Field(default_factory=MockSettings)
    globe: GlobeSettings = Field(default_factory=GlobeSettings)
    refresh: RefreshSettings = Field(default_factory=RefreshSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    skypulse_env: Literal["dev", "test", "prod"] = "dev"
    skypulse_timezone: str = "UTC"
    skypulse_config_path: Path = Path("config/skypulse.yaml")
    skypulse_db_path: Path = Path("data/skypulse.db")
    openweather_api_key: str | None = None

    @field_validator("skypulse_timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("openweather_api_key")
    @classmethod
    def validate_api_key(cls, value: str | None) -> str | None:
        if value is None or value.strip() in PLACEHOLDER_API_KEYS:
            return None
        return value.strip()


class AppSettings(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    env: EnvSettings
    yaml: SkyPulseYamlSettings
    project_root: Path
    config_path: Path
    db_path: Path
    timezone: ZoneInfo

    @property
    def weather_api_configured(self) -> bool:
        return self.env.openweather_api_key is not None


def _resolve_project_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def _load_yaml_settings(path: Path) -> SkyPulseYamlSettings:
    if not path.exists():
        raise FileNotFoundError(f"SkyPulse config file not found: {path}")

    raw_config = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValueError("SkyPulse config must be a YAML mapping/object at the top level")
    return SkyPulseYamlSettings.model_validate(raw_config)


def build_settings(env: EnvSettings, yaml_settings: SkyPulseYamlSettings) -> AppSettings:
    return AppSettings(
        env=env,
        yaml=yaml_settings,
        project_root=PROJECT_ROOT,
        config_path=_resolve_project_path(env.skypulse_config_path),
        db_path=_resolve_project_path(env.skypulse_db_path),
        timezone=ZoneInfo(env.skypulse_timezone),
    )


@lru_cache(maxsize=1)
def load_settings() -> AppSettings:
    env = EnvSettings()
    yaml_settings = _load_yaml_settings(_resolve_project_path(env.skypulse_config_path))
    return build_settings(env, yaml_settings)
