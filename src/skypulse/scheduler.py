from __future__ import annotations

import logging
from datetime import datetime, timezone

from apscheduler.schedulers.background import BackgroundScheduler

from .domain.models import GlobeUpdate
from .domain.transform import round_half_up, transform
from .render.coordinator import globe_update
from .service import WeatherService
from .settings import AppSettings
from .storage.cache import get_cache_payload, prune_expired_entries, set_cache_entry

LOGGER = logging.getLogger(__name__)

REFERENCE_MARKERS_CACHE_KEY = "globe.reference_markers"


def configured_reference_markers(settings: AppSettings) -> list[GlobeUpdate]:
    return [
        GlobeUpdate(
            city=entry.city,
            lat=entry.lat,
            lon=entry.lon,
            temperature=round_half_up(entry.temp),
            condition=entry.condition,
        )
        for entry in settings.yaml.globe.reference_cities
    ]


def load_reference_markers(settings: AppSettings) -> list[GlobeUpdate]:
    payload = get_cache_payload(settings.db_path, REFERENCE_MARKERS_CACHE_KEY, allow_stale=True)
    if not isinstance(payload, dict) or not isinstance(payload.get("markers"), list):
        return configured_reference_markers(settings)

    markers: list[GlobeUpdate] = []
    for item in payload["markers"]:
        try:
            markers.append(GlobeUpdate.model_validate(item))
        except ValueError:
            LOGGER.warning("Ignoring malformed cached reference marker: %r", item)
    return markers or configured_reference_markers(settings)


def run_reference_markers_refresh_job(settings: AppSettings, service: WeatherService) -> None:
    if not service.api_configured:
        LOGGER.debug("Reference marker refresh skipped; weather API not configured")
        return

    refreshed_at = datetime.now(timezone.utc)
    markers: list[GlobeUpdate] = []
    for entry in settings.yaml.globe.reference_cities:
        try:
            envelope = service.get_weather(entry.city)
        except Exception:
            LOGGER.exception("Reference marker refresh failed for '%s'", entry.city)
            continue
        if envelope.get("source") != "api":
            LOGGER.info("Keeping configured marker for '%s'; live data unavailable", entry.city)
            markers.extend(
                marker for marker in configured_reference_markers(settings) if marker.city == entry.city
            )
            continue
        snapshot = transform(envelope.get("data"), fallback_city=entry.city)
        markers.append(globe_update(snapshot).model_copy(update={"lat": entry.lat, "lon": entry.lon}))

    payload = {
        "refreshed_at_utc": refreshed_at.isoformat(),
        "count": len(markers),
        "markers": [marker.model_dump(mode="json") for marker in markers],
    }
    ttl_seconds = max(settings.yaml.refresh.interval_minutes * 120, 300)
    set_cache_entry(
        settings.db_path,
        REFERENCE_MARKERS_CACHE_KEY,
        payload,
        ttl_seconds=ttl_seconds,
        fetched_at=refreshed_at,
    )
    LOGGER.info("Reference marker refresh updated '%s' at %s", REFERENCE_MARKERS_CACHE_KEY, refreshed_at)


def run_cache_prune_job(settings: AppSettings) -> None:
    deleted = prune_expired_entries(settings.db_path)
    if deleted:
        LOGGER.info("Pruned %s expired cache entries", deleted)


def build_scheduler(settings: AppSettings, service: WeatherService) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone=settings.timezone)
    scheduler.add_job(
        run_reference_markers_refresh_job,
        "interval",
        kwargs={"settings": settings, "service": service},
        minutes=settings.yaml.refresh.interval_minutes,
        jitter=settings.yaml.refresh.jitter_seconds,
        id="reference_markers_refresh_job",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=120,
    )
    scheduler.add_job(
        run_cache_prune_job,
        "interval",
        kwargs={"settings": settings},
        minutes=settings.yaml.refresh.interval_minutes,
        jitter=settings.yaml.refresh.jitter_seconds,
        id="cache_prune_job",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=300,
    )
    return scheduler
