from __future__ import annotations

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from starlette.exceptions import HTTPException as StarletteHTTPException

from .adapters.weather import WeatherAdapter
from .dashboard import Dashboard, build_fetcher
from .scheduler import build_scheduler, load_reference_markers, run_reference_markers_refresh_job
from .service import WeatherService, build_weather_adapter
from .session.history import HistoryStore
from .settings import AppSettings, load_settings
from .storage.db import initialize_database
from .storage.history import SqliteHistoryStore

LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
TEMPLATES_DIR = BASE_DIR / "web" / "templates"
MAX_TICK_FRAMES = 600

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))


def _get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def _get_service(request: Request) -> WeatherService:
    return request.app.state.service


def _get_dashboard(request: Request) -> Dashboard:
    return request.app.state.dashboard


def _current_date_label(settings: AppSettings) -> str:
    now = datetime.now(settings.timezone)
    return f"{now:%A}, {now:%B} {now.day}, {now.year}"


def _weather_tile(request: Request) -> HTMLResponse:
    dashboard = _get_dashboard(request)
    return templates.TemplateResponse(
        request,
        "components/tile_weather.html",
        dashboard.context(),
    )


def create_app(
    settings: AppSettings | None = None,
    *,
    adapter: WeatherAdapter | None = None,
    history_store: HistoryStore | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(application: FastAPI):
        app_settings = settings or load_settings()
        initialize_database(app_settings.db_path)

        weather_adapter = adapter if adapter is not None else build_weather_adapter(app_settings)
        service = WeatherService(app_settings, adapter=weather_adapter, rng=rng)
        await asyncio.to_thread(run_reference_markers_refresh_job, app_settings, service)

        dashboard = Dashboard(
            app_settings,
            fetcher=build_fetcher(app_settings, service),
            history_store=history_store or SqliteHistoryStore(app_settings.db_path),
            rng=rng,
            reference_markers=load_reference_markers(app_settings),
        )
        scheduler = build_scheduler(app_settings, service)
        scheduler.start()

        application.state.settings = app_settings
        application.state.service = service
        application.state.dashboard = dashboard
        application.state.scheduler = scheduler
        application.state.started_at_utc = datetime.now(timezone.utc)

        if app_settings.weather_api_configured:
            LOGGER.info("Weather API: configured")
        else:
            LOGGER.info("Weather API: not configured - using mock data")
        await dashboard.load_default()

        try:
            yield
        finally:
            dashboard.close()
            if scheduler.running:
                scheduler.shutdown(wait=False)

    application = FastAPI(title="SkyPulse", version="0.1.0", lifespan=lifespan)
    _register_routes(application)
    return application


def _register_routes(application: FastAPI) -> None:
    @application.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404 and exc.detail == "Not Found":
            return JSONResponse({"success": False, "error": "Endpoint not found"}, status_code=404)
        return JSONResponse({"success": False, "error": exc.detail}, status_code=exc.status_code)

    @application.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("Unhandled error while serving %s", request.url.path)
        return JSONResponse(
            {"success": False, "error": "Something went wrong!", "message": str(exc)},
            status_code=500,
        )

    @application.get("/", response_class=HTMLResponse)
    async def dashboard_page(request: Request) -> HTMLResponse:
        settings = _get_settings(request)
        dashboard = _get_dashboard(request)
        return templates.TemplateResponse(
            request,
            "dashboard.html",
            {
                "title": settings.yaml.ui.title,
                "current_date": _current_date_label(settings),
                "environment": settings.env.skypulse_env,
                **dashboard.context(),
            },
        )

    @application.get("/api/health", response_class=JSONResponse)
    async def health(request: Request) -> JSONResponse:
        settings = _get_settings(request)
        return JSONResponse(
            {
                "status": "OK",
                "message": "SkyPulse server is running",
                "weatherAPI": "Configured" if _get_service(request).api_configured else "Not configured",
                "environment": settings.env.skypulse_env,
                "scheduler_running": request.app.state.scheduler.running,
                "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            }
        )

    @application.get("/api/weather", response_class=JSONResponse)
    def weather(request: Request, city: str | None = Query(default=None)) -> JSONResponse:
        if city is None or not city.strip():
            raise HTTPException(status_code=400, detail="City parameter is required")

        service = _get_service(request)
        try:
            envelope = service.get_weather(city.strip())
        except Exception:
            LOGGER.exception("Error in weather endpoint for '%s'", city)
            envelope = service.fallback(city.strip())
        return JSONResponse(envelope)

    @application.get("/api/suggestions", response_class=JSONResponse)
    async def suggestions(request: Request, q: str = "") -> JSONResponse:
        dashboard = _get_dashboard(request)
        return JSONResponse({"query": q, "suggestions": dashboard.session.on_input(q)})

    @application.delete("/api/suggestions", response_class=JSONResponse)
    async def dismiss_suggestions(request: Request) -> JSONResponse:
        dashboard = _get_dashboard(request)
        dashboard.session.dismiss_suggestions()
        return JSONResponse({"suggestions": []})

    @application.post("/search", response_class=HTMLResponse)
    async def search(request: Request, city: str = "") -> HTMLResponse:
        dashboard = _get_dashboard(request)
        await dashboard.session.submit(city)
        return _weather_tile(request)

    @application.get("/partials/weather", response_class=HTMLResponse)
    async def partial_weather(request: Request) -> HTMLResponse:
        return _weather_tile(request)

    @application.get("/api/state", response_class=JSONResponse)
    async def state(request: Request) -> JSONResponse:
        dashboard = _get_dashboard(request)
        snapshot = dashboard.coordinator.snapshot
        effect = dashboard.coordinator.effect
        field = dashboard.effects.field
        payload: dict[str, Any] = {
            "session": dashboard.state.as_dict(),
            "applied_render": dashboard.coordinator.applied_ticket,
            "snapshot": snapshot.model_dump(mode="json") if snapshot is not None else None,
            "effect": effect.model_dump(mode="json") if effect is not None else None,
            "particle_count": len(field.particles) if field is not None else 0,
        }
        return JSONResponse(payload)

    @application.get("/api/globe", response_class=JSONResponse)
    async def globe(request: Request, frames: int = Query(default=0, ge=0)) -> JSONResponse:
        settings = _get_settings(request)
        dashboard = _get_dashboard(request)
        dashboard.globe.set_reference_markers(load_reference_markers(settings))
        for _ in range(min(frames, MAX_TICK_FRAMES)):
            dashboard.tick()
        return JSONResponse(dashboard.globe.as_dict())


app = create_app()
