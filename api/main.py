"""FastAPI service publishing the series files and the dashboard page."""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

from dashboard.config import default_dashboard_config
from dashboard.loader import DashboardLoadError, DataSource, DirectoryDataSource, HttpDataSource
from dashboard.render import build_dashboard, render_error_page, render_page_html
from storage.snapshots import get_data_dir

DATA_URL_ENV = "DASHBOARD_DATA_URL"
DATA_MOUNT_NAME = "data"
load_dotenv()

logger = logging.getLogger(__name__)


def _mount_data_dir(application: FastAPI, data_dir: Path) -> None:
    """Publish ``data_dir`` at ``/data``, replacing a mount left by an earlier startup."""

    application.router.routes[:] = [
        route
        for route in application.router.routes
        if getattr(route, "name", None) != DATA_MOUNT_NAME
    ]
    application.mount(
        "/data", StaticFiles(directory=data_dir, check_dir=False), name=DATA_MOUNT_NAME
    )


@asynccontextmanager
async def lifespan(application: FastAPI):
    data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    _mount_data_dir(application, data_dir)
    yield


app = FastAPI(title="FRED Weekly Dashboard", version="0.1.0", lifespan=lifespan)


def _configure_cors() -> None:
    raw_origins = os.getenv("API_CORS_ORIGINS", "*")
    origins = [origin.strip() for origin in raw_origins.split(",") if origin.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )


_configure_cors()


def resolve_data_source() -> DataSource:
    base_url = os.getenv(DATA_URL_ENV)
    if base_url:
        return HttpDataSource(base_url)
    return DirectoryDataSource(get_data_dir())


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/", response_class=HTMLResponse)
async def dashboard() -> HTMLResponse:
    try:
        view = await build_dashboard(default_dashboard_config(), resolve_data_source())
    except DashboardLoadError as exc:
        logger.exception("Dashboard render failed")
        return HTMLResponse(render_error_page(exc), status_code=502)
    return HTMLResponse(render_page_html(view))
