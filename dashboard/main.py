from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard.api.v1.router import v1_router
from dashboard.config import settings
from dashboard.core.exceptions import DashboardError, dashboard_error_handler
from dashboard.core.middleware import RequestLoggingMiddleware
from dashboard.schemas.status import RefreshPolicy, WindowSelection
from dashboard.services.history_client import HistoryClient
from dashboard.services.preferences import PreferenceStore
from dashboard.services.refresh import RefreshController

_NAME_TO_LEVEL = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "warn": 30,
    "error": 40,
    "critical": 50,
}

structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        _NAME_TO_LEVEL.get(settings.log_level.lower(), 20)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    preferences = PreferenceStore(settings.preferences_path)
    preferences.load()
    app.state.preferences = preferences

    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=settings.http_connect_timeout,
            read=settings.http_read_timeout,
            write=5.0,
            pool=5.0,
        )
    )
    history = HistoryClient(
        base_url=settings.history_base_url,
        http_client=http_client,
        history_path=settings.history_path,
    )
    controller = RefreshController(
        history,
        page_size=settings.page_size,
        window=WindowSelection(preset_hours=settings.default_window_hours),
    )
    app.state.refresh_controller = controller

    # Initial load; a backend that is still starting is not fatal
    try:
        await controller.refresh(manual=True)
    except DashboardError as exc:
        logger.warning("initial_load_failed", error=exc.message)

    controller.set_policy(RefreshPolicy.parse(settings.refresh_interval))

    logger.info(
        "dashboard_starting",
        history_url=settings.history_base_url,
        window_hours=settings.default_window_hours,
        refresh_interval=settings.refresh_interval,
        theme=preferences.theme,
    )
    yield

    await controller.close()
    await history.close()
    logger.info("dashboard_stopping")


app = FastAPI(
    title="Connectivity Dashboard",
    description="Connectivity history analytics: outages, statistics, charts and reports",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_exception_handler(DashboardError, dashboard_error_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(v1_router)


@app.get("/")
async def root():
    return {"service": "connectivity-dashboard", "version": "0.1.0"}
