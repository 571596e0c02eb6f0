from fastapi import APIRouter

from dashboard.api.v1.dashboard import router as dashboard_router
from dashboard.api.v1.export import router as export_router
from dashboard.api.v1.preferences import router as preferences_router

v1_router = APIRouter()

v1_router.include_router(dashboard_router, tags=["Dashboard"])
v1_router.include_router(export_router, tags=["Export"])
v1_router.include_router(preferences_router, tags=["Preferences"])
