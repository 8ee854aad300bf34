"""
API v1 — Router aggregation.
"""

from fastapi import APIRouter

from dashboard_engine.api.v1.system import router as system_router
from dashboard_engine.api.v1.widgets import router as widgets_router
from dashboard_engine.api.v1.data_sources import router as data_sources_router
from dashboard_engine.api.v1.dashboards import router as dashboards_router

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(system_router)
api_router.include_router(widgets_router)
api_router.include_router(data_sources_router)
api_router.include_router(dashboards_router)
