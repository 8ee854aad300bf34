"""System endpoints — health check, cache info, cache refresh."""

from fastapi import APIRouter, Depends, HTTPException

from dashboard_engine.api.v1.dependencies import EngineServices, get_services
from dashboard_engine.core.exceptions import PersistenceError

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health")
async def health_check(services: EngineServices = Depends(get_services)):
    """Basic liveness probe."""
    return {
        "status": "ok",
        "catalog_loaded": not services.catalog.is_loading,
        "data_sources_loaded": not services.registry.is_loading,
    }


@router.get("/cache/info")
async def cache_info(services: EngineServices = Depends(get_services)):
    """Age, TTL and size of every cached snapshot."""
    return {
        "catalog": services.catalog.cache_info(),
        "data_sources": services.registry.cache_info(),
        "widget_data": services.binder.cache_info(),
    }


@router.post("/cache/refresh")
async def cache_refresh(services: EngineServices = Depends(get_services)):
    """Drop cached data sources and widget results, then reload the registry."""
    services.binder.invalidate()
    try:
        sources = await services.registry.refresh()
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return {"status": "refreshed", "data_sources": len(sources)}
