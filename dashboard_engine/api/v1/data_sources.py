"""
Data source endpoints.

  GET  /api/v1/data-sources       → cached registry snapshot
  POST /api/v1/data-sources       → create (intervals ≥ 60 s)
  GET  /api/v1/data-sources/{id}/data → fetch through the widget binder
"""

from __future__ import annotations

from typing import Any, Dict, Literal

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from dashboard_engine.api.v1.dependencies import EngineServices, get_services
from dashboard_engine.core.exceptions import InvalidDataSourceError, PersistenceError
from dashboard_engine.services.data_sources.descriptor import (
    DEFAULT_CACHE_DURATION,
    DEFAULT_REFRESH_INTERVAL,
    MIN_INTERVAL_SECONDS,
)

router = APIRouter(prefix="/data-sources", tags=["data-sources"])


class DataSourceCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    source_type: Literal["table_query", "custom_query", "calculated"] = "table_query"
    query_config: Dict[str, Any] = Field(default_factory=dict)
    refresh_interval: int = Field(DEFAULT_REFRESH_INTERVAL, ge=MIN_INTERVAL_SECONDS)
    cache_duration: int = Field(DEFAULT_CACHE_DURATION, ge=MIN_INTERVAL_SECONDS)


@router.get("")
async def list_data_sources(services: EngineServices = Depends(get_services)):
    try:
        sources = await services.registry.list_data_sources()
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return {"data_sources": [ds.to_dict() for ds in sources]}


@router.post("", status_code=201)
async def create_data_source(
    req: DataSourceCreate,
    services: EngineServices = Depends(get_services),
):
    try:
        created = await services.registry.create_data_source(req.model_dump())
    except InvalidDataSourceError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return created.to_dict()


@router.get("/{data_source_id}/data")
async def data_source_data(
    data_source_id: str,
    services: EngineServices = Depends(get_services),
):
    """Raw data for one source; errors come back inline like a widget's."""
    data_source = await services.registry.get(data_source_id)
    if data_source is None:
        raise HTTPException(status_code=404, detail="Data source not found")
    state = await services.binder.fetch(data_source, {})
    return state.to_dict()
