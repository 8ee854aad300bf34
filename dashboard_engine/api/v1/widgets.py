"""
Widget endpoints — catalog, config fields, config merge and render preview.

  GET  /api/v1/widgets/types                 → catalog grouped by category
  GET  /api/v1/widgets/types/{type}/fields   → configuration dialog fields
  POST /api/v1/widgets/config/merge          → validated merge of overrides
  POST /api/v1/widgets/render                → render supplied data (preview)
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from dashboard_engine.api.v1.dependencies import EngineServices, get_services
from dashboard_engine.core.exceptions import PersistenceError
from dashboard_engine.services.catalog.widget_catalog import group_by_category
from dashboard_engine.services.config_fields.engine import schema_resolver
from dashboard_engine.services.widgets.engine import widget_engine

router = APIRouter(prefix="/widgets", tags=["widgets"])


# ── Pydantic request models ─────────────────────────────────────

class ConfigMergeRequest(BaseModel):
    widget_type: str
    existing: Dict[str, Any] = Field(default_factory=dict)
    overrides: Dict[str, Any] = Field(default_factory=dict)


class RenderRequest(BaseModel):
    widget_type: str
    data: Any = None
    config: Dict[str, Any] = Field(default_factory=dict)
    widget_id: Optional[str] = ""


# ── Endpoints ───────────────────────────────────────────────────

@router.get("/types")
async def list_widget_types(services: EngineServices = Depends(get_services)):
    """Available widget types, flat and grouped by category."""
    try:
        types = await services.catalog.list_widget_types()
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return {
        "types": [t.to_dict() for t in types],
        "by_category": {
            category: [t.to_dict() for t in members]
            for category, members in group_by_category(types).items()
        },
    }


@router.get("/types/{widget_type}/fields")
async def widget_fields(
    widget_type: str,
    services: EngineServices = Depends(get_services),
):
    """Field definitions for the configuration dialog of *widget_type*."""
    try:
        descriptor = await services.catalog.get(widget_type)
        sources = await services.registry.list_data_sources()
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    if descriptor is None:
        raise HTTPException(status_code=404, detail=f"Unknown widget type: {widget_type}")
    return {
        "widget_type": widget_type,
        "default_config": descriptor.default_config,
        "fields": schema_resolver.describe(widget_type, sources, descriptor.name),
    }


@router.post("/config/merge")
async def merge_widget_config(
    req: ConfigMergeRequest,
    services: EngineServices = Depends(get_services),
):
    """Merge *overrides* onto *existing*; invalid values are reported, not applied."""
    sources = services.registry.snapshot()
    result = schema_resolver.validate_overrides(req.widget_type, req.overrides, sources)
    return {
        "config": schema_resolver.merge_config(req.existing, result["cleaned"]),
        "valid": result["valid"],
        "errors": result["errors"],
    }


@router.post("/render")
async def render_widget(req: RenderRequest):
    """Render caller-supplied data; unknown types come back as a notice."""
    result = widget_engine.render(req.widget_type, req.data, req.config, req.widget_id or "")
    return result.to_dict()
