"""
Dashboard endpoints — save, list and view.

  GET  /api/v1/dashboards         → the caller's saved configurations
  POST /api/v1/dashboards         → save a composed dashboard
  GET  /api/v1/dashboards/view    → render the caller's default dashboard

The caller is identified by the ``X-User-Id`` header (see
``dependencies.get_identity``).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from dashboard_engine.api.v1.dependencies import EngineServices, get_identity, get_services
from dashboard_engine.core.exceptions import PersistenceError
from dashboard_engine.services.dashboard.builder import (
    BuilderSession,
    IdentityContext,
    SaveOutcome,
)
from dashboard_engine.services.dashboard.models import (
    MSG_NOT_LOGGED_IN,
    DashboardConfig,
    WidgetInstance,
    new_widget_id,
)
from dashboard_engine.services.dashboard.notifications import RecordingNotifier

router = APIRouter(prefix="/dashboards", tags=["dashboards"])


# ── Pydantic request models ─────────────────────────────────────

class WidgetInstanceModel(BaseModel):
    id: Optional[str] = None
    widget_type: str
    data_source_id: str = ""
    config: Dict[str, Any] = Field(default_factory=dict)


class DashboardSaveRequest(BaseModel):
    dashboard_name: str = ""
    widget_configs: List[WidgetInstanceModel] = Field(default_factory=list)
    is_default: bool = False


# ── Endpoints ───────────────────────────────────────────────────

@router.get("")
async def list_dashboards(
    identity: IdentityContext = Depends(get_identity),
    services: EngineServices = Depends(get_services),
):
    if not identity.user_id:
        raise HTTPException(status_code=401, detail=MSG_NOT_LOGGED_IN)
    try:
        rows = await services.store.list_user_dashboard_configs(identity.user_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return {"dashboards": [DashboardConfig.from_dict(r).to_dict() for r in rows]}


@router.post("", status_code=201)
async def save_dashboard(
    req: DashboardSaveRequest,
    identity: IdentityContext = Depends(get_identity),
    services: EngineServices = Depends(get_services),
):
    """
    Save the submitted composition through a builder session.

    Rejections (not logged in, empty name, no widgets) → 400 without
    touching the store; store failures → 502.
    """
    notifier = RecordingNotifier()
    session = BuilderSession(
        services.store,
        notifier=notifier,
        identity=identity,
        catalog=services.catalog,
        registry=services.registry,
    )
    session.dashboard_name = req.dashboard_name
    session.is_default = req.is_default
    session.widgets = [
        WidgetInstance(
            id=w.id or new_widget_id(),
            widget_type=w.widget_type,
            data_source_id=w.data_source_id,
            config=dict(w.config),
        )
        for w in req.widget_configs
    ]

    outcome = await session.save_dashboard()
    if outcome == SaveOutcome.REJECTED:
        raise HTTPException(status_code=400, detail=notifier.last_message)
    if outcome == SaveOutcome.FAILED:
        raise HTTPException(status_code=502, detail=notifier.last_message)
    return {"status": outcome.value, "message": notifier.last_message}


@router.get("/view")
async def view_dashboard(
    identity: IdentityContext = Depends(get_identity),
    services: EngineServices = Depends(get_services),
):
    if not identity.user_id:
        raise HTTPException(status_code=401, detail=MSG_NOT_LOGGED_IN)
    try:
        view = await services.viewer.view(identity.user_id)
    except PersistenceError as exc:
        raise HTTPException(status_code=502, detail=str(exc))
    return view.to_dict()
