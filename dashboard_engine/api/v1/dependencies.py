"""
FastAPI dependencies — shared engine services and request identity.

Single Responsibility: provide reusable ``Depends()`` callables so the
endpoints never build stores or caches themselves.

``get_services`` returns one long-lived ``EngineServices`` bundle so the
catalog, registry and widget-data caches survive across requests.  Tests
override it with a bundle built on the in-memory store::

    app.dependency_overrides[get_services] = lambda: EngineServices.build(store)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Header

from dashboard_engine.services.catalog.widget_catalog import WidgetCatalog
from dashboard_engine.services.dashboard.builder import IdentityContext
from dashboard_engine.services.dashboard.viewer import DashboardViewer
from dashboard_engine.services.data_sources.registry import DataSourceRegistry
from dashboard_engine.services.persistence.base import DashboardStore
from dashboard_engine.services.widgets.binding import WidgetDataBinder


@dataclass
class EngineServices:
    """Everything an endpoint needs, wired to one store."""
    store: DashboardStore
    catalog: WidgetCatalog
    registry: DataSourceRegistry
    binder: WidgetDataBinder
    viewer: DashboardViewer

    @classmethod
    def build(cls, store: DashboardStore) -> "EngineServices":
        catalog = WidgetCatalog(store)
        registry = DataSourceRegistry(store)
        binder = WidgetDataBinder(store)
        viewer = DashboardViewer(store, catalog=catalog, registry=registry, binder=binder)
        return cls(
            store=store,
            catalog=catalog,
            registry=registry,
            binder=binder,
            viewer=viewer,
        )


_services: Optional[EngineServices] = None


def get_services() -> EngineServices:
    """Dependency: process-wide services over the SQL store (built lazily)."""
    global _services
    if _services is None:
        from dashboard_engine.services.persistence.sql_store import SqlDashboardStore

        _services = EngineServices.build(SqlDashboardStore())
    return _services


def get_identity(
    x_user_id: Optional[str] = Header(None),
    x_tenant_id: Optional[str] = Header(None),
) -> IdentityContext:
    """
    Dependency: current user from the ``X-User-Id`` header.

    Authentication happens upstream; a missing header simply means
    "not logged in" and saves are rejected.
    """
    return IdentityContext(user_id=x_user_id or None, tenant_id=x_tenant_id or None)
