"""
DashboardStore — the persistence contract the engine is written against.

Every service receives a store instance explicitly (constructor or
FastAPI ``Depends``) instead of importing a global client, so tests can
hand in the in-memory fake from ``tests/conftest.py``.

Rows are plain dicts shaped like the ``dashboard_widgets``,
``widget_data_sources`` and ``user_dashboard_configs`` tables; the
service layer turns them into dataclasses.
"""

from __future__ import annotations

from typing import Any, Dict, List, Protocol, runtime_checkable

from dashboard_engine.services.data_sources.descriptor import DataSourceDescriptor


@runtime_checkable
class DashboardStore(Protocol):
    """Async persistence API consumed by catalog, registry, builder and viewer."""

    async def list_widget_types(self) -> List[Dict[str, Any]]:
        """Active rows of ``dashboard_widgets``."""
        ...

    async def list_data_sources(self) -> List[Dict[str, Any]]:
        """Active rows of ``widget_data_sources``."""
        ...

    async def create_data_source(self, descriptor: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a data source; returns the stored row (with its id)."""
        ...

    async def create_dashboard_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a dashboard configuration; returns the stored row."""
        ...

    async def list_user_dashboard_configs(self, user_id: str) -> List[Dict[str, Any]]:
        """Every dashboard configuration saved by *user_id*, oldest first."""
        ...

    async def fetch_widget_data(
        self,
        data_source: DataSourceDescriptor,
        config: Dict[str, Any],
    ) -> Any:
        """
        Run the data source's query.

        Returns a list of row dicts (``select`` / custom queries) or a single
        record dict (``count`` / calculated), e.g. ``{"count": 42, "value": 42}``.
        """
        ...
