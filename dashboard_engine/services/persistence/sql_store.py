"""
SqlDashboardStore — ``DashboardStore`` backed by the dashboard database.

Single Responsibility: map the persistence API onto the three ORM tables
and run data source queries built by ``QueryBuilder``.

Every SQLAlchemy failure is re-raised as ``PersistenceError`` so callers
only deal with engine exceptions.

Usage::

    store = SqlDashboardStore()              # uses the global db_manager
    rows = await store.list_data_sources()
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError

from dashboard_engine.core.database import DatabaseManager, db_manager
from dashboard_engine.core.exceptions import PersistenceError
from dashboard_engine.models.dashboard_models import (
    DashboardWidget,
    UserDashboardConfig,
    WidgetDataSource,
)
from dashboard_engine.services.catalog.widget_catalog import seed_rows
from dashboard_engine.services.data_sources.descriptor import DataSourceDescriptor
from dashboard_engine.services.data_sources.query_builder import query_builder

logger = logging.getLogger(__name__)


def _plain(value: Any) -> Any:
    """DB scalar → JSON-friendly Python value."""
    if isinstance(value, Decimal):
        return float(value)
    return value


def _widget_row(w: DashboardWidget) -> Dict[str, Any]:
    return {
        "id": w.id,
        "widget_type": w.widget_type,
        "name": w.name,
        "category": w.category,
        "description": w.description or "",
        "default_config": w.default_config or {},
        "is_active": w.is_active,
    }


def _source_row(ds: WidgetDataSource) -> Dict[str, Any]:
    return {
        "id": ds.id,
        "name": ds.name,
        "source_type": ds.source_type,
        "query_config": ds.query_config or {},
        "refresh_interval": ds.refresh_interval,
        "cache_duration": ds.cache_duration,
        "is_active": ds.is_active,
    }


def _config_row(cfg: UserDashboardConfig) -> Dict[str, Any]:
    return {
        "id": cfg.id,
        "user_id": cfg.user_id,
        "tenant_id": cfg.tenant_id,
        "dashboard_name": cfg.dashboard_name,
        "layout_config": cfg.layout_config or {},
        "widget_configs": cfg.widget_configs or [],
        "filters": cfg.filters or {},
        "is_default": bool(cfg.is_default),
        "created_at": cfg.created_at.isoformat() if cfg.created_at else None,
    }


class SqlDashboardStore:

    def __init__(self, manager: Optional[DatabaseManager] = None) -> None:
        self._db = manager or db_manager

    # ─────────────────────────────────────────────────────────────
    #  CATALOG
    # ─────────────────────────────────────────────────────────────

    async def list_widget_types(self) -> List[Dict[str, Any]]:
        try:
            async with self._db.get_session() as session:
                result = await session.execute(
                    select(DashboardWidget)
                    .where(DashboardWidget.is_active.is_(True))
                    .order_by(DashboardWidget.created_at, DashboardWidget.name)
                )
                return [_widget_row(w) for w in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not load widget types: {exc}") from exc

    async def seed_widget_types(self) -> int:
        """Insert the built-in widget types when the table is empty."""
        try:
            async with self._db.get_session() as session:
                count = await session.scalar(select(func.count()).select_from(DashboardWidget))
                if count:
                    return 0
                rows = seed_rows()
                session.add_all(DashboardWidget(**row) for row in rows)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not seed widget types: {exc}") from exc
        logger.info(f"[SqlStore] Seeded {len(rows)} widget type(s)")
        return len(rows)

    # ─────────────────────────────────────────────────────────────
    #  DATA SOURCES
    # ─────────────────────────────────────────────────────────────

    async def list_data_sources(self) -> List[Dict[str, Any]]:
        try:
            async with self._db.get_session() as session:
                result = await session.execute(
                    select(WidgetDataSource)
                    .where(WidgetDataSource.is_active.is_(True))
                    .order_by(WidgetDataSource.name)
                )
                return [_source_row(ds) for ds in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not load data sources: {exc}") from exc

    async def create_data_source(self, descriptor: Dict[str, Any]) -> Dict[str, Any]:
        row = WidgetDataSource(
            name=descriptor["name"],
            source_type=descriptor["source_type"],
            query_config=descriptor.get("query_config") or {},
            refresh_interval=descriptor.get("refresh_interval"),
            cache_duration=descriptor.get("cache_duration"),
            is_active=True,
        )
        try:
            async with self._db.get_session() as session:
                session.add(row)
                await session.flush()
                return _source_row(row)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not create data source: {exc}") from exc

    # ─────────────────────────────────────────────────────────────
    #  DASHBOARDS
    # ─────────────────────────────────────────────────────────────

    async def create_dashboard_config(self, config: Dict[str, Any]) -> Dict[str, Any]:
        row = UserDashboardConfig(
            user_id=config["user_id"],
            tenant_id=config.get("tenant_id"),
            dashboard_name=config["dashboard_name"],
            layout_config=config.get("layout_config") or {},
            widget_configs=config.get("widget_configs") or [],
            filters=config.get("filters") or {},
            is_default=bool(config.get("is_default", False)),
        )
        try:
            async with self._db.get_session() as session:
                session.add(row)
                await session.flush()
                await session.refresh(row)
                return _config_row(row)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not save dashboard: {exc}") from exc

    async def list_user_dashboard_configs(self, user_id: str) -> List[Dict[str, Any]]:
        try:
            async with self._db.get_session() as session:
                result = await session.execute(
                    select(UserDashboardConfig)
                    .where(UserDashboardConfig.user_id == user_id)
                    .order_by(UserDashboardConfig.created_at)
                )
                return [_config_row(c) for c in result.scalars().all()]
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not load dashboards: {exc}") from exc

    # ─────────────────────────────────────────────────────────────
    #  WIDGET DATA
    # ─────────────────────────────────────────────────────────────

    async def fetch_widget_data(
        self,
        data_source: DataSourceDescriptor,
        config: Dict[str, Any],
    ) -> Any:
        """
        Run the data source query.

        Returns a list of row dicts for ``select`` and custom queries,
        ``{"count": n, "value": n}`` for ``count`` and ``{"value": x}``
        for calculated sources.
        """
        sql, params = query_builder.build(data_source)
        try:
            async with self._db.get_session() as session:
                result = await session.execute(text(sql), params)
                rows = [
                    {k: _plain(v) for k, v in dict(r).items()}
                    for r in result.mappings().all()
                ]
        except SQLAlchemyError as exc:
            logger.error(f"[SqlStore] Query for '{data_source.name}' failed: {exc}")
            raise PersistenceError(f"Query for '{data_source.name}' failed") from exc

        logger.debug(f"[SqlStore] '{data_source.name}': {len(rows)} row(s)")

        if data_source.source_type == "calculated":
            return {"value": rows[0].get("value") if rows else 0}
        if (
            data_source.source_type == "table_query"
            and data_source.query_config.get("operation") == "count"
        ):
            count = rows[0].get("count", 0) if rows else 0
            return {"count": count, "value": count}
        return rows
