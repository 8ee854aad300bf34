"""
Dashboard Database Models.

Tables: dashboard_widgets, widget_data_sources, user_dashboard_configs.

``widget_configs`` / ``layout_config`` / ``query_config`` are JSON columns;
their shapes are owned by the service layer (see
``services/dashboard/models.py`` and ``services/data_sources/registry.py``).
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, JSON, func
from sqlalchemy.orm import Mapped, mapped_column

from dashboard_engine.core.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class DashboardWidget(Base):
    """Widget type available in the builder palette."""
    __tablename__ = "dashboard_widgets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    widget_type: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    default_config: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )


class WidgetDataSource(Base):
    """Named origin of widget data (table query, custom SQL or calculated metric)."""
    __tablename__ = "widget_data_sources"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    source_type: Mapped[str] = mapped_column(String(30), nullable=False)
    query_config: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    refresh_interval: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cache_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )


class UserDashboardConfig(Base):
    """A saved dashboard: ordered widget instances plus layout metadata."""
    __tablename__ = "user_dashboard_configs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    tenant_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True)
    dashboard_name: Mapped[str] = mapped_column(String(150), nullable=False)
    layout_config: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    widget_configs: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    filters: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    is_default: Mapped[Optional[bool]] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.current_timestamp()
    )
