"""
Dashboard composition model.

``WidgetInstance`` is one placed widget; ``DashboardConfig`` is the
ordered collection that is saved (and later viewed) as a whole.

Both round-trip through plain dicts shaped like the
``user_dashboard_configs`` JSON columns.
"""

from __future__ import annotations

import itertools
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from dashboard_engine.config.widget_registry import default_layout_config

# ── Precondition messages (shown to the user as-is) ─────────────
MSG_NOT_LOGGED_IN = "You must be logged in to save dashboards"
MSG_NAME_REQUIRED = "Please enter a dashboard name"
MSG_NO_WIDGETS = "Please add at least one widget to your dashboard"

_sequence = itertools.count(1)


def new_widget_id() -> str:
    """Time-based token, unique within the process."""
    return f"widget-{time.time_ns()}-{next(_sequence)}"


@dataclass
class WidgetInstance:
    id: str
    widget_type: str
    data_source_id: str = ""
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        return self.config.get("title") or ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "widget_type": self.widget_type,
            "data_source_id": self.data_source_id,
            "config": dict(self.config),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "WidgetInstance":
        return cls(
            id=str(raw.get("id") or new_widget_id()),
            widget_type=raw["widget_type"],
            data_source_id=raw.get("data_source_id") or "",
            config=dict(raw.get("config") or {}),
        )


@dataclass
class DashboardConfig:
    user_id: Optional[str]
    dashboard_name: str
    widget_configs: List[WidgetInstance] = field(default_factory=list)
    layout_config: Dict[str, Any] = field(default_factory=default_layout_config)
    filters: Dict[str, Any] = field(default_factory=dict)
    is_default: bool = False
    id: Optional[str] = None
    tenant_id: Optional[str] = None
    created_at: Optional[str] = None

    def validate(self) -> Optional[str]:
        """First missing precondition for a save, or ``None`` when valid."""
        if not self.user_id:
            return MSG_NOT_LOGGED_IN
        if not self.dashboard_name.strip():
            return MSG_NAME_REQUIRED
        if not self.widget_configs:
            return MSG_NO_WIDGETS
        return None

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "user_id": self.user_id,
            "tenant_id": self.tenant_id,
            "dashboard_name": self.dashboard_name.strip(),
            "layout_config": dict(self.layout_config),
            "widget_configs": [w.to_dict() for w in self.widget_configs],
            "filters": dict(self.filters),
            "is_default": self.is_default,
        }
        if self.id is not None:
            out["id"] = self.id
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DashboardConfig":
        return cls(
            user_id=raw.get("user_id"),
            dashboard_name=raw.get("dashboard_name") or "",
            widget_configs=[WidgetInstance.from_dict(w) for w in raw.get("widget_configs") or []],
            layout_config=dict(raw.get("layout_config") or default_layout_config()),
            filters=dict(raw.get("filters") or {}),
            is_default=bool(raw.get("is_default", False)),
            id=raw.get("id"),
            tenant_id=raw.get("tenant_id"),
            created_at=raw.get("created_at"),
        )


def pick_default(configs: Sequence[DashboardConfig]) -> Optional[DashboardConfig]:
    """First config flagged ``is_default``, else the first one, else ``None``."""
    for cfg in configs:
        if cfg.is_default:
            return cfg
    return configs[0] if configs else None
