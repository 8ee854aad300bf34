"""
DataSourceForm — Editable state behind the "create data source" dialog.

Holds the pending descriptor fields plus the filter being typed.  A
filter is only appended when both its column and value are filled in;
anything else is a silent no-op, not an error.  ``reset()`` puts every
field back to its default after a successful create.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from dashboard_engine.services.data_sources.descriptor import (
    DEFAULT_CACHE_DURATION,
    DEFAULT_REFRESH_INTERVAL,
    QueryFilter,
)


def _default_query_config() -> Dict[str, Any]:
    return {
        "table": "",
        "operation": "select",
        "columns": "*",
        "filters": [],
        "query": "",
    }


@dataclass
class DataSourceForm:
    name: str = ""
    source_type: str = "table_query"
    query_config: Dict[str, Any] = field(default_factory=_default_query_config)
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    cache_duration: int = DEFAULT_CACHE_DURATION
    new_filter: QueryFilter = field(default_factory=lambda: QueryFilter(column=""))

    # ── Filters ──────────────────────────────────────────────

    @property
    def filters(self) -> List[Dict[str, str]]:
        return self.query_config["filters"]

    def set_new_filter(self, column: str = "", operator: str = "equals", value: str = "") -> None:
        self.new_filter = QueryFilter(column=column, operator=operator, value=value)

    def add_filter(self) -> bool:
        """Append the pending filter; returns ``False`` (no-op) if incomplete."""
        pending = self.new_filter
        if not pending.column.strip() or not pending.value.strip():
            return False
        self.query_config["filters"] = self.filters + [pending.to_dict()]
        self.new_filter = QueryFilter(column="")
        return True

    def remove_filter(self, index: int) -> None:
        self.query_config["filters"] = [
            f for i, f in enumerate(self.filters) if i != index
        ]

    # ── Lifecycle ────────────────────────────────────────────

    def to_descriptor(self) -> Dict[str, Any]:
        """Payload for ``DataSourceRegistry.create_data_source``."""
        return {
            "name": self.name.strip(),
            "source_type": self.source_type,
            "query_config": _query_config_for(self.source_type, self.query_config),
            "refresh_interval": self.refresh_interval,
            "cache_duration": self.cache_duration,
        }

    def reset(self) -> None:
        fresh = DataSourceForm()
        self.name = fresh.name
        self.source_type = fresh.source_type
        self.query_config = fresh.query_config
        self.refresh_interval = fresh.refresh_interval
        self.cache_duration = fresh.cache_duration
        self.new_filter = fresh.new_filter


def _query_config_for(source_type: str, raw: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only the keys that matter for *source_type*."""
    if source_type == "custom_query":
        return {"query": raw.get("query", "")}
    if source_type == "calculated":
        return {
            "table": raw.get("table", ""),
            "aggregate": raw.get("aggregate", "count"),
            "column": raw.get("column", "*"),
            "filters": list(raw.get("filters") or []),
        }
    return {
        "table": raw.get("table", ""),
        "operation": raw.get("operation", "select"),
        "columns": raw.get("columns", "*"),
        "filters": list(raw.get("filters") or []),
    }
