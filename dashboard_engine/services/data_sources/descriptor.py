"""
DataSourceDescriptor — Immutable definition of one widget data origin.

Parsed from a ``widget_data_sources`` row (or an API payload).

``query_config`` shape per ``source_type``::

    table_query  → {"table": "companies", "operation": "select" | "count",
                    "columns": "id, name" | "*",
                    "filters": [{"column", "operator", "value"}, ...]}
    custom_query → {"query": "SELECT ..."}
    calculated   → {"table": "subscriptions", "aggregate": "sum",
                    "column": "amount", "filters": [...]}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SOURCE_TYPES = ("table_query", "custom_query", "calculated")
TABLE_OPERATIONS = ("select", "count")
FILTER_OPERATORS = ("equals", "contains", "greater_than", "less_than")
CALCULATED_AGGREGATES = ("count", "sum", "avg", "min", "max")

MIN_INTERVAL_SECONDS = 60
DEFAULT_REFRESH_INTERVAL = 300
DEFAULT_CACHE_DURATION = 300


@dataclass(frozen=True)
class QueryFilter:
    """One ``column operator value`` condition of a table query."""
    column: str
    operator: str = "equals"
    value: str = ""

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "QueryFilter":
        return cls(
            column=str(raw.get("column", "")),
            operator=str(raw.get("operator", "equals")),
            value=str(raw.get("value", "")),
        )

    def to_dict(self) -> Dict[str, str]:
        return {"column": self.column, "operator": self.operator, "value": self.value}


@dataclass(frozen=True)
class DataSourceDescriptor:
    """Immutable snapshot of a data source as the registry serves it."""
    id: str
    name: str
    source_type: str
    query_config: Dict[str, Any] = field(default_factory=dict)
    refresh_interval: int = DEFAULT_REFRESH_INTERVAL
    cache_duration: int = DEFAULT_CACHE_DURATION
    is_active: bool = True

    @property
    def filters(self) -> List[QueryFilter]:
        return [QueryFilter.from_dict(f) for f in self.query_config.get("filters") or []]

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DataSourceDescriptor":
        return cls(
            id=str(raw.get("id") or ""),
            name=raw.get("name", ""),
            source_type=raw.get("source_type", "table_query"),
            query_config=dict(raw.get("query_config") or {}),
            refresh_interval=_interval(raw.get("refresh_interval"), DEFAULT_REFRESH_INTERVAL),
            cache_duration=_interval(raw.get("cache_duration"), DEFAULT_CACHE_DURATION),
            is_active=raw.get("is_active", True),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "source_type": self.source_type,
            "query_config": self.query_config,
            "refresh_interval": self.refresh_interval,
            "cache_duration": self.cache_duration,
            "is_active": self.is_active,
        }


def _interval(value: Optional[Any], default: int) -> int:
    """Nullable DB interval → seconds (never below the 60s floor)."""
    if value is None:
        return default
    return max(MIN_INTERVAL_SECONDS, int(value))
