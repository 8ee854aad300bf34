"""
WidgetCatalog — Read-only registry of widget types for the builder palette.

Single Responsibility: load ``dashboard_widgets`` rows through the
store, turn them into ``WidgetTypeDescriptor`` snapshots and group them
by category.  Creation of new widget types is not part of the engine;
the table is seeded from ``WIDGET_REGISTRY`` (see ``seed_rows``).

Usage::

    catalog = WidgetCatalog(store)
    types = await catalog.list_widget_types()
    palette = group_by_category(types)      # {"metrics": [...], "charts": [...]}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from dashboard_engine.config.widget_registry import WIDGET_REGISTRY
from dashboard_engine.core.cache import SnapshotCache
from dashboard_engine.core.config import settings
from dashboard_engine.services.persistence.base import DashboardStore

logger = logging.getLogger(__name__)

_CACHE_KEY = "widget_types"


@dataclass(frozen=True)
class WidgetTypeDescriptor:
    """One kind of widget available in the palette."""
    widget_type: str
    name: str
    category: str
    description: str = ""
    default_config: Dict[str, Any] = field(default_factory=dict)
    id: str = ""

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "WidgetTypeDescriptor":
        widget_type = raw["widget_type"]
        registry = WIDGET_REGISTRY.get(widget_type, {})
        return cls(
            widget_type=widget_type,
            name=raw.get("name") or registry.get("name", widget_type),
            category=raw.get("category") or registry.get("category", "other"),
            description=raw.get("description") or "",
            default_config=dict(raw.get("default_config") or registry.get("default_config", {})),
            id=str(raw.get("id") or widget_type),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "widget_type": self.widget_type,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "default_config": self.default_config,
        }


def group_by_category(
    types: Sequence[WidgetTypeDescriptor],
) -> Dict[str, List[WidgetTypeDescriptor]]:
    """Group descriptors by category, keeping first-seen category order."""
    grouped: Dict[str, List[WidgetTypeDescriptor]] = {}
    for descriptor in types:
        grouped.setdefault(descriptor.category, []).append(descriptor)
    return grouped


def seed_rows() -> List[Dict[str, Any]]:
    """``dashboard_widgets`` rows for every registered widget type."""
    return [
        {
            "widget_type": widget_type,
            "name": entry["name"],
            "category": entry["category"],
            "description": entry.get("description", ""),
            "default_config": dict(entry.get("default_config", {})),
        }
        for widget_type, entry in WIDGET_REGISTRY.items()
    ]


class WidgetCatalog:
    """
    Cached, read-only view of the widget catalog.

    ``is_loading`` is ``True`` until the first successful load; callers
    render a skeleton meanwhile.
    """

    def __init__(
        self,
        store: DashboardStore,
        cache: Optional[SnapshotCache] = None,
    ) -> None:
        self._store = store
        self._cache = cache or SnapshotCache(default_ttl=settings.WIDGET_CATALOG_CACHE_SECONDS)

    @property
    def is_loading(self) -> bool:
        return self._cache.get_entry(_CACHE_KEY) is None

    async def list_widget_types(self) -> Tuple[WidgetTypeDescriptor, ...]:
        return await self._cache.get_or_load(_CACHE_KEY, self._load)

    async def get(self, widget_type: str) -> Optional[WidgetTypeDescriptor]:
        for descriptor in await self.list_widget_types():
            if descriptor.widget_type == widget_type:
                return descriptor
        return None

    def snapshot(self) -> Tuple[WidgetTypeDescriptor, ...]:
        """Last loaded snapshot (possibly stale), empty before the first load."""
        entry = self._cache.get_entry(_CACHE_KEY)
        return entry.data if entry else ()

    def cache_info(self) -> Dict[str, Any]:
        return self._cache.get_cache_info()

    async def _load(self) -> Tuple[WidgetTypeDescriptor, ...]:
        rows = await self._store.list_widget_types()
        descriptors: List[WidgetTypeDescriptor] = []
        for row in rows:
            if row.get("widget_type") not in WIDGET_REGISTRY:
                logger.warning(
                    f"[WidgetCatalog] '{row.get('widget_type')}' has no renderer, listed anyway"
                )
            descriptors.append(WidgetTypeDescriptor.from_dict(row))
        logger.info(f"[WidgetCatalog] Loaded {len(descriptors)} widget type(s)")
        return tuple(descriptors)
