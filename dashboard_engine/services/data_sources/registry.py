"""
DataSourceRegistry — Cached catalog of widget data sources.

Single Responsibility: serve immutable snapshots of the
``widget_data_sources`` rows and accept new descriptors.

The snapshot is a tuple of frozen ``DataSourceDescriptor`` objects.
Creating a data source writes through the store and then replaces the
snapshot; a reader holding the previous tuple keeps a consistent view.

Usage::

    registry = DataSourceRegistry(store)
    sources  = await registry.list_data_sources()
    users    = await registry.find_by_name("Users Count")
    await registry.create_data_source(form.to_descriptor())
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from dashboard_engine.core.cache import SnapshotCache
from dashboard_engine.core.config import settings
from dashboard_engine.core.exceptions import InvalidDataSourceError
from dashboard_engine.services.data_sources.descriptor import (
    DEFAULT_CACHE_DURATION,
    DEFAULT_REFRESH_INTERVAL,
    MIN_INTERVAL_SECONDS,
    SOURCE_TYPES,
    DataSourceDescriptor,
)
from dashboard_engine.services.persistence.base import DashboardStore

logger = logging.getLogger(__name__)

_CACHE_KEY = "data_sources"


class DataSourceRegistry:

    def __init__(
        self,
        store: DashboardStore,
        cache: Optional[SnapshotCache] = None,
    ) -> None:
        self._store = store
        self._cache = cache or SnapshotCache(default_ttl=settings.DATA_SOURCE_CACHE_SECONDS)

    # ── Read ─────────────────────────────────────────────────

    @property
    def is_loading(self) -> bool:
        return self._cache.get_entry(_CACHE_KEY) is None

    async def list_data_sources(self) -> Tuple[DataSourceDescriptor, ...]:
        return await self._cache.get_or_load(_CACHE_KEY, self._load)

    async def get(self, data_source_id: str) -> Optional[DataSourceDescriptor]:
        for ds in await self.list_data_sources():
            if ds.id == data_source_id:
                return ds
        return None

    async def find_by_name(self, name: str) -> Optional[DataSourceDescriptor]:
        for ds in await self.list_data_sources():
            if ds.name == name:
                return ds
        return None

    def snapshot(self) -> Tuple[DataSourceDescriptor, ...]:
        entry = self._cache.get_entry(_CACHE_KEY)
        return entry.data if entry else ()

    def cache_info(self) -> Dict[str, Any]:
        return self._cache.get_cache_info()

    # ── Write ────────────────────────────────────────────────

    async def create_data_source(self, descriptor: Dict[str, Any]) -> DataSourceDescriptor:
        """
        Validate, persist and publish a new data source.

        Raises:
            InvalidDataSourceError: name missing, unknown source type or an
                interval below the 60 second floor.
        """
        payload = validate_descriptor(descriptor)
        row = await self._store.create_data_source(payload)
        created = DataSourceDescriptor.from_dict(row)
        logger.info(f"[DataSourceRegistry] Created '{created.name}' ({created.source_type})")

        self._cache.invalidate(_CACHE_KEY)
        await self.list_data_sources()
        return created

    async def refresh(self) -> Tuple[DataSourceDescriptor, ...]:
        self._cache.invalidate(_CACHE_KEY)
        return await self.list_data_sources()

    async def _load(self) -> Tuple[DataSourceDescriptor, ...]:
        rows = await self._store.list_data_sources()
        sources = tuple(
            DataSourceDescriptor.from_dict(r) for r in rows if r.get("is_active", True)
        )
        logger.info(f"[DataSourceRegistry] Loaded {len(sources)} data source(s)")
        return sources


def validate_descriptor(descriptor: Dict[str, Any]) -> Dict[str, Any]:
    """Return a normalized copy of *descriptor* or raise ``InvalidDataSourceError``."""
    name = str(descriptor.get("name") or "").strip()
    if not name:
        raise InvalidDataSourceError("Data source name is required")

    source_type = descriptor.get("source_type")
    if source_type not in SOURCE_TYPES:
        raise InvalidDataSourceError(f"Unknown source type: {source_type!r}")

    payload = dict(descriptor)
    payload["name"] = name
    payload["query_config"] = dict(descriptor.get("query_config") or {})

    for key, default in (
        ("refresh_interval", DEFAULT_REFRESH_INTERVAL),
        ("cache_duration", DEFAULT_CACHE_DURATION),
    ):
        value = descriptor.get(key, default)
        try:
            seconds = int(value)
        except (TypeError, ValueError):
            raise InvalidDataSourceError(f"{key} must be a number of seconds") from None
        if seconds < MIN_INTERVAL_SECONDS:
            raise InvalidDataSourceError(
                f"{key} must be at least {MIN_INTERVAL_SECONDS} seconds"
            )
        payload[key] = seconds

    return payload
