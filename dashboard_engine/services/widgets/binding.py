"""
WidgetDataBinder — Data fetch layer between widgets and the store.

Single Responsibility: resolve ``(data_source, config)`` to a
``WidgetDataState`` with:

  - one in-flight fetch per ``(data_source.id, relevant config)`` key;
    concurrent callers await the same task,
  - results cached for the data source's ``cache_duration``, then
    treated as stale and re-fetched on next access,
  - errors never cached, so the next access retries,
  - errors returned as state, never raised, so one widget's failure
    cannot stop its siblings.

``WidgetBinding`` is the per-mounted-widget handle: it owns the
auto-refresh loop and discards results that arrive after ``dispose()``.

Usage::

    binder = WidgetDataBinder(store)
    state = await binder.fetch(data_source, instance.config)
    if state.error:
        ...  # inline error with state.error as message
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from dashboard_engine.core.cache import SnapshotCache
from dashboard_engine.services.data_sources.descriptor import DEFAULT_CACHE_DURATION, DataSourceDescriptor
from dashboard_engine.services.persistence.base import DashboardStore
from dashboard_engine.services.widgets.base import WidgetResult
from dashboard_engine.services.widgets.engine import WidgetEngine, widget_engine

logger = logging.getLogger(__name__)

# Config keys that only affect presentation, not what is fetched
_PRESENTATION_KEYS = frozenset({"title", "data_source_id"})

FetchKey = Tuple[str, str]


@dataclass(frozen=True)
class WidgetDataState:
    """What a widget shows: skeleton, data or inline error."""
    data: Any = None
    is_loading: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"data": self.data, "is_loading": self.is_loading, "error": self.error}


LOADING = WidgetDataState(is_loading=True)


def fetch_key(data_source: DataSourceDescriptor, config: Optional[Dict[str, Any]]) -> FetchKey:
    relevant = {k: v for k, v in (config or {}).items() if k not in _PRESENTATION_KEYS}
    return data_source.id, json.dumps(relevant, sort_keys=True, default=str)


class WidgetDataBinder:

    def __init__(
        self,
        store: DashboardStore,
        cache: Optional[SnapshotCache] = None,
    ) -> None:
        self._store = store
        self._cache = cache or SnapshotCache(default_ttl=DEFAULT_CACHE_DURATION)
        self._in_flight: Dict[FetchKey, asyncio.Task] = {}

    # ── Read ─────────────────────────────────────────────────

    def peek(self, data_source: DataSourceDescriptor, config: Dict[str, Any]) -> WidgetDataState:
        """Current state without starting a fetch (fresh data, else loading)."""
        entry = self._cache.get_entry(fetch_key(data_source, config))
        if entry is not None and not entry.is_expired(self._cache.now()):
            return WidgetDataState(data=entry.data)
        return LOADING

    def cache_info(self) -> Dict[str, Any]:
        """Cached results keyed by ``(data_source_id, config)``."""
        return self._cache.get_cache_info()

    def is_in_flight(self, data_source: DataSourceDescriptor, config: Dict[str, Any]) -> bool:
        return fetch_key(data_source, config) in self._in_flight

    def refresh_due(self, data_source: DataSourceDescriptor, config: Dict[str, Any]) -> bool:
        """True when nothing is cached or ``refresh_interval`` has elapsed."""
        entry = self._cache.get_entry(fetch_key(data_source, config))
        if entry is None:
            return True
        return entry.age_seconds(self._cache.now()) >= data_source.refresh_interval

    # ── Fetch ────────────────────────────────────────────────

    async def fetch(
        self,
        data_source: DataSourceDescriptor,
        config: Dict[str, Any],
        force: bool = False,
    ) -> WidgetDataState:
        """
        Resolve the widget's data.

        Args:
            data_source: Descriptor the widget is bound to.
            config:      The widget's merged config.
            force:       Skip a still-valid cached result (refresh tick).
        """
        key = fetch_key(data_source, config)

        if not force:
            entry = self._cache.get_entry(key)
            if entry is not None and not entry.is_expired(self._cache.now()):
                return WidgetDataState(data=entry.data)

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, data_source, config))
            self._in_flight[key] = task

        try:
            data = await asyncio.shield(task)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            logger.warning(f"[WidgetDataBinder] Fetch failed for '{data_source.name}': {message}")
            return WidgetDataState(error=message)
        return WidgetDataState(data=data)

    async def _run(
        self,
        key: FetchKey,
        data_source: DataSourceDescriptor,
        config: Dict[str, Any],
    ) -> Any:
        try:
            data = await self._store.fetch_widget_data(data_source, config)
            self._cache.set(key, data, ttl=data_source.cache_duration)
            return data
        finally:
            self._in_flight.pop(key, None)

    def invalidate(self, data_source_id: Optional[str] = None) -> None:
        """Drop cached results for one data source, or all of them."""
        if data_source_id is None:
            self._cache.invalidate()
            return
        for key in self._cache.keys():
            if key[0] == data_source_id:
                self._cache.invalidate(key)


class WidgetBinding:
    """
    One mounted widget bound to a data source.

    ``on_update`` is called with every new state until ``dispose()``;
    fetches completing after disposal are dropped.
    """

    def __init__(
        self,
        binder: WidgetDataBinder,
        data_source: DataSourceDescriptor,
        config: Dict[str, Any],
        on_update: Optional[Callable[[WidgetDataState], None]] = None,
    ) -> None:
        self._binder = binder
        self.data_source = data_source
        self.config = config
        self._on_update = on_update
        self._refresh_task: Optional[asyncio.Task] = None
        self.disposed = False
        self.state = binder.peek(data_source, config)

    def render(
        self,
        widget_type: str,
        widget_id: str = "",
        engine: Optional[WidgetEngine] = None,
    ) -> WidgetResult:
        """The widget as currently shown: skeleton, inline error or content."""
        return (engine or widget_engine).render_state(widget_type, self.state, self.config, widget_id)

    async def load(self, force: bool = False) -> WidgetDataState:
        state = await self._binder.fetch(self.data_source, self.config, force=force)
        if self.disposed:
            return self.state
        self.state = state
        if self._on_update is not None:
            self._on_update(state)
        return state

    def start_auto_refresh(self) -> asyncio.Task:
        """Re-fetch every ``refresh_interval`` seconds until disposed."""
        if self._refresh_task is None:
            self._refresh_task = asyncio.ensure_future(self._refresh_loop())
        return self._refresh_task

    async def _refresh_loop(self) -> None:
        while not self.disposed:
            await asyncio.sleep(self.data_source.refresh_interval)
            if self.disposed:
                break
            await self.load(force=True)

    def dispose(self) -> None:
        self.disposed = True
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_task.cancel()
        self._refresh_task = None
