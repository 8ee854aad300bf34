"""
SnapshotCache — In-memory TTL cache for reference data and widget results.

Every entry stores an immutable snapshot together with its load time and
time-to-live.  Readers always receive the snapshot object as it was
stored; writers replace the entry, never mutate it, so many widgets can
read concurrently without locking.  The asyncio lock only serialises
*loads* so that two coroutines asking for the same missing key trigger a
single loader call.

Used by:
  - WidgetCatalog       (widget types, long TTL)
  - DataSourceRegistry  (data source descriptors, DATA_SOURCE_CACHE_SECONDS)
  - WidgetDataBinder    (per-widget results, each data source's cache_duration)
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Hashable, List, Optional

Clock = Callable[[], float]


@dataclass(frozen=True)
class CacheEntry:
    """Container for a cached snapshot with load-time metadata."""
    data: Any
    loaded_at: float
    ttl: float

    def age_seconds(self, now: float) -> float:
        return now - self.loaded_at

    def is_expired(self, now: float) -> bool:
        return self.age_seconds(now) >= self.ttl


class SnapshotCache:
    """
    Keyed TTL cache.

    Usage::

        cache = SnapshotCache(default_ttl=300)
        sources = await cache.get_or_load("data_sources", loader)
        cache.invalidate("data_sources")
    """

    def __init__(self, default_ttl: float = 300, clock: Clock = time.monotonic) -> None:
        self._entries: Dict[Hashable, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._default_ttl = default_ttl
        self._clock = clock

    # ─────────────────────────────────────────────────────────────
    #  READ
    # ─────────────────────────────────────────────────────────────

    def now(self) -> float:
        return self._clock()

    def get_entry(self, key: Hashable) -> Optional[CacheEntry]:
        """Return the raw entry (even if expired) or ``None``."""
        return self._entries.get(key)

    def get(self, key: Hashable) -> Optional[Any]:
        """Return cached data if still valid, else ``None``."""
        entry = self._entries.get(key)
        if entry is None or entry.is_expired(self.now()):
            return None
        return entry.data

    def keys(self) -> List[Hashable]:
        return list(self._entries)

    # ─────────────────────────────────────────────────────────────
    #  WRITE
    # ─────────────────────────────────────────────────────────────

    def set(self, key: Hashable, data: Any, ttl: Optional[float] = None) -> CacheEntry:
        """Replace the entry for *key* with a fresh snapshot."""
        entry = CacheEntry(
            data=data,
            loaded_at=self.now(),
            ttl=self._default_ttl if ttl is None else ttl,
        )
        self._entries[key] = entry
        return entry

    async def get_or_load(
        self,
        key: Hashable,
        loader: Callable[[], Awaitable[Any]],
        ttl: Optional[float] = None,
    ) -> Any:
        """
        Return the cached snapshot, or run *loader* and store its result.

        Concurrent callers for a missing key wait on the lock and then
        find the entry the first caller stored.
        """
        cached = self.get(key)
        if cached is not None:
            return cached

        async with self._lock:
            cached = self.get(key)
            if cached is not None:
                return cached
            data = await loader()
            self.set(key, data, ttl)
            return data

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one key, or everything when *key* is ``None``."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    # ─────────────────────────────────────────────────────────────
    #  MANAGEMENT
    # ─────────────────────────────────────────────────────────────

    def get_cache_info(self) -> Dict[str, Any]:
        """Return a summary suitable for a diagnostics endpoint."""
        now = self.now()
        return {
            str(key): {
                "count": len(entry.data) if isinstance(entry.data, (list, tuple, dict)) else 1,
                "age_seconds": round(entry.age_seconds(now), 1),
                "ttl": entry.ttl,
                "expired": entry.is_expired(now),
            }
            for key, entry in self._entries.items()
        }
