"""
Shared fakes for the engine tests.

InMemoryStore implements the DashboardStore protocol over plain lists and
counts every call, so tests can assert that a code path never reached the
persistence layer.
"""

import asyncio
import itertools
from typing import Any, Dict, List, Optional

import pytest

from dashboard_engine.core.exceptions import PersistenceError
from dashboard_engine.services.catalog.widget_catalog import seed_rows
from dashboard_engine.services.data_sources.descriptor import DataSourceDescriptor


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class InMemoryStore:
    """DashboardStore backed by lists; failures and delays are configurable."""

    def __init__(self, widget_types=None, data_sources=None):
        self._ids = itertools.count(1)
        self.widget_types: List[Dict[str, Any]] = (
            list(widget_types) if widget_types is not None else seed_rows()
        )
        self.data_sources: List[Dict[str, Any]] = list(data_sources or [])
        self.dashboards: List[Dict[str, Any]] = []

        # data_source_id → payload returned by fetch_widget_data
        self.widget_data: Dict[str, Any] = {}
        # data_source_id → exception raised by fetch_widget_data
        self.fetch_errors: Dict[str, Exception] = {}
        # when set, fetch_widget_data waits on it before answering
        self.fetch_gate: Optional[asyncio.Event] = None
        self.fail_saves = False

        self.calls: Dict[str, int] = {
            "list_widget_types": 0,
            "list_data_sources": 0,
            "create_data_source": 0,
            "create_dashboard_config": 0,
            "list_user_dashboard_configs": 0,
            "fetch_widget_data": 0,
        }

    # ── Catalog / registry ──────────────────────────────────────

    async def list_widget_types(self):
        self.calls["list_widget_types"] += 1
        return [dict(r) for r in self.widget_types]

    async def list_data_sources(self):
        self.calls["list_data_sources"] += 1
        return [dict(r) for r in self.data_sources]

    async def create_data_source(self, descriptor):
        self.calls["create_data_source"] += 1
        row = {"id": f"ds-{next(self._ids)}", "is_active": True, **descriptor}
        self.data_sources.append(row)
        return dict(row)

    # ── Dashboards ──────────────────────────────────────────────

    async def create_dashboard_config(self, config):
        self.calls["create_dashboard_config"] += 1
        if self.fail_saves:
            raise PersistenceError("database unavailable")
        row = {"id": f"cfg-{next(self._ids)}", **config}
        self.dashboards.append(row)
        return dict(row)

    async def list_user_dashboard_configs(self, user_id):
        self.calls["list_user_dashboard_configs"] += 1
        return [dict(d) for d in self.dashboards if d["user_id"] == user_id]

    # ── Widget data ─────────────────────────────────────────────

    async def fetch_widget_data(self, data_source: DataSourceDescriptor, config):
        self.calls["fetch_widget_data"] += 1
        if self.fetch_gate is not None:
            await self.fetch_gate.wait()
        error = self.fetch_errors.get(data_source.id)
        if error is not None:
            raise error
        return self.widget_data.get(data_source.id, [])


def make_source(source_id: str, name: str, **overrides) -> Dict[str, Any]:
    row = {
        "id": source_id,
        "name": name,
        "source_type": "table_query",
        "query_config": {"table": "users", "operation": "count", "columns": "*", "filters": []},
        "refresh_interval": 300,
        "cache_duration": 300,
        "is_active": True,
    }
    row.update(overrides)
    return row


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore(
        data_sources=[
            make_source("ds-users", "Users Count"),
            make_source("ds-companies", "Companies Count"),
            make_source(
                "ds-signups",
                "Signups",
                query_config={"table": "users", "operation": "select", "columns": "name, value"},
            ),
        ]
    )
