"""
Unit tests for the widget catalog and the data source registry
"""

import asyncio

import pytest

from conftest import FakeClock, InMemoryStore, make_source
from dashboard_engine.core.cache import SnapshotCache
from dashboard_engine.core.exceptions import InvalidDataSourceError
from dashboard_engine.services.catalog.widget_catalog import (
    WidgetCatalog,
    WidgetTypeDescriptor,
    group_by_category,
)
from dashboard_engine.services.data_sources.form import DataSourceForm
from dashboard_engine.services.data_sources.registry import DataSourceRegistry


class TestWidgetCatalog:
    """Test cases for WidgetCatalog"""

    @pytest.mark.asyncio
    async def test_lists_seeded_types(self):
        catalog = WidgetCatalog(InMemoryStore())
        assert catalog.is_loading

        types = await catalog.list_widget_types()

        assert not catalog.is_loading
        assert {t.widget_type for t in types} == {
            "metric_card", "revenue_metric", "line_chart",
            "bar_chart", "pie_chart", "data_table",
        }
        assert isinstance(types, tuple)

    @pytest.mark.asyncio
    async def test_snapshot_is_cached(self):
        store = InMemoryStore()
        catalog = WidgetCatalog(store)

        await catalog.list_widget_types()
        await catalog.list_widget_types()
        await catalog.get("pie_chart")

        assert store.calls["list_widget_types"] == 1

    @pytest.mark.asyncio
    async def test_get_unknown_type_returns_none(self):
        catalog = WidgetCatalog(InMemoryStore())
        assert await catalog.get("gauge") is None

    def test_group_by_category_keeps_first_seen_order(self):
        types = [
            WidgetTypeDescriptor("line_chart", "Line Chart", "charts"),
            WidgetTypeDescriptor("metric_card", "Metric Card", "metrics"),
            WidgetTypeDescriptor("bar_chart", "Bar Chart", "charts"),
            WidgetTypeDescriptor("data_table", "Data Table", "tables"),
        ]

        grouped = group_by_category(types)

        assert list(grouped) == ["charts", "metrics", "tables"]
        assert [t.widget_type for t in grouped["charts"]] == ["line_chart", "bar_chart"]

    def test_descriptor_falls_back_to_registry_metadata(self):
        descriptor = WidgetTypeDescriptor.from_dict({"id": "w1", "widget_type": "data_table"})
        assert descriptor.name == "Data Table"
        assert descriptor.category == "tables"
        assert descriptor.default_config == {"columns": [], "page_size": 10}


class TestDataSourceForm:
    """Test cases for DataSourceForm"""

    def test_add_filter_requires_column_and_value(self):
        form = DataSourceForm()

        form.set_new_filter(column="status", value="")
        assert form.add_filter() is False
        form.set_new_filter(column="  ", value="active")
        assert form.add_filter() is False
        assert form.filters == []

        form.set_new_filter(column="status", operator="equals", value="active")
        assert form.add_filter() is True
        assert form.filters == [{"column": "status", "operator": "equals", "value": "active"}]

    def test_remove_filter_by_index(self):
        form = DataSourceForm()
        for col in ("a", "b", "c"):
            form.set_new_filter(column=col, value="1")
            form.add_filter()

        form.remove_filter(1)

        assert [f["column"] for f in form.filters] == ["a", "c"]

    def test_reset_restores_defaults(self):
        form = DataSourceForm(name="Signups", refresh_interval=600)
        form.set_new_filter(column="plan", value="pro")
        form.add_filter()

        form.reset()

        assert form.name == ""
        assert form.refresh_interval == 300
        assert form.filters == []

    def test_descriptor_keeps_only_relevant_keys(self):
        form = DataSourceForm(name=" Raw ", source_type="custom_query")
        form.query_config["query"] = "SELECT 1"

        payload = form.to_descriptor()

        assert payload["name"] == "Raw"
        assert payload["query_config"] == {"query": "SELECT 1"}


class TestDataSourceRegistry:
    """Test cases for DataSourceRegistry"""

    def setup_method(self):
        self.clock = FakeClock()
        self.store = InMemoryStore(data_sources=[make_source("ds-users", "Users Count")])
        self.registry = DataSourceRegistry(
            self.store, cache=SnapshotCache(default_ttl=300, clock=self.clock)
        )

    @pytest.mark.asyncio
    async def test_snapshot_cached_until_ttl(self):
        await self.registry.list_data_sources()
        self.clock.advance(299)
        await self.registry.list_data_sources()
        assert self.store.calls["list_data_sources"] == 1

        self.clock.advance(1)
        await self.registry.list_data_sources()
        assert self.store.calls["list_data_sources"] == 2

    @pytest.mark.asyncio
    async def test_concurrent_readers_share_one_load(self):
        await asyncio.gather(*(self.registry.list_data_sources() for _ in range(5)))
        assert self.store.calls["list_data_sources"] == 1

    @pytest.mark.asyncio
    async def test_create_invalidates_and_reloads(self):
        before = await self.registry.list_data_sources()

        created = await self.registry.create_data_source({
            "name": "Companies Count",
            "source_type": "table_query",
            "query_config": {"table": "companies", "operation": "count"},
            "refresh_interval": 120,
            "cache_duration": 60,
        })
        after = await self.registry.list_data_sources()

        assert created.name == "Companies Count"
        assert len(before) == 1
        assert [ds.name for ds in after] == ["Users Count", "Companies Count"]
        assert await self.registry.find_by_name("Companies Count") == created

    @pytest.mark.asyncio
    async def test_old_snapshot_is_not_mutated(self):
        before = await self.registry.list_data_sources()
        await self.registry.create_data_source({"name": "X", "source_type": "calculated"})
        assert len(before) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [
        {"name": "  ", "source_type": "table_query"},
        {"name": "A", "source_type": "spreadsheet"},
        {"name": "A", "source_type": "table_query", "refresh_interval": 30},
        {"name": "A", "source_type": "table_query", "cache_duration": 59},
    ])
    async def test_invalid_descriptor_rejected_before_write(self, payload):
        with pytest.raises(InvalidDataSourceError):
            await self.registry.create_data_source(payload)
        assert self.store.calls["create_data_source"] == 0
