"""
Unit tests for data source SQL generation
"""

import pytest

from dashboard_engine.core.exceptions import UnsafeQueryError
from dashboard_engine.services.data_sources.descriptor import DataSourceDescriptor
from dashboard_engine.services.data_sources.query_builder import QueryBuilder, parse_columns


def _source(source_type="table_query", **query_config):
    return DataSourceDescriptor(id="ds", name="Test", source_type=source_type, query_config=query_config)


class TestQueryBuilder:
    """Test cases for QueryBuilder"""

    def setup_method(self):
        self.builder = QueryBuilder()

    def test_select_with_ordered_filters(self):
        sql, params = self.builder.build(_source(
            table="companies",
            operation="select",
            columns="id, name",
            filters=[
                {"column": "status", "operator": "equals", "value": "active"},
                {"column": "name", "operator": "contains", "value": "acme"},
                {"column": "size", "operator": "greater_than", "value": "10"},
            ],
        ))

        assert sql == (
            "SELECT id, name FROM companies WHERE 1=1"
            " AND status = :f0 AND name LIKE :f1 AND size > :f2 LIMIT 1000"
        )
        assert params == {"f0": "active", "f1": "%acme%", "f2": "10"}

    def test_count_operation(self):
        sql, params = self.builder.build(_source(table="users", operation="count"))
        assert sql == "SELECT COUNT(*) AS count FROM users WHERE 1=1"
        assert params == {}

    def test_calculated_aggregate(self):
        sql, _ = self.builder.build(_source(
            "calculated", table="subscriptions", aggregate="sum", column="amount",
        ))
        assert sql == "SELECT SUM(amount) AS value FROM subscriptions WHERE 1=1"

    def test_calculated_needs_column_for_sum(self):
        with pytest.raises(UnsafeQueryError):
            self.builder.build(_source("calculated", table="t", aggregate="avg"))

    @pytest.mark.parametrize("table", ["users; DROP TABLE x", "1users", "", "a.b"])
    def test_rejects_unsafe_table_names(self, table):
        with pytest.raises(UnsafeQueryError):
            self.builder.build(_source(table=table))

    def test_rejects_unknown_operator(self):
        with pytest.raises(UnsafeQueryError):
            self.builder.build(_source(
                table="users",
                filters=[{"column": "a", "operator": "regex", "value": "x"}],
            ))

    def test_custom_query_must_be_single_select(self):
        sql, params = self.builder.build(_source("custom_query", query=" SELECT 1; "))
        assert sql == "SELECT 1"
        assert params == {}

        with pytest.raises(UnsafeQueryError):
            self.builder.build(_source("custom_query", query="DELETE FROM users"))
        with pytest.raises(UnsafeQueryError):
            self.builder.build(_source("custom_query", query="SELECT 1; DROP TABLE users"))

    def test_parse_columns(self):
        assert parse_columns("*") == ["*"]
        assert parse_columns("") == ["*"]
        assert parse_columns(" id , name,") == ["id", "name"]
