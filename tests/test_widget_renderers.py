"""
Unit tests for the widget engine and the concrete renderers
"""

import pytest

from dashboard_engine.config.widget_registry import WIDGET_REGISTRY
from dashboard_engine.services.config_fields.engine import merge_config
from dashboard_engine.services.widgets.engine import WidgetEngine
from dashboard_engine.services.widgets.helpers import (
    format_currency,
    format_number,
    format_percent,
    humanize_column,
    signed_percent,
    to_fixed,
    to_number,
)
from dashboard_engine.services.widgets.types.metric_card import MetricCard


class TestWidgetEngine:
    """Test cases for WidgetEngine dispatch"""

    def setup_method(self):
        self.engine = WidgetEngine()

    def test_unknown_type_renders_notice(self):
        result = self.engine.render("gauge", [{"value": 1}], {"title": "Speed"}, "w-1")

        assert result.data is None
        assert result.title == "Speed"
        assert result.metadata["unknown"] is True
        assert result.message == "Unknown widget type: gauge"

    def test_failing_renderer_is_isolated(self, monkeypatch):
        def boom(self):
            raise ValueError("bad payload")

        monkeypatch.setattr(MetricCard, "process", boom)

        results = self.engine.render_many([
            {"widget_type": "metric_card", "data": {"value": 1}, "widget_id": "a"},
            {"widget_type": "bar_chart", "data": [{"name": "x", "value": 2}], "widget_id": "b"},
        ])

        assert results[0].is_error
        assert results[0].message == "bad payload"
        assert not results[1].is_error
        assert results[1].data["datasets"][0]["data"] == [2]

    def test_class_to_module(self):
        assert WidgetEngine._class_to_module("RevenueMetric") == "revenue_metric"
        assert WidgetEngine._class_to_module("DataTable") == "data_table"

    @pytest.mark.parametrize("widget_type", ["line_chart", "bar_chart", "pie_chart", "data_table"])
    def test_empty_array_gives_placeholder(self, widget_type):
        result = self.engine.render(widget_type, [])
        assert result.is_placeholder
        assert result.message == "No data available"


class TestMetricCard:
    """Test cases for MetricCard"""

    def setup_method(self):
        self.engine = WidgetEngine()

    def test_average_of_numeric_strings(self):
        result = self.engine.render(
            "metric_card",
            [{"value": "10"}, {"value": "20"}],
            {"metric_type": "average"},
        )
        assert result.data["value"] == 15
        assert result.data["formatted"] == "15"

    def test_sum_treats_non_numeric_as_zero(self):
        result = self.engine.render(
            "metric_card",
            [{"value": 5}, {"value": "n/a"}, {"value": 2.5}, {}],
            {"metric_type": "sum"},
        )
        assert result.data["value"] == 7.5

    def test_count_of_rows(self):
        result = self.engine.render("metric_card", [{"a": 1}, {"a": 2}, {"a": 3}], {})
        assert result.data["value"] == 3

    def test_record_count_and_trend(self):
        result = self.engine.render(
            "metric_card",
            {"count": 1234, "trend": 12},
            {"metric_type": "count", "trend_comparison": True},
        )
        assert result.data["value"] == 1234
        assert result.data["formatted"] == "1,234"
        assert result.data["trend"] == {"direction": "up", "label": "+12.0%"}

    def test_trend_hidden_unless_enabled(self):
        result = self.engine.render("metric_card", {"value": 3, "trend": -4}, {})
        assert result.data["trend"] is None

    def test_record_without_numeric_count_reads_value(self):
        result = self.engine.render("metric_card", {"count": "many", "value": "42"}, {})
        assert result.data["value"] == 42

    def test_currency_format(self):
        result = self.engine.render(
            "metric_card", {"value": 1234.5}, {"metric_type": "sum", "format": "currency"}
        )
        assert result.data["formatted"] == "$1,234.50"

    def test_yen_has_no_minor_units(self):
        result = self.engine.render(
            "metric_card", {"value": 1234}, {"format": "currency", "currency": "JPY"}
        )
        assert result.data["formatted"] == "¥1,234"

    def test_percentage_rounds_half_up(self):
        result = self.engine.render("metric_card", {"value": 2.25}, {"format": "percentage"})
        assert result.data["formatted"] == "2.3%"

    def test_zero_trend_is_flat(self):
        result = self.engine.render(
            "metric_card", {"value": 5, "trend": 0}, {"trend_comparison": True}
        )
        assert result.data["trend"] == {"direction": "flat", "label": "0.0%"}

    @pytest.mark.parametrize("record", [
        {"value": 5, "change": -2},
        {"value": 5, "trend": "n/a", "change": -2},
    ])
    def test_trend_read_from_change(self, record):
        result = self.engine.render("metric_card", record, {"trend_comparison": True})
        assert result.data["trend"] == {"direction": "down", "label": "-2.0%"}

    def test_unknown_metric_type_counts_rows(self):
        result = self.engine.render(
            "metric_card", [{"value": 10}, {"value": 20}], {"metric_type": "median"}
        )
        assert result.data["value"] == 2

    def test_record_without_count_or_value_is_zero(self):
        result = self.engine.render("metric_card", {"name": "users"}, {"metric_type": "count"})
        assert result.data["value"] == 0
        assert result.data["formatted"] == "0"

    def test_average_counts_non_dict_rows_as_zero(self):
        result = self.engine.render(
            "metric_card", [{"value": 9}, "oops", None], {"metric_type": "average"}
        )
        assert result.data["value"] == 3


class TestRevenueMetric:
    """Test cases for RevenueMetric"""

    def setup_method(self):
        self.engine = WidgetEngine()

    def test_churn_rate_is_percent(self):
        result = self.engine.render(
            "revenue_metric", {"value": 4.567}, {"metric_type": "churn_rate"}
        )
        assert result.data["formatted"] == "4.6%"
        assert result.data["change"] is None

    @pytest.mark.parametrize("value, formatted", [(4.25, "4.3%"), (4.35, "4.3%"), (0.05, "0.1%")])
    def test_churn_rate_rounds_like_to_fixed(self, value, formatted):
        result = self.engine.render("revenue_metric", {"value": value}, {"metric_type": "churn_rate"})
        assert result.data["formatted"] == formatted

    def test_whole_currency_rounds_half_up(self):
        result = self.engine.render("revenue_metric", {"value": 2.5}, {"metric_type": "mrr"})
        assert result.data["formatted"] == "$3"

    def test_currency_without_decimals_and_change(self):
        result = self.engine.render(
            "revenue_metric",
            [{"value": 98500, "change": -3.25}],
            {"metric_type": "mrr", "currency": "EUR"},
        )
        assert result.data["formatted"] == "€98,500"
        assert result.data["change"] == {"direction": "down", "label": "-3.3%"}
        assert result.data["metric_label"] == "Monthly Recurring Revenue"


class TestCharts:
    """Test cases for the line, bar and pie renderers"""

    def setup_method(self):
        self.engine = WidgetEngine()
        self.rows = [
            {"day": "Mon", "signups": 3},
            {"day": "Tue", "signups": "x"},
            {"day": "Wed", "signups": 5},
        ]

    def test_line_chart_uses_configured_axes(self):
        result = self.engine.render("line_chart", self.rows, {"x_axis": "day", "y_axis": "signups"})

        assert result.data["labels"] == ["Mon", "Tue", "Wed"]
        assert result.data["datasets"][0]["data"] == [3, 0, 5]
        assert result.data["datasets"][0]["label"] == "Signups"
        assert result.metadata["x_axis"] == "day"

    def test_cleared_axis_falls_back_to_default(self):
        result = self.engine.render("bar_chart", [{"name": "a", "value": 1}], {"x_axis": None})
        assert result.data["labels"] == ["a"]

    def test_pie_slices_cycle_palette(self):
        rows = [{"name": f"p{i}", "value": 1} for i in range(7)]

        result = self.engine.render("pie_chart", rows, {})
        slices = result.data["slices"]

        assert slices[0]["color"] == "#0088FE"
        assert slices[6]["color"] == slices[0]["color"]
        assert slices[0]["label"] == "p0 14%"

    def test_pie_prefers_data_column(self):
        rows = [{"plan": "pro", "seats": 3, "value": 100}, {"plan": "free", "seats": 1, "value": 0}]

        result = self.engine.render("pie_chart", rows, {"x_axis": "plan", "data_column": "seats"})

        assert result.data["labels"] == ["pro 75%", "free 25%"]

    def test_pie_y_axis_applies_over_type_defaults(self):
        rows = [{"plan": "pro", "seats": 3, "value": 100}, {"plan": "free", "seats": 1, "value": 0}]
        config = merge_config(
            WIDGET_REGISTRY["pie_chart"]["default_config"], {"x_axis": "plan", "y_axis": "seats"}
        )

        result = self.engine.render("pie_chart", rows, config)

        assert result.data["labels"] == ["pro 75%", "free 25%"]

    def test_pie_percent_rounds_half_up(self):
        rows = [{"name": "a", "value": 1}, {"name": "b", "value": 7}]

        slices = self.engine.render("pie_chart", rows, {}).data["slices"]

        assert [s["label"] for s in slices] == ["a 13%", "b 88%"]
        assert [s["percent"] for s in slices] == [12.5, 87.5]


class TestDataTable:
    """Test cases for DataTable"""

    def setup_method(self):
        self.engine = WidgetEngine()

    def test_page_size_limits_rows_and_sets_footer(self):
        rows = [{"a": 1, "b": 2}, {"a": 3, "b": 4}]

        result = self.engine.render("data_table", rows, {"page_size": 1})

        assert result.data["rows"] == [{"a": 1, "b": 2}]
        assert result.data["footer"] == "Showing 1 of 2 rows"
        assert result.metadata["total_rows"] == 2

    def test_no_footer_when_everything_fits(self):
        result = self.engine.render("data_table", [{"a": 1}], {"page_size": 10})
        assert result.data["footer"] is None

    def test_configured_columns_and_missing_cells(self):
        rows = [{"name": "Ada", "email": "ada@example.com"}, {"name": "Bob"}]

        result = self.engine.render("data_table", rows, {"columns": "name, email"})

        assert [c["label"] for c in result.data["columns"]] == ["Name", "Email"]
        assert result.data["rows"][1] == {"name": "Bob", "email": "-"}

    @pytest.mark.parametrize("page_size", [0, -3, "lots", None])
    def test_invalid_page_size_uses_default(self, page_size):
        rows = [{"i": i} for i in range(12)]
        result = self.engine.render("data_table", rows, {"page_size": page_size})
        assert len(result.data["rows"]) == 10


class TestHelpers:
    """Test cases for formatting helpers"""

    def test_to_number(self):
        assert to_number("12.5") == 12.5
        assert to_number(True) is None
        assert to_number("abc") is None
        assert to_number(float("nan")) is None

    def test_formatting(self):
        assert format_number(1234.5) == "1,234.5"
        assert format_number(1000) == "1,000"
        assert format_currency(-20, "GBP") == "-£20.00"
        assert signed_percent(0) == "0.0%"
        assert humanize_column("created_at") == "Created At"

    def test_halves_round_away_from_zero(self):
        assert format_percent(4.25) == "4.3%"
        assert signed_percent(-3.25) == "-3.3%"
        assert signed_percent(0.25) == "+0.3%"
        assert to_fixed(1.005, 2) == "1.00"
        assert to_fixed(-0.04, 1) == "0.0"
        assert format_number(0.0005) == "0.001"
        assert format_currency(0.125, "EUR") == "€0.13"
