"""
Widget Registry Configuration.

Maps widget types (stored in ``dashboard_widgets.widget_type``) to their
runtime metadata.  This file is the ONLY place where a widget type is
registered; the render dispatcher, the catalog seed and the builder
palette discover it from here.

Keys:
  widget_type → str : must match dashboard_widgets.widget_type in DB.

Values: dict with:
  renderer       → str  : class name in ``services/widgets/types/``.
  category       → str  : palette grouping ("metrics" | "charts" | "tables").
  name           → str  : display name (also the default widget title).
  description    → str  : palette help text.
  default_config → dict : widget-specific defaults merged under user config.

To add a new widget type:
  1. Create the renderer class in dashboard_engine/services/widgets/types/
  2. Add an entry here and its fields in ``field_registry.py``.
  3. Add the value to ``WidgetType``.
"""

WIDGET_REGISTRY: dict[str, dict] = {
    # ── Metrics ──────────────────────────────────────────────
    "metric_card": {
        "renderer": "MetricCard",
        "category": "metrics",
        "name": "Metric Card",
        "description": "Single number with optional trend indicator",
        "default_config": {
            "metric_type": "count",
            "format": "number",
            "trend_comparison": False,
        },
    },
    "revenue_metric": {
        "renderer": "RevenueMetric",
        "category": "metrics",
        "name": "Revenue Metric",
        "description": "MRR, ARR, churn rate or lifetime value",
        "default_config": {"metric_type": "mrr", "currency": "USD"},
    },

    # ── Charts ───────────────────────────────────────────────
    "line_chart": {
        "renderer": "LineChart",
        "category": "charts",
        "name": "Line Chart",
        "description": "Trend of a value over an ordered axis",
        "default_config": {"x_axis": "name", "y_axis": "value"},
    },
    "bar_chart": {
        "renderer": "BarChart",
        "category": "charts",
        "name": "Bar Chart",
        "description": "Compare values across categories",
        "default_config": {"x_axis": "name", "y_axis": "value"},
    },
    "pie_chart": {
        "renderer": "PieChart",
        "category": "charts",
        "name": "Pie Chart",
        "description": "Share of each category in the total",
        "default_config": {"x_axis": "name", "y_axis": "value"},
    },

    # ── Tables ───────────────────────────────────────────────
    "data_table": {
        "renderer": "DataTable",
        "category": "tables",
        "name": "Data Table",
        "description": "Paged rows straight from the data source",
        "default_config": {"columns": [], "page_size": 10},
    },
}


# ── Layout saved with every dashboard ───────────────────────────
#
# The builder has no layout editor: every dashboard is stored with the
# same grid so the viewer can place widgets in insertion order.

GRID_COLUMNS = 4
ROW_HEIGHT = 150
GRID_MARGIN = [16, 16]


def default_layout_config() -> dict:
    return {
        "columns": GRID_COLUMNS,
        "row_height": ROW_HEIGHT,
        "margin": list(GRID_MARGIN),
    }


# ── Pie chart slice colours (cycled by slice index) ─────────────
PIE_PALETTE = [
    "#0088FE", "#00C49F", "#FFBB28",
    "#FF8042", "#8884D8", "#82CA9D",
]
