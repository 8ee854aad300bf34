"""
Config Field Registry.

Declares the editable configuration surface of every widget type.  The
set is closed: adding a field means adding an entry here (and, for a new
kind of input, a class in ``services/config_fields/types/``).

Each field is a dict with:
  key           → str        : config key written into ``WidgetInstance.config``.
  field_type    → str        : "text" | "select" | "toggle" | "number" |
                               "column_list" | "data_source"
  label         → str        : dialog label.
  default_value → Any        : value shown when the config has none.
  placeholder   → str | None : input placeholder text.
  required      → bool       : whether an empty value is rejected.
  ui_config     → dict       : extra validation / rendering hints
                               (``options`` for selects, ``min``/``max`` for numbers).
"""

from typing import Any, Dict, List


def _options(*pairs: tuple) -> List[Dict[str, str]]:
    return [{"value": v, "label": l} for v, l in pairs]


# ── Fields every widget type exposes ─────────────────────────────
#
# The title placeholder is filled in at dialog time with the widget
# type's display name.

COMMON_FIELDS: List[Dict[str, Any]] = [
    {
        "key": "title",
        "field_type": "text",
        "label": "Widget Title",
        "default_value": None,
        "placeholder": None,
        "required": False,
        "ui_config": {"max_length": 150},
    },
    {
        "key": "data_source_id",
        "field_type": "data_source",
        "label": "Data Source",
        "default_value": None,
        "placeholder": "Select data source",
        "required": False,
        "ui_config": {},
    },
]


_AXIS_FIELDS: List[Dict[str, Any]] = [
    {
        "key": "x_axis",
        "field_type": "text",
        "label": "X-Axis Column",
        "default_value": None,
        "placeholder": "e.g., created_at, name",
        "required": False,
        "ui_config": {"max_length": 100},
    },
    {
        "key": "y_axis",
        "field_type": "text",
        "label": "Y-Axis Column",
        "default_value": None,
        "placeholder": "e.g., value, count",
        "required": False,
        "ui_config": {"max_length": 100},
    },
]


FIELD_REGISTRY: Dict[str, List[Dict[str, Any]]] = {
    "metric_card": [
        {
            "key": "metric_type",
            "field_type": "select",
            "label": "Metric Type",
            "default_value": "count",
            "placeholder": "Select metric type",
            "required": False,
            "ui_config": {"options": _options(
                ("count", "Count"),
                ("sum", "Sum"),
                ("average", "Average"),
                ("percentage", "Percentage"),
            )},
        },
        {
            "key": "format",
            "field_type": "select",
            "label": "Format",
            "default_value": "number",
            "placeholder": "Select format",
            "required": False,
            "ui_config": {"options": _options(
                ("number", "Number"),
                ("currency", "Currency"),
                ("percentage", "Percentage"),
            )},
        },
        {
            "key": "trend_comparison",
            "field_type": "toggle",
            "label": "Show trend comparison",
            "default_value": False,
            "placeholder": None,
            "required": False,
            "ui_config": {},
        },
    ],
    "line_chart": list(_AXIS_FIELDS),
    "bar_chart": list(_AXIS_FIELDS),
    "pie_chart": _AXIS_FIELDS + [
        {
            "key": "data_column",
            "field_type": "text",
            "label": "Data Column",
            "default_value": None,
            "placeholder": "e.g., value",
            "required": False,
            "ui_config": {"max_length": 100},
        },
    ],
    "revenue_metric": [
        {
            "key": "metric_type",
            "field_type": "select",
            "label": "Revenue Metric Type",
            "default_value": "mrr",
            "placeholder": "Select metric type",
            "required": False,
            "ui_config": {"options": _options(
                ("mrr", "Monthly Recurring Revenue"),
                ("arr", "Annual Recurring Revenue"),
                ("churn_rate", "Churn Rate"),
                ("ltv", "Lifetime Value"),
            )},
        },
        {
            "key": "currency",
            "field_type": "select",
            "label": "Currency",
            "default_value": "USD",
            "placeholder": "Select currency",
            "required": False,
            "ui_config": {"options": _options(
                ("USD", "USD"),
                ("EUR", "EUR"),
                ("GBP", "GBP"),
                ("JPY", "JPY"),
            )},
        },
    ],
    "data_table": [
        {
            "key": "columns",
            "field_type": "column_list",
            "label": "Columns (comma-separated)",
            "default_value": [],
            "placeholder": "e.g., name, email, created_at",
            "required": False,
            "ui_config": {},
        },
        {
            "key": "page_size",
            "field_type": "number",
            "label": "Page Size",
            "default_value": 10,
            "placeholder": None,
            "required": False,
            "ui_config": {"min": 1, "max": 100, "integer": True},
        },
    ],
}
