"""Metric: revenue figure (MRR, ARR, churn rate, LTV) with change indicator."""

from __future__ import annotations

from dashboard_engine.services.widgets.base import BaseWidget, WidgetResult
from dashboard_engine.services.widgets.helpers import (
    format_currency,
    format_percent,
    signed_percent,
    to_number,
    trend_direction,
)

_METRIC_LABELS = {
    "mrr": "Monthly Recurring Revenue",
    "arr": "Annual Recurring Revenue",
    "churn_rate": "Churn Rate",
    "ltv": "Lifetime Value",
}


class RevenueMetric(BaseWidget):

    def process(self) -> WidgetResult:
        record = self.record
        if not record and self.rows and isinstance(self.rows[0], dict):
            record = self.rows[0]

        metric_type = self.option("metric_type", "mrr")
        currency = self.option("currency", "USD")
        value = to_number(record.get("value")) or 0
        change = to_number(record.get("change")) or 0

        if metric_type == "churn_rate":
            formatted = format_percent(value)
        else:
            formatted = format_currency(value, currency, decimals=0)

        indicator = None
        if change != 0:
            indicator = {"direction": trend_direction(change), "label": signed_percent(change)}

        return self._result(
            {
                "value": value,
                "formatted": formatted,
                "change": indicator,
                "metric_label": _METRIC_LABELS.get(metric_type, metric_type),
            },
            category="metric",
            metric_type=metric_type,
            currency=currency,
        )
