"""
Metric: single number with optional trend.

Array data is reduced per ``metric_type`` (count → number of rows,
sum / average over each row's ``value``).  A single record is read
directly: ``count`` when asked for and numeric, else ``value``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pandas as pd

from dashboard_engine.services.widgets.base import BaseWidget, WidgetResult
from dashboard_engine.services.widgets.helpers import (
    format_currency,
    format_number,
    format_percent,
    is_numeric,
    signed_percent,
    to_number,
    trend_direction,
)


def _numeric_values(rows: List[Any]) -> pd.Series:
    """One float per row from its ``value``; non-dict rows, missing or non-numeric → 0."""
    raw = [r.get("value") if isinstance(r, dict) else None for r in rows]
    raw = [v if isinstance(v, (int, float, str)) and not isinstance(v, bool) else None for v in raw]
    return pd.to_numeric(pd.Series(raw, dtype="object"), errors="coerce").fillna(0)


class MetricCard(BaseWidget):

    def process(self) -> WidgetResult:
        metric_type = self.option("metric_type", "count")
        data = self.ctx.data

        if isinstance(data, list):
            value = self._reduce_rows(data, metric_type)
        elif isinstance(data, dict):
            value = self._read_record(data, metric_type)
        else:
            value = 0

        if isinstance(value, float) and value.is_integer():
            value = int(value)

        return self._result(
            {
                "value": value,
                "formatted": self._format(value),
                "trend": self._trend(),
            },
            category="metric",
            metric_type=metric_type,
        )

    # ── Value ────────────────────────────────────────────────

    @staticmethod
    def _reduce_rows(rows: List[Any], metric_type: str) -> float:
        if metric_type == "sum":
            return float(_numeric_values(rows).sum())
        if metric_type == "average":
            values = _numeric_values(rows)
            return float(values.mean()) if len(values) else 0
        return len(rows)

    @staticmethod
    def _read_record(record: Dict[str, Any], metric_type: str) -> float:
        if metric_type == "count" and is_numeric(record.get("count")):
            return record["count"]
        return to_number(record.get("value")) or 0

    def _format(self, value: float) -> str:
        fmt = self.option("format", "number")
        if fmt == "currency":
            return format_currency(value, self.option("currency", "USD"))
        if fmt == "percentage":
            return format_percent(value)
        return format_number(value)

    # ── Trend ────────────────────────────────────────────────

    def _trend(self) -> Optional[Dict[str, str]]:
        if self.option("trend_comparison", False) is not True:
            return None
        record = self.record
        raw = record.get("trend")
        if not is_numeric(raw):
            raw = record.get("change")
        if not is_numeric(raw):
            return None
        return {"direction": trend_direction(raw), "label": signed_percent(raw)}
