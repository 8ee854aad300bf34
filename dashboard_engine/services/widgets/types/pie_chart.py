"""
Chart: share of each category — pie chart.

Slice colours cycle through ``PIE_PALETTE`` by index; every slice is
labelled ``"{name} {percent}%"``.
"""

from __future__ import annotations

from typing import Any, Dict, List

from dashboard_engine.config.widget_registry import PIE_PALETTE
from dashboard_engine.services.widgets.base import BaseWidget, WidgetResult
from dashboard_engine.services.widgets.helpers import round_half_up, to_fixed, xy_series


class PieChart(BaseWidget):

    def process(self) -> WidgetResult:
        rows = self.rows
        if not rows:
            return self._empty()

        name_key = self.option("x_axis") or "name"
        value_key = self.option("data_column") or self.option("y_axis") or "value"
        names, values = xy_series(rows, name_key, value_key)
        total = sum(values)

        slices: List[Dict[str, Any]] = []
        for i, (name, value) in enumerate(zip(names, values)):
            percent = value / total if total else 0
            slices.append({
                "name": name,
                "value": value,
                "percent": float(round_half_up(percent * 100, 1)),
                "label": f"{name} {to_fixed(percent * 100, 0)}%",
                "color": PIE_PALETTE[i % len(PIE_PALETTE)],
            })

        return self._result(
            {
                "labels": [s["label"] for s in slices],
                "datasets": [
                    {
                        "data": values,
                        "backgroundColor": [s["color"] for s in slices],
                    }
                ],
                "slices": slices,
            },
            category="chart",
            chart_type="pie",
            total_points=len(slices),
        )
