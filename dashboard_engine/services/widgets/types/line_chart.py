"""Chart: value over an ordered axis — line chart."""

from __future__ import annotations

from dashboard_engine.services.widgets.base import BaseWidget, WidgetResult
from dashboard_engine.services.widgets.helpers import humanize_column, xy_series


class LineChart(BaseWidget):

    def process(self) -> WidgetResult:
        rows = self.rows
        if not rows:
            return self._empty()

        x_key = self.option("x_axis") or "name"
        y_key = self.option("y_axis") or "value"
        labels, values = xy_series(rows, x_key, y_key)

        return self._result(
            {
                "labels": labels,
                "datasets": [
                    {
                        "label": humanize_column(y_key),
                        "data": values,
                        "fill": False,
                    }
                ],
            },
            category="chart",
            chart_type="line",
            x_axis=x_key,
            y_axis=y_key,
            total_points=len(labels),
        )
