"""
Table: rows straight from the data source.

Columns come from ``config.columns`` or, when empty, the keys of the
first row.  Only the first ``page_size`` rows are returned; the footer
is set when rows were cut.
"""

from __future__ import annotations

from typing import Any, Dict, List

from dashboard_engine.services.config_fields.types.column_list import split_columns
from dashboard_engine.services.widgets.base import BaseWidget, WidgetResult
from dashboard_engine.services.widgets.helpers import humanize_column

DEFAULT_PAGE_SIZE = 10
MISSING_CELL = "-"


class DataTable(BaseWidget):

    def process(self) -> WidgetResult:
        rows = [r for r in self.rows if isinstance(r, dict)]
        if not rows:
            return self._empty()

        columns = self._columns(rows[0])
        page_size = self._page_size()
        page = rows[:page_size]

        body: List[Dict[str, Any]] = [
            {col: MISSING_CELL if row.get(col) is None else row[col] for col in columns}
            for row in page
        ]

        footer = None
        if len(rows) > page_size:
            footer = f"Showing {len(page)} of {len(rows)} rows"

        return self._result(
            {
                "columns": [{"key": c, "label": humanize_column(c)} for c in columns],
                "rows": body,
                "footer": footer,
            },
            category="table",
            total_rows=len(rows),
            page_size=page_size,
        )

    def _columns(self, first_row: Dict[str, Any]) -> List[str]:
        configured = self.option("columns")
        if isinstance(configured, str):
            configured = split_columns(configured)
        if configured:
            return list(configured)
        return list(first_row.keys())

    def _page_size(self) -> int:
        raw = self.option("page_size", DEFAULT_PAGE_SIZE)
        try:
            size = int(raw)
        except (TypeError, ValueError):
            return DEFAULT_PAGE_SIZE
        return size if size >= 1 else DEFAULT_PAGE_SIZE
