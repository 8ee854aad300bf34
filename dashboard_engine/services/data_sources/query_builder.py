"""
QueryBuilder — Parameterized SQL for widget data sources.

Single Responsibility: turn a ``DataSourceDescriptor`` into a
``(sql, bind_params)`` tuple.  Table and column names cannot be bound,
so they are checked against a strict identifier pattern; filter values
are always bound parameters.

Does NOT execute anything (see ``SqlDashboardStore.fetch_widget_data``).

Usage::

    from dashboard_engine.services.data_sources.query_builder import query_builder

    sql, params = query_builder.build(descriptor)
    # → ("SELECT id, name FROM companies WHERE 1=1 AND status = :f0", {"f0": "active"})
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Sequence, Tuple

from dashboard_engine.core.exceptions import UnsafeQueryError
from dashboard_engine.services.data_sources.descriptor import (
    CALCULATED_AGGREGATES,
    DataSourceDescriptor,
    QueryFilter,
)

# Type alias for the (sql_string, bind_params) return
QueryResult = Tuple[str, Dict[str, Any]]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_READ_ONLY_PREFIX = re.compile(r"^\s*(select|with)\b", re.IGNORECASE)

_OPERATOR_SQL = {
    "equals": "=",
    "contains": "LIKE",
    "greater_than": ">",
    "less_than": "<",
}


# ─────────────────────────────────────────────────────────────────
#  CLAUSE HELPERS
# ─────────────────────────────────────────────────────────────────

def check_identifier(name: str) -> str:
    """Return *name* if it is a plain SQL identifier, else raise."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise UnsafeQueryError(f"Invalid identifier: {name!r}")
    return name


def parse_columns(raw: Any) -> List[str]:
    """``"id, name"`` → ``["id", "name"]``; ``"*"`` or empty → ``["*"]``."""
    if isinstance(raw, (list, tuple)):
        cols = [str(c).strip() for c in raw if str(c).strip()]
    else:
        cols = [c.strip() for c in str(raw or "*").split(",") if c.strip()]
    if not cols or cols == ["*"]:
        return ["*"]
    return [check_identifier(c) for c in cols]


def apply_filters(
    sql: str,
    params: Dict[str, Any],
    filters: Sequence[QueryFilter],
) -> str:
    """
    Append one ``AND column op :fN`` per filter, in order.

    Args:
        sql:     SQL with an existing WHERE clause.
        params:  Mutable bind params dict (extended in place).
        filters: Ordered filters from the data source.
    """
    for i, flt in enumerate(filters):
        op = _OPERATOR_SQL.get(flt.operator)
        if op is None:
            raise UnsafeQueryError(f"Unknown filter operator: {flt.operator!r}")
        column = check_identifier(flt.column)
        name = f"f{i}"
        sql += f" AND {column} {op} :{name}"
        params[name] = f"%{flt.value}%" if flt.operator == "contains" else flt.value
    return sql


# ─────────────────────────────────────────────────────────────────
#  BUILDER
# ─────────────────────────────────────────────────────────────────

class QueryBuilder:
    """
    Stateless: every method returns a fresh ``(sql, bind_params)`` tuple.
    """

    DEFAULT_ROW_LIMIT = 1000

    def build(self, descriptor: DataSourceDescriptor) -> QueryResult:
        """Dispatch on ``source_type``."""
        if descriptor.source_type == "table_query":
            return self.build_table_query(descriptor)
        if descriptor.source_type == "calculated":
            return self.build_calculated_query(descriptor)
        if descriptor.source_type == "custom_query":
            return self.check_custom_query(descriptor.query_config.get("query", "")), {}
        raise UnsafeQueryError(f"Unknown source type: {descriptor.source_type!r}")

    def build_table_query(
        self,
        descriptor: DataSourceDescriptor,
        limit: int = DEFAULT_ROW_LIMIT,
    ) -> QueryResult:
        """SELECT (or COUNT) over a single table with ordered filters."""
        cfg = descriptor.query_config
        table = check_identifier(cfg.get("table", ""))
        params: Dict[str, Any] = {}

        if cfg.get("operation", "select") == "count":
            sql = f"SELECT COUNT(*) AS count FROM {table} WHERE 1=1"
            return apply_filters(sql, params, descriptor.filters), params

        cols = ", ".join(parse_columns(cfg.get("columns", "*")))
        sql = f"SELECT {cols} FROM {table} WHERE 1=1"
        sql = apply_filters(sql, params, descriptor.filters)
        sql += f" LIMIT {int(limit)}"
        return sql, params

    def build_calculated_query(self, descriptor: DataSourceDescriptor) -> QueryResult:
        """
        Single aggregate over a table.

        Example::

            {"table": "subscriptions", "aggregate": "sum", "column": "amount"}
            # → SELECT SUM(amount) AS value FROM subscriptions WHERE 1=1
        """
        cfg = descriptor.query_config
        table = check_identifier(cfg.get("table", ""))
        aggregate = str(cfg.get("aggregate", "count")).lower()
        if aggregate not in CALCULATED_AGGREGATES:
            raise UnsafeQueryError(f"Unknown aggregate: {aggregate!r}")

        column = cfg.get("column") or "*"
        if column != "*":
            column = check_identifier(column)
        elif aggregate != "count":
            raise UnsafeQueryError(f"Aggregate {aggregate.upper()} needs a column")

        params: Dict[str, Any] = {}
        sql = f"SELECT {aggregate.upper()}({column}) AS value FROM {table} WHERE 1=1"
        return apply_filters(sql, params, descriptor.filters), params

    @staticmethod
    def check_custom_query(query: str) -> str:
        """Accept a single read-only statement, reject everything else."""
        stripped = (query or "").strip().rstrip(";").strip()
        if not stripped or not _READ_ONLY_PREFIX.match(stripped) or ";" in stripped:
            raise UnsafeQueryError("Custom queries must be a single SELECT statement")
        return stripped


# ── Singleton ────────────────────────────────────────────────────
query_builder = QueryBuilder()
