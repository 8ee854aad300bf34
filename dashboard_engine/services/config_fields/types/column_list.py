"""
ColumnListField — Ordered list of column names.

The dialog sends a comma-separated string; it is split, trimmed and
emptied entries are dropped.  Lists are accepted as-is after the same
clean-up.
"""

from __future__ import annotations

from typing import Any, List

from dashboard_engine.services.config_fields.base import InputField


def split_columns(raw: str) -> List[str]:
    """``"name, email,,created_at"`` → ``["name", "email", "created_at"]``."""
    return [col.strip() for col in raw.split(",") if col.strip()]


class ColumnListField(InputField):

    def coerce(self, value: Any) -> Any:
        if isinstance(value, str):
            return split_columns(value)
        if isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value):
            return [v.strip() for v in value if v.strip()]
        return value

    def validate(self, value: Any) -> bool:
        if value is None or value == []:
            return not self.config.required
        if not isinstance(value, list):
            return False
        return all(isinstance(v, str) and v for v in value)

    def get_default(self) -> List[str]:
        d = self.config.default_value
        if d is None:
            return []
        return list(d) if isinstance(d, (list, tuple)) else [d]
