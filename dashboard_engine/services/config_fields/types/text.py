"""TextField — Free-text input (titles, axis column names)."""

from __future__ import annotations

from typing import Any

from dashboard_engine.services.config_fields.base import InputField


class TextField(InputField):
    """Free-text input with optional length constraints."""

    def validate(self, value: Any) -> bool:
        if value is None or value == "":
            return not self.config.required
        if not isinstance(value, str):
            return False
        ui = self.config.ui_config
        mn = ui.get("min_length", 0)
        mx = ui.get("max_length", 1000)
        return mn <= len(value) <= mx

    def get_default(self) -> str:
        return self.config.default_value or ""
