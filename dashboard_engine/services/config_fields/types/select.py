"""SelectField — Single-value selection from a fixed option list."""

from __future__ import annotations

from typing import Any

from dashboard_engine.services.config_fields.base import OptionsField


class SelectField(OptionsField):
    """Single-select fed from ``ui_config["options"]``."""

    def validate(self, value: Any) -> bool:
        if value is None:
            return not self.config.required
        return any(o.value == value for o in self.get_options())

    def get_default(self) -> Any:
        return self.config.default_value
