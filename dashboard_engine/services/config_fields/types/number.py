"""NumberField — Numeric input with min/max bounds."""

from __future__ import annotations

from typing import Any, Union

from dashboard_engine.services.config_fields.base import InputField


class NumberField(InputField):
    """Numeric input; ``ui_config["integer"]`` restricts it to whole numbers."""

    def coerce(self, value: Any) -> Any:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            text = value.strip()
            try:
                value = int(text)
            except ValueError:
                try:
                    value = float(text)
                except ValueError:
                    return value
        if (
            self.config.ui_config.get("integer")
            and isinstance(value, float)
            and value.is_integer()
        ):
            return int(value)
        return value

    def validate(self, value: Any) -> bool:
        if value is None:
            return not self.config.required
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        ui = self.config.ui_config
        if ui.get("integer") and not isinstance(value, int):
            return False
        lo = ui.get("min")
        hi = ui.get("max")
        if lo is not None and value < lo:
            return False
        if hi is not None and value > hi:
            return False
        return True

    def get_default(self) -> Union[int, float]:
        return self.config.default_value if self.config.default_value is not None else 0
