"""ToggleField — Boolean checkbox."""

from __future__ import annotations

from typing import Any

from dashboard_engine.services.config_fields.base import InputField

_TRUTHY = {"true", "1", "yes", "on"}
_FALSY = {"false", "0", "no", "off"}


class ToggleField(InputField):
    """Simple boolean toggle."""

    def coerce(self, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUTHY:
                return True
            if lowered in _FALSY:
                return False
        if isinstance(value, int) and not isinstance(value, bool) and value in (0, 1):
            return bool(value)
        return value

    def validate(self, value: Any) -> bool:
        if value is None:
            return not self.config.required
        return isinstance(value, bool)

    def get_default(self) -> bool:
        return bool(self.config.default_value) if self.config.default_value is not None else False
