"""
DataSourceField — Picks one data source from the registry snapshot.

Options are bound by the schema resolver from the descriptors it was
given.  When no snapshot was supplied (registry still loading) any
string id is accepted so the dialog never blocks on the registry.
"""

from __future__ import annotations

from typing import Any

from dashboard_engine.services.config_fields.base import OptionsField


class DataSourceField(OptionsField):

    def validate(self, value: Any) -> bool:
        if value is None or value == "":
            return not self.config.required
        if not isinstance(value, str):
            return False
        opts = self.get_options()
        if not opts:
            return True
        return any(o.value == value for o in opts)

    def get_default(self) -> str:
        opts = self.get_options()
        return opts[0].value if opts else ""
