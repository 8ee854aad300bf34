"""
ConfigDialog — Working state of one open widget configuration dialog.

Opened by ``BuilderSession.open_config`` for the widget at ``index``.
Edits are collected in a private copy of the config and only reach the
composition when the builder calls ``save_config(dialog.result())``.
"""

from __future__ import annotations

from typing import Any, Dict, List, Sequence

from dashboard_engine.services.catalog.widget_catalog import WidgetTypeDescriptor
from dashboard_engine.services.config_fields.engine import schema_resolver
from dashboard_engine.services.data_sources.descriptor import DataSourceDescriptor


class ConfigDialog:

    def __init__(
        self,
        descriptor: WidgetTypeDescriptor,
        index: int,
        prior_config: Dict[str, Any],
        data_sources: Sequence[DataSourceDescriptor] = (),
        instance_data_source_id: str = "",
    ) -> None:
        self.descriptor = descriptor
        self.index = index
        self.data_sources = tuple(data_sources)
        self.config = schema_resolver.dialog_config(
            descriptor.default_config,
            prior_config,
            self.data_sources,
            instance_data_source_id,
        )

    @property
    def widget_type(self) -> str:
        return self.descriptor.widget_type

    def fields(self) -> List[Dict[str, Any]]:
        return schema_resolver.describe(self.widget_type, self.data_sources, self.descriptor.name)

    def update(self, key: str, value: Any) -> None:
        self.config = {**self.config, key: value}

    def result(self) -> Dict[str, Any]:
        return dict(self.config)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "widget_type": self.widget_type,
            "config": self.result(),
            "fields": self.fields(),
        }
