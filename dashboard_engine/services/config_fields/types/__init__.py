"""Concrete config field types — auto-imported by the schema resolver."""

from dashboard_engine.services.config_fields.types.column_list import ColumnListField
from dashboard_engine.services.config_fields.types.data_source import DataSourceField
from dashboard_engine.services.config_fields.types.number import NumberField
from dashboard_engine.services.config_fields.types.select import SelectField
from dashboard_engine.services.config_fields.types.text import TextField
from dashboard_engine.services.config_fields.types.toggle import ToggleField

__all__ = [
    "ColumnListField",
    "DataSourceField",
    "NumberField",
    "SelectField",
    "TextField",
    "ToggleField",
]
