"""
ConfigSchemaResolver — Editable config surface and non-destructive merge.

It:

1. Reads the common fields plus the widget type's entries from
   ``FIELD_REGISTRY``.
2. Builds a ``FieldConfig`` per entry.
3. Dynamically imports the concrete field class from
   ``dashboard_engine.services.config_fields.types``.
4. Instantiates it.  The data source picker gets its options from the
   registry snapshot handed in by the caller.

Merging is shallow: overrides win key by key and keys absent from the
overrides keep their existing value.  An explicit ``None`` override is a
"clear" and is stored as ``None``; renderers treat it like a missing key.

Usage::

    from dashboard_engine.services.config_fields.engine import schema_resolver

    fields  = schema_resolver.describe("metric_card", data_sources, "Metric Card")
    merged  = schema_resolver.merge_config(prior, {"page_size": "25"}, "data_table")
    initial = schema_resolver.dialog_config(descriptor, prior, data_sources)
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Dict, List, Optional, Sequence, Type

from dashboard_engine.config.field_registry import COMMON_FIELDS, FIELD_REGISTRY
from dashboard_engine.services.config_fields.base import BaseField, FieldConfig, FieldOption
from dashboard_engine.services.data_sources.descriptor import DataSourceDescriptor

logger = logging.getLogger(__name__)


# ── Type map: field_type → module name holding the class ──
_TYPE_TO_MODULE: dict[str, str] = {
    "text":        "text",
    "select":      "select",
    "toggle":      "toggle",
    "number":      "number",
    "column_list": "column_list",
    "data_source": "data_source",
}

# ── Class name per field_type (the concrete Python class) ──
_TYPE_TO_CLASS: dict[str, str] = {
    "text":        "TextField",
    "select":      "SelectField",
    "toggle":      "ToggleField",
    "number":      "NumberField",
    "column_list": "ColumnListField",
    "data_source": "DataSourceField",
}


def _get_field_class(field_type: str) -> Optional[Type[BaseField]]:
    """Dynamically import and return the concrete field class."""
    mod_name = _TYPE_TO_MODULE.get(field_type)
    cls_name = _TYPE_TO_CLASS.get(field_type)
    if not mod_name or not cls_name:
        return None
    module = importlib.import_module(f"dashboard_engine.services.config_fields.types.{mod_name}")
    return getattr(module, cls_name, None)


def merge_config(existing: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow key-by-key merge; returns a new dict."""
    return {**existing, **overrides}


class ConfigSchemaResolver:
    """
    Per-widget-type field sets, validation and merging.

    The set of widget types and fields is closed: everything comes from
    ``FIELD_REGISTRY``.  An unknown widget type only has the common fields.
    """

    # ── Build instances ──────────────────────────────────────

    def get_fields(
        self,
        widget_type: str,
        data_sources: Sequence[DataSourceDescriptor] = (),
        title_placeholder: Optional[str] = None,
    ) -> List[BaseField]:
        """Common fields first, then the type-specific ones, in registry order."""
        instances: List[BaseField] = []
        for entry in COMMON_FIELDS + FIELD_REGISTRY.get(widget_type, []):
            config = FieldConfig.from_registry(entry)
            if config.key == "title" and title_placeholder:
                config.placeholder = title_placeholder

            cls = _get_field_class(config.field_type)
            if cls is None:
                logger.warning(f"[SchemaResolver] No class for field type '{config.field_type}'")
                continue

            if config.field_type == "data_source":
                options = [FieldOption(value=ds.id, label=ds.name) for ds in data_sources]
                instances.append(cls(config, options))
            else:
                instances.append(cls(config))
        return instances

    def describe(
        self,
        widget_type: str,
        data_sources: Sequence[DataSourceDescriptor] = (),
        title_placeholder: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """JSON-serializable field list for the configuration dialog."""
        return [f.to_dict() for f in self.get_fields(widget_type, data_sources, title_placeholder)]

    def field_keys(self, widget_type: str) -> List[str]:
        return [e["key"] for e in COMMON_FIELDS + FIELD_REGISTRY.get(widget_type, [])]

    # ── Validation ───────────────────────────────────────────

    def validate_overrides(
        self,
        widget_type: str,
        overrides: Dict[str, Any],
        data_sources: Sequence[DataSourceDescriptor] = (),
    ) -> Dict[str, Any]:
        """
        Coerce and validate user-supplied config values.

        Returns::

            {
                "valid": True/False,
                "errors": {"key": "message", ...},
                "cleaned": {"key": cleaned_value, ...},
            }

        Keys the widget type does not declare are passed through as-is.
        """
        fields = {f.key: f for f in self.get_fields(widget_type, data_sources)}
        errors: dict[str, str] = {}
        cleaned: dict[str, Any] = {}

        for key, raw in overrides.items():
            fld = fields.get(key)
            if fld is None or raw is None:
                cleaned[key] = raw
                continue

            value = fld.coerce(raw)
            if fld.validate(value):
                cleaned[key] = value
            else:
                errors[key] = f"Invalid value for {fld.config.label}: {raw!r}"

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "cleaned": cleaned,
        }

    # ── Merging ──────────────────────────────────────────────

    def merge_config(
        self,
        existing: Dict[str, Any],
        overrides: Dict[str, Any],
        widget_type: Optional[str] = None,
        data_sources: Sequence[DataSourceDescriptor] = (),
    ) -> Dict[str, Any]:
        """
        Merge *overrides* onto *existing*.

        Without ``widget_type`` this is a plain shallow merge.  With it,
        each override is validated first; rejected keys keep the value
        they had in *existing*.
        """
        if widget_type is None:
            return merge_config(existing, overrides)

        result = self.validate_overrides(widget_type, overrides, data_sources)
        for key, message in result["errors"].items():
            logger.warning(f"[SchemaResolver] {widget_type}.{key} rejected: {message}")
        return merge_config(existing, result["cleaned"])

    def dialog_config(
        self,
        default_config: Dict[str, Any],
        prior_config: Optional[Dict[str, Any]],
        data_sources: Sequence[DataSourceDescriptor] = (),
        instance_data_source_id: str = "",
    ) -> Dict[str, Any]:
        """
        Initial dialog state: ``default_config ⊕ prior_config ⊕ {data_source_id}``.

        The data source falls back from the prior config to the instance's
        own binding, then to the first registered data source.
        """
        prior = prior_config or {}
        fallback = (
            prior.get("data_source_id")
            or instance_data_source_id
            or (data_sources[0].id if data_sources else "")
        )
        return merge_config(merge_config(default_config, prior), {"data_source_id": fallback})


# ── Singleton ────────────────────────────────────────────────
schema_resolver = ConfigSchemaResolver()
