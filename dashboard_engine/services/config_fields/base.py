"""
Base config-field classes and dataclasses.

Defines the contract every widget config field must follow:
  - ``FieldOption``: single option for selects / data source pickers.
  - ``FieldConfig``: one entry from ``FIELD_REGISTRY`` made concrete.
  - ``BaseField``: abstract base with coerce / validate / get_default.
  - ``OptionsField``: base for select-like fields (static or bound options).
  - ``InputField``: base for text/number/toggle/column list (no options).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


# ─────────────────────────────────────────────────────────────
#  DATA CLASSES
# ─────────────────────────────────────────────────────────────

@dataclass(slots=True)
class FieldOption:
    """Single selectable option."""
    value: Any
    label: str

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "label": self.label}


@dataclass
class FieldConfig:
    """Configuration for one editable widget config key."""
    key: str
    field_type: str          # "text" | "select" | "toggle" | "number" | ...
    label: str
    default_value: Any = None
    placeholder: Optional[str] = None
    required: bool = False
    ui_config: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_registry(cls, entry: Dict[str, Any]) -> "FieldConfig":
        return cls(
            key=entry["key"],
            field_type=entry["field_type"],
            label=entry.get("label", entry["key"]),
            default_value=entry.get("default_value"),
            placeholder=entry.get("placeholder"),
            required=entry.get("required", False),
            ui_config=dict(entry.get("ui_config", {})),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "field_type": self.field_type,
            "label": self.label,
            "default_value": self.default_value,
            "placeholder": self.placeholder,
            "required": self.required,
            "ui_config": self.ui_config,
        }


# ─────────────────────────────────────────────────────────────
#  ABSTRACT BASES
# ─────────────────────────────────────────────────────────────

class BaseField(ABC):
    """
    Abstract base for every config field.

    Subclasses **must** implement:
      - ``validate(value)``  → bool
      - ``get_default()``    → Any

    May override:
      - ``coerce(value)``    → Any   (lossless conversion before validation)
      - ``get_options()``    → list[FieldOption]
    """

    def __init__(self, config: FieldConfig) -> None:
        self.config = config

    @property
    def key(self) -> str:
        return self.config.key

    def coerce(self, value: Any) -> Any:
        """Convert *value* to the field's native type when that is lossless."""
        return value

    @abstractmethod
    def validate(self, value: Any) -> bool:
        """Return ``True`` if *value* is acceptable for this field."""

    @abstractmethod
    def get_default(self) -> Any:
        """Return the value to show when the config has none."""

    def get_options(self) -> List[FieldOption]:
        """Override in option-based fields."""
        return []

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready description for the configuration dialog."""
        out = self.config.to_dict()
        out["options"] = [o.to_dict() for o in self.get_options()]
        out["default_value"] = self.get_default()
        return out


# ─────────────────────────────────────────────────────────────
#  CONVENIENCE BASES
# ─────────────────────────────────────────────────────────────

class OptionsField(BaseField):
    """
    Base for fields backed by a list of selectable options.

    Options come from ``ui_config["options"]`` or are bound at construction
    time (the data source picker is fed from the registry snapshot).
    """

    def __init__(
        self,
        config: FieldConfig,
        options: Optional[List[FieldOption]] = None,
    ) -> None:
        super().__init__(config)
        self._options = options

    def get_options(self) -> List[FieldOption]:
        if self._options is not None:
            return self._options
        static = self.config.ui_config.get("options") or []
        self._options = [FieldOption(value=o["value"], label=o["label"]) for o in static]
        return self._options


class InputField(BaseField):
    """Base for free-input fields. No options to load."""

    def get_options(self) -> List[FieldOption]:
        return []
