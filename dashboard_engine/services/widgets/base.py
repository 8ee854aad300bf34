"""
BaseWidget — Abstract base class for all widget renderers.

Single Responsibility: define the contract that every renderer must follow.
Renderers are "dumb processors": they receive the fetched data plus the
merged config and return a structured JSON-ready result.  They do NOT
know how the data was obtained.

Every concrete renderer inherits from BaseWidget and implements ``process()``.

Usage in a concrete widget::

    from dashboard_engine.services.widgets.base import BaseWidget, WidgetResult

    class MetricCard(BaseWidget):
        def process(self) -> WidgetResult:
            ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

NO_DATA_MESSAGE = "No data available"


class WidgetType(str, Enum):
    """Closed set of renderable widget types."""
    METRIC_CARD = "metric_card"
    LINE_CHART = "line_chart"
    BAR_CHART = "bar_chart"
    PIE_CHART = "pie_chart"
    REVENUE_METRIC = "revenue_metric"
    DATA_TABLE = "data_table"

    @classmethod
    def parse(cls, value: str) -> Optional["WidgetType"]:
        try:
            return cls(value)
        except ValueError:
            return None


@dataclass
class WidgetContext:
    """
    Everything a renderer needs to process its data.

    Populated by the WidgetEngine before calling ``process()``.
    """
    widget_type: WidgetType
    widget_id: str = ""

    # Fetched payload: list of row dicts or a single record dict
    data: Any = None

    # Merged config (defaults ⊕ saved ⊕ overrides); None values mean "cleared"
    config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WidgetResult:
    """Standardized output from any renderer."""
    widget_id: str
    widget_type: str
    title: str
    data: Any
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_placeholder(self) -> bool:
        return bool(self.metadata.get("empty"))

    @property
    def is_error(self) -> bool:
        return bool(self.metadata.get("error"))

    @property
    def message(self) -> Optional[str]:
        return self.metadata.get("message")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "widget_id": self.widget_id,
            "widget_type": self.widget_type,
            "title": self.title,
            "data": self.data,
            "metadata": self.metadata,
        }


class BaseWidget(ABC):
    """
    Abstract base class for all renderers.

    Subclasses MUST implement:
      - ``process()`` → WidgetResult

    The renderer receives its context through ``self.ctx``.
    """

    def __init__(self, ctx: WidgetContext) -> None:
        self.ctx = ctx

    @abstractmethod
    def process(self) -> WidgetResult:
        """
        Process the input data and return a structured result.

        Returns:
            WidgetResult with the widget's processed data.
        """
        ...

    # ── Convenience properties ───────────────────────────────────

    @property
    def widget_type(self) -> str:
        return self.ctx.widget_type.value

    @property
    def title(self) -> str:
        return self.option("title", "") or ""

    @property
    def rows(self) -> List[Dict[str, Any]]:
        """The payload when it is array-shaped, else an empty list."""
        return self.ctx.data if isinstance(self.ctx.data, list) else []

    @property
    def record(self) -> Dict[str, Any]:
        """The payload when it is a single record, else an empty dict."""
        return self.ctx.data if isinstance(self.ctx.data, dict) else {}

    def option(self, key: str, default: Any = None) -> Any:
        """Config value for *key*; a cleared (``None``) value falls back to *default*."""
        value = self.ctx.config.get(key)
        return default if value is None else value

    # ── Result builders ──────────────────────────────────────────

    def _result(self, data: Any, **meta: Any) -> WidgetResult:
        """Shorthand to build a WidgetResult."""
        return WidgetResult(
            widget_id=self.ctx.widget_id,
            widget_type=self.widget_type,
            title=self.title,
            data=data,
            metadata={"widget_category": meta.pop("category", self.widget_type), **meta},
        )

    def _empty(self) -> WidgetResult:
        """Build the standard "No data available" placeholder."""
        return WidgetResult(
            widget_id=self.ctx.widget_id,
            widget_type=self.widget_type,
            title=self.title,
            data=None,
            metadata={"empty": True, "message": NO_DATA_MESSAGE},
        )
