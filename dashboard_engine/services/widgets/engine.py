"""
WidgetEngine — Render dispatch via Registry Pattern.

Single Responsibility: given ``(widget_type, data, config)``, resolve the
concrete renderer class and execute ``process()``.

Uses ``WIDGET_REGISTRY`` for metadata and Python's module system for
class resolution.  No hardcoded if/else chains.  Nothing here raises:
an unknown type becomes an inline notice and a failing renderer becomes
an error result for that widget only.

Usage::

    from dashboard_engine.services.widgets.engine import widget_engine

    result = widget_engine.render("pie_chart", rows, merged_config)
    result.to_dict()
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from dashboard_engine.config.widget_registry import WIDGET_REGISTRY
from dashboard_engine.services.widgets.base import (
    BaseWidget,
    WidgetContext,
    WidgetResult,
    WidgetType,
)

if TYPE_CHECKING:
    from dashboard_engine.services.widgets.binding import WidgetDataState

logger = logging.getLogger(__name__)

# Module path where concrete renderers live
_WIDGET_MODULE = "dashboard_engine.services.widgets.types"


class WidgetEngine:
    """
    Dynamic renderer resolver and executor.

    Pipeline per widget:
      1. Parse ``widget_type`` into ``WidgetType``.
      2. Import the renderer class named in WIDGET_REGISTRY.
      3. Build WidgetContext.
      4. Call ``widget.process()`` → WidgetResult.
    """

    def __init__(self) -> None:
        # Cache: class_name → class object (avoids repeated imports)
        self._class_cache: Dict[str, Type[BaseWidget]] = {}

    def render(
        self,
        widget_type: str,
        data: Any,
        config: Optional[Dict[str, Any]] = None,
        widget_id: str = "",
    ) -> WidgetResult:
        """Render one widget; never raises."""
        config = config or {}

        kind = WidgetType.parse(widget_type)
        registry_entry = WIDGET_REGISTRY.get(widget_type)
        if kind is None or registry_entry is None:
            logger.warning(f"[WidgetEngine] Unknown widget type '{widget_type}'")
            return self.unknown_result(widget_type, config, widget_id)

        class_name = registry_entry["renderer"]
        widget_cls = self._resolve_class(class_name)
        if widget_cls is None:
            return self.error_result(
                widget_type,
                f"Renderer '{class_name}' not found in {_WIDGET_MODULE}",
                config,
                widget_id,
            )

        ctx = WidgetContext(
            widget_type=kind,
            widget_id=widget_id,
            data=data,
            config=config,
        )

        try:
            return widget_cls(ctx).process()
        except Exception as exc:
            logger.error(
                f"[WidgetEngine] Error rendering '{widget_type}' ({widget_id}): {exc}",
                exc_info=True,
            )
            return self.error_result(widget_type, str(exc), config, widget_id)

    def render_state(
        self,
        widget_type: str,
        state: "WidgetDataState",
        config: Optional[Dict[str, Any]] = None,
        widget_id: str = "",
    ) -> WidgetResult:
        """Skeleton while loading, inline error on failure, else ``render()``."""
        config = config or {}
        if state.is_loading:
            return self.loading_result(widget_type, config, widget_id)
        if state.error is not None:
            return self.error_result(widget_type, state.error, config, widget_id)
        return self.render(widget_type, state.data, config, widget_id)

    def render_many(self, items: List[Dict[str, Any]]) -> List[WidgetResult]:
        """
        Render a batch of ``{"widget_type", "data", "config", "widget_id"}`` dicts.

        Each item is rendered independently; one failure never affects
        the others.
        """
        return [
            self.render(
                item["widget_type"],
                item.get("data"),
                item.get("config"),
                item.get("widget_id", ""),
            )
            for item in items
        ]

    # ── Class resolution ─────────────────────────────────────

    def _resolve_class(self, class_name: str) -> Optional[Type[BaseWidget]]:
        """
        Import and cache the renderer class by its name.

        Converts CamelCase class name to snake_case module name:
          ``MetricCard`` → ``metric_card``
        """
        if class_name in self._class_cache:
            return self._class_cache[class_name]

        module_name = self._class_to_module(class_name)
        full_path = f"{_WIDGET_MODULE}.{module_name}"

        try:
            module = importlib.import_module(full_path)
            cls = getattr(module, class_name, None)
            if cls and issubclass(cls, BaseWidget):
                self._class_cache[class_name] = cls
                return cls
            logger.error(
                f"[WidgetEngine] {full_path} does not export '{class_name}' "
                f"as a BaseWidget subclass"
            )
        except ImportError as exc:
            logger.error(f"[WidgetEngine] Cannot import {full_path}: {exc}")

        return None

    @staticmethod
    def _class_to_module(class_name: str) -> str:
        """
        Convert CamelCase to snake_case for module resolution.

        ``RevenueMetric`` → ``revenue_metric``
        ``DataTable``     → ``data_table``
        """
        result: List[str] = []
        for i, ch in enumerate(class_name):
            if ch.isupper() and i > 0:
                result.append("_")
            result.append(ch.lower())
        return "".join(result)

    # ── Non-renderer results ─────────────────────────────────

    @staticmethod
    def unknown_result(
        widget_type: str,
        config: Dict[str, Any],
        widget_id: str = "",
    ) -> WidgetResult:
        return WidgetResult(
            widget_id=widget_id,
            widget_type=widget_type,
            title=config.get("title") or "",
            data=None,
            metadata={"unknown": True, "message": f"Unknown widget type: {widget_type}"},
        )

    @staticmethod
    def error_result(
        widget_type: str,
        error: str,
        config: Dict[str, Any],
        widget_id: str = "",
    ) -> WidgetResult:
        """Inline error shown in place of the widget's content."""
        return WidgetResult(
            widget_id=widget_id,
            widget_type=widget_type,
            title=config.get("title") or "",
            data=None,
            metadata={"error": True, "message": error},
        )

    @staticmethod
    def loading_result(
        widget_type: str,
        config: Dict[str, Any],
        widget_id: str = "",
    ) -> WidgetResult:
        """Skeleton state while the widget's fetch is pending."""
        return WidgetResult(
            widget_id=widget_id,
            widget_type=widget_type,
            title=config.get("title") or "",
            data=None,
            metadata={"loading": True},
        )


# ── Singleton ────────────────────────────────────────────────────
widget_engine = WidgetEngine()
