"""
Widget rendering and data binding.

Modules:
  base           : BaseWidget ABC, WidgetType enum and WidgetResult dataclass.
  engine         : WidgetEngine — render dispatch via Registry Pattern.
  binding        : WidgetDataBinder — deduplicated, cached data fetches.
  helpers        : Shared number / currency / label formatting.
  types/         : Concrete renderers (metric, revenue, charts, table).
"""

from dashboard_engine.services.widgets.base import BaseWidget, WidgetResult, WidgetType
from dashboard_engine.services.widgets.engine import WidgetEngine, widget_engine

__all__ = ["BaseWidget", "WidgetResult", "WidgetType", "WidgetEngine", "widget_engine"]
