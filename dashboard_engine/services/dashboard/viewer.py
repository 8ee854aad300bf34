"""
DashboardViewer — Read-only rendering of a user's saved dashboard.

Pipeline per request:

1. Load the user's configs and pick "first ``is_default``, else first".
   None saved → an empty view (the shell offers "Create Dashboard").
2. No widgets in the config → synthesize the seed widgets.
3. Skip widgets whose type or data source cannot be resolved.
4. Fetch every widget's data concurrently through the binder.
5. Render each one: data, placeholder or inline error, independently.

Usage::

    viewer = DashboardViewer(store)
    view = await viewer.view(user_id)
    view.to_dict()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from dashboard_engine.services.catalog.widget_catalog import WidgetCatalog, WidgetTypeDescriptor
from dashboard_engine.services.config_fields.engine import merge_config
from dashboard_engine.services.dashboard.models import DashboardConfig, WidgetInstance, pick_default
from dashboard_engine.services.dashboard.seeds import SeedPolicy, seed_policy
from dashboard_engine.services.data_sources.descriptor import DataSourceDescriptor
from dashboard_engine.services.data_sources.registry import DataSourceRegistry
from dashboard_engine.services.persistence.base import DashboardStore
from dashboard_engine.services.widgets.base import WidgetResult
from dashboard_engine.services.widgets.binding import WidgetDataBinder
from dashboard_engine.services.widgets.engine import WidgetEngine, widget_engine

logger = logging.getLogger(__name__)

NO_DASHBOARD_MESSAGE = (
    "You don't have any dashboard configurations yet. "
    "Create your first dashboard to get started."
)

_Resolved = Tuple[WidgetInstance, WidgetTypeDescriptor, DataSourceDescriptor]


@dataclass
class DashboardView:
    config: Optional[DashboardConfig]
    widgets: List[WidgetResult] = field(default_factory=list)
    seeded: bool = False

    @property
    def has_dashboard(self) -> bool:
        return self.config is not None

    def to_dict(self) -> Dict[str, Any]:
        if self.config is None:
            return {
                "has_dashboard": False,
                "message": NO_DASHBOARD_MESSAGE,
                "widgets": [],
            }
        return {
            "has_dashboard": True,
            "id": self.config.id,
            "dashboard_name": self.config.dashboard_name,
            "layout_config": self.config.layout_config,
            "seeded": self.seeded,
            "widgets": [w.to_dict() for w in self.widgets],
        }


class DashboardViewer:

    def __init__(
        self,
        store: DashboardStore,
        catalog: Optional[WidgetCatalog] = None,
        registry: Optional[DataSourceRegistry] = None,
        binder: Optional[WidgetDataBinder] = None,
        engine: Optional[WidgetEngine] = None,
        seeds: Optional[SeedPolicy] = None,
    ) -> None:
        self._store = store
        self.catalog = catalog or WidgetCatalog(store)
        self.registry = registry or DataSourceRegistry(store)
        self.binder = binder or WidgetDataBinder(store)
        self.engine = engine or widget_engine
        self.seeds = seeds or seed_policy

    async def load_config(self, user_id: str) -> Optional[DashboardConfig]:
        rows = await self._store.list_user_dashboard_configs(user_id)
        return pick_default([DashboardConfig.from_dict(r) for r in rows])

    async def view(self, user_id: str) -> DashboardView:
        config = await self.load_config(user_id)
        if config is None:
            logger.info(f"[Viewer] No dashboard configured for user {user_id}")
            return DashboardView(config=None)

        types, sources = await asyncio.gather(
            self.catalog.list_widget_types(),
            self.registry.list_data_sources(),
        )

        instances = config.widget_configs
        seeded = False
        if not instances:
            instances = self.seeds.synthesize(sources)
            seeded = True

        resolved = self._resolve(instances, types, sources)
        results = await asyncio.gather(
            *(self.render_widget(*item) for item in resolved),
            return_exceptions=True,
        )

        widgets: List[WidgetResult] = []
        for (instance, _descriptor, _ds), result in zip(resolved, results):
            if isinstance(result, BaseException):
                logger.error(f"[Viewer] Widget {instance.id} failed: {result}")
                result = self.engine.error_result(
                    instance.widget_type, str(result), instance.config, instance.id,
                )
            widgets.append(result)

        return DashboardView(config=config, widgets=widgets, seeded=seeded)

    async def render_widget(
        self,
        instance: WidgetInstance,
        descriptor: WidgetTypeDescriptor,
        data_source: DataSourceDescriptor,
    ) -> WidgetResult:
        """Fetch and render one widget; fetch errors become an inline error result."""
        config = merge_config(descriptor.default_config, instance.config)
        state = await self.binder.fetch(data_source, config)
        return self.engine.render_state(instance.widget_type, state, config, instance.id)

    @staticmethod
    def _resolve(
        instances: List[WidgetInstance],
        types: Tuple[WidgetTypeDescriptor, ...],
        sources: Tuple[DataSourceDescriptor, ...],
    ) -> List[_Resolved]:
        by_type = {d.widget_type: d for d in types}
        by_id = {ds.id: ds for ds in sources}
        resolved: List[_Resolved] = []
        for instance in instances:
            descriptor = by_type.get(instance.widget_type)
            data_source = by_id.get(instance.data_source_id)
            if descriptor is None or data_source is None:
                logger.debug(f"[Viewer] Skipping unresolved widget {instance.id}")
                continue
            resolved.append((instance, descriptor, data_source))
        return resolved
