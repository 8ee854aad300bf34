"""
BuilderSession — One dashboard composition session (palette → preview → save).

State machine::

    EMPTY ──add──▶ COMPOSING ──save──▶ SAVING ──ok──▶ EMPTY (reset)
                      ▲                  │
                      │                  └─fail──▶ COMPOSING (work kept)
                      └──edit── SAVE_REJECTED ◀──precondition──┘

Collaborators are injected: the store for persistence, the notifier for
user-facing notices, the identity for ``user_id``, plus the catalog and
registry for the palette and data source defaults.

Usage::

    session = BuilderSession(store, notifier, IdentityContext(user_id="u-1"))
    await session.load()
    session.add_widget(descriptor)
    dialog = session.open_config(session.widgets[0], 0)
    dialog.update("title", "Active users")
    session.save_config(dialog.result())
    outcome = await session.save_dashboard()
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict, List, Optional

from dashboard_engine.core.config import settings
from dashboard_engine.services.catalog.widget_catalog import (
    WidgetCatalog,
    WidgetTypeDescriptor,
    group_by_category,
)
from dashboard_engine.services.config_fields.dialog import ConfigDialog
from dashboard_engine.services.config_fields.engine import merge_config, schema_resolver
from dashboard_engine.services.dashboard.models import (
    DashboardConfig,
    WidgetInstance,
    new_widget_id,
)
from dashboard_engine.services.dashboard.notifications import (
    LoggingNotifier,
    NotificationKind,
    Notifier,
)
from dashboard_engine.services.data_sources.registry import DataSourceRegistry
from dashboard_engine.services.persistence.base import DashboardStore

logger = logging.getLogger(__name__)

MSG_SAVED = "Dashboard saved successfully!"
MSG_SAVE_FAILED = "Failed to save dashboard. Please try again."


class SessionState(str, Enum):
    EMPTY = "empty"
    COMPOSING = "composing"
    SAVING = "saving"
    SAVE_REJECTED = "save_rejected"


class SaveOutcome(str, Enum):
    SAVED = "saved"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass(frozen=True)
class IdentityContext:
    """Current user as seen by the builder; ``user_id=None`` means signed out."""
    user_id: Optional[str] = None
    tenant_id: Optional[str] = None


class BuilderSession:

    def __init__(
        self,
        store: DashboardStore,
        notifier: Optional[Notifier] = None,
        identity: Optional[IdentityContext] = None,
        catalog: Optional[WidgetCatalog] = None,
        registry: Optional[DataSourceRegistry] = None,
    ) -> None:
        self._store = store
        self._notifier = notifier or LoggingNotifier()
        self.identity = identity or IdentityContext()
        self.catalog = catalog or WidgetCatalog(store)
        self.registry = registry or DataSourceRegistry(store)

        self.state = SessionState.EMPTY
        self.dashboard_name = settings.DEFAULT_DASHBOARD_NAME
        self.is_default = False
        self.widgets: List[WidgetInstance] = []
        self.dialog: Optional[ConfigDialog] = None

    # ─────────────────────────────────────────────────────────────
    #  LOADING / PANES
    # ─────────────────────────────────────────────────────────────

    @property
    def is_loading(self) -> bool:
        return self.catalog.is_loading or self.registry.is_loading

    async def load(self) -> None:
        """Fetch the widget catalog and data sources concurrently."""
        await asyncio.gather(
            self.catalog.list_widget_types(),
            self.registry.list_data_sources(),
        )

    def palette(self) -> Dict[str, List[WidgetTypeDescriptor]]:
        return group_by_category(self.catalog.snapshot())

    def preview(self) -> List[Dict[str, Any]]:
        """Selected widgets with the palette metadata the preview pane shows."""
        types = {d.widget_type: d for d in self.catalog.snapshot()}
        out: List[Dict[str, Any]] = []
        for instance in self.widgets:
            descriptor = types.get(instance.widget_type)
            out.append({
                **instance.to_dict(),
                "name": descriptor.name if descriptor else instance.widget_type,
                "category": descriptor.category if descriptor else None,
            })
        return out

    # ─────────────────────────────────────────────────────────────
    #  COMPOSITION
    # ─────────────────────────────────────────────────────────────

    def set_dashboard_name(self, name: str) -> None:
        self.dashboard_name = name
        self._touch()

    def add_widget(self, descriptor: WidgetTypeDescriptor) -> WidgetInstance:
        sources = self.registry.snapshot()
        instance = WidgetInstance(
            id=new_widget_id(),
            widget_type=descriptor.widget_type,
            data_source_id=sources[0].id if sources else "",
            config=merge_config(descriptor.default_config, {"title": descriptor.name}),
        )
        self.widgets = self.widgets + [instance]
        self._touch()
        logger.debug(f"[Builder] Added {instance.widget_type} ({instance.id})")
        return instance

    def remove_widget(self, widget_id: str) -> None:
        self.widgets = [w for w in self.widgets if w.id != widget_id]
        if self.dialog is not None and self.dialog.index >= len(self.widgets):
            self.close_config()
        self._touch()

    def open_config(
        self,
        instance: Optional[WidgetInstance],
        index: int,
    ) -> Optional[ConfigDialog]:
        """Open the configuration dialog; ``None`` (nothing shown) without a widget."""
        if instance is None:
            self.close_config()
            return None

        types = {d.widget_type: d for d in self.catalog.snapshot()}
        descriptor = types.get(instance.widget_type) or WidgetTypeDescriptor(
            widget_type=instance.widget_type,
            name=instance.widget_type,
            category="other",
        )
        self.dialog = ConfigDialog(
            descriptor=descriptor,
            index=index,
            prior_config=instance.config,
            data_sources=self.registry.snapshot(),
            instance_data_source_id=instance.data_source_id,
        )
        return self.dialog

    def close_config(self) -> None:
        """Cancel: drop the dialog and its unsaved edits."""
        self.dialog = None

    def save_config(
        self,
        config: Dict[str, Any],
        index: Optional[int] = None,
    ) -> Optional[WidgetInstance]:
        """
        Merge *config* into the widget at *index* (default: the open dialog's).

        Values are validated per field; rejected ones keep their prior value.
        """
        if index is None:
            if self.dialog is None:
                return None
            index = self.dialog.index
        if not 0 <= index < len(self.widgets):
            logger.warning(f"[Builder] save_config: no widget at index {index}")
            return None

        current = self.widgets[index]
        merged = schema_resolver.merge_config(
            current.config,
            config,
            widget_type=current.widget_type,
            data_sources=self.registry.snapshot(),
        )
        updated = replace(
            current,
            config=merged,
            data_source_id=merged.get("data_source_id") or current.data_source_id,
        )
        self.widgets = self.widgets[:index] + [updated] + self.widgets[index + 1:]
        self.dialog = None
        self._touch()
        return updated

    # ─────────────────────────────────────────────────────────────
    #  PERSISTENCE
    # ─────────────────────────────────────────────────────────────

    def to_config(self) -> DashboardConfig:
        return DashboardConfig(
            user_id=self.identity.user_id,
            tenant_id=self.identity.tenant_id,
            dashboard_name=self.dashboard_name.strip(),
            widget_configs=list(self.widgets),
            is_default=self.is_default,
        )

    async def save_dashboard(self) -> SaveOutcome:
        """
        Persist the composition.

        Preconditions are checked before the store is touched; a rejected
        or failed save leaves the widgets and name exactly as they were.
        """
        if self.state == SessionState.SAVING:
            logger.debug("[Builder] Save already in progress")
            return SaveOutcome.REJECTED

        config = self.to_config()
        problem = config.validate()
        if problem is not None:
            self.state = SessionState.SAVE_REJECTED
            self._notifier.notify(NotificationKind.ERROR, problem)
            return SaveOutcome.REJECTED

        self.state = SessionState.SAVING
        try:
            await self._store.create_dashboard_config(config.to_dict())
        except Exception as exc:
            logger.error(f"[Builder] Failed to save dashboard: {exc}", exc_info=True)
            self.state = SessionState.COMPOSING
            self._notifier.notify(NotificationKind.ERROR, MSG_SAVE_FAILED)
            return SaveOutcome.FAILED

        logger.info(
            f"[Builder] Saved '{config.dashboard_name}' "
            f"with {len(config.widget_configs)} widget(s) for user {config.user_id}"
        )
        self._notifier.notify(NotificationKind.SUCCESS, MSG_SAVED)
        self.reset()
        return SaveOutcome.SAVED

    def reset(self) -> None:
        self.dashboard_name = settings.DEFAULT_DASHBOARD_NAME
        self.is_default = False
        self.widgets = []
        self.dialog = None
        self.state = SessionState.EMPTY

    def _touch(self) -> None:
        if self.state != SessionState.SAVING:
            self.state = SessionState.COMPOSING
