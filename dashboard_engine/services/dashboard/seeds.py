"""
SeedPolicy — YAML loader for the default widgets of an empty dashboard.

Single Responsibility: parse ``default_widgets.yml`` and turn each seed
into a ``WidgetInstance`` bound to the data source whose *name* matches.
Seeds without a matching data source are dropped.

The name matching is a bootstrap convention, not a stable reference;
override the file through ``DEFAULT_WIDGETS_FILE`` rather than adding
logic here.

Usage::

    from dashboard_engine.services.dashboard.seeds import seed_policy

    widgets = seed_policy.synthesize(data_sources)   # list[WidgetInstance]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from dashboard_engine.core.config import settings
from dashboard_engine.services.dashboard.models import WidgetInstance
from dashboard_engine.services.data_sources.descriptor import DataSourceDescriptor

logger = logging.getLogger(__name__)

# Bundled seed file (dashboard_engine/config/default_widgets.yml)
_DEFAULT_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "default_widgets.yml"


# ── Dataclass ────────────────────────────────────────────────────

@dataclass(frozen=True)
class WidgetSeed:
    """One entry of ``default_widgets.yml``."""
    id: str
    widget_type: str
    data_source: str
    config: Dict[str, Any] = field(default_factory=dict)


# ── Loader ───────────────────────────────────────────────────────

class SeedPolicy:
    """
    Loads and caches the seed list from YAML.

    The YAML is read once on first access.  Call ``reload()`` to re-read.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = config_path
        self._seeds: List[WidgetSeed] = []
        self._loaded = False

    @property
    def config_path(self) -> Path:
        if self._config_path is not None:
            return self._config_path
        if settings.DEFAULT_WIDGETS_FILE:
            return Path(settings.DEFAULT_WIDGETS_FILE)
        return _DEFAULT_PATH

    def get_all(self) -> List[WidgetSeed]:
        self._ensure_loaded()
        return list(self._seeds)

    def synthesize(self, data_sources: Sequence[DataSourceDescriptor]) -> List[WidgetInstance]:
        """Seed widgets whose data source name is present in *data_sources*."""
        by_name = {ds.name: ds.id for ds in data_sources}
        widgets: List[WidgetInstance] = []
        for seed in self.get_all():
            ds_id = by_name.get(seed.data_source)
            if not ds_id:
                logger.debug(f"[SeedPolicy] No data source named '{seed.data_source}'")
                continue
            widgets.append(WidgetInstance(
                id=seed.id,
                widget_type=seed.widget_type,
                data_source_id=ds_id,
                config=dict(seed.config),
            ))
        return widgets

    def reload(self) -> None:
        self._loaded = False
        self._seeds = []
        self._ensure_loaded()

    # ── Internal ─────────────────────────────────────────────

    def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._load()

    def _load(self) -> None:
        path = self.config_path
        if not path.exists():
            logger.warning(f"[SeedPolicy] Seed file not found: {path}")
            self._loaded = True
            return

        try:
            raw = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            logger.error(f"[SeedPolicy] YAML parse error: {exc}")
            self._loaded = True
            return

        entries = (raw or {}).get("seeds") if isinstance(raw, dict) else None
        for entry in entries or []:
            if not isinstance(entry, dict):
                continue
            try:
                self._seeds.append(WidgetSeed(
                    id=str(entry["id"]),
                    widget_type=entry["widget_type"],
                    data_source=entry["data_source"],
                    config=dict(entry.get("config") or {}),
                ))
            except (KeyError, TypeError) as exc:
                logger.error(f"[SeedPolicy] Skipping invalid seed {entry!r}: {exc}")

        self._loaded = True
        logger.info(f"[SeedPolicy] Loaded {len(self._seeds)} seed widget(s)")


# ── Singleton ────────────────────────────────────────────────────
seed_policy = SeedPolicy()
