"""
Notification sink used by the builder.

The builder only calls ``notify(kind, message)`` and never waits on or
inspects the result.  ``LoggingNotifier`` is the default sink when the
shell does not provide one.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Protocol, Tuple, runtime_checkable

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@runtime_checkable
class Notifier(Protocol):

    def notify(self, kind: NotificationKind, message: str) -> None:
        ...


class LoggingNotifier:
    """Writes every notice to the log."""

    def notify(self, kind: NotificationKind, message: str) -> None:
        if kind == NotificationKind.ERROR:
            logger.warning(f"[Notify] {message}")
        else:
            logger.info(f"[Notify] {message}")


class RecordingNotifier(LoggingNotifier):
    """Keeps every notice so a request handler can echo it back."""

    def __init__(self) -> None:
        self.notices: List[Tuple[NotificationKind, str]] = []

    def notify(self, kind: NotificationKind, message: str) -> None:
        super().notify(kind, message)
        self.notices.append((kind, message))

    @property
    def last_message(self) -> Optional[str]:
        return self.notices[-1][1] if self.notices else None
