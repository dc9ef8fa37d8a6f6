"""Transient user notifications (toasts)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass(frozen=True)
class Notification:
    level: NotificationLevel
    message: str
    created_at: datetime


class Notifier:
    """Collects notifications until a consumer drains them."""

    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def _push(self, level: NotificationLevel, message: str) -> Notification:
        note = Notification(level, message, datetime.now(timezone.utc))
        self._pending.append(note)
        log = logger.warning if level == NotificationLevel.ERROR else logger.info
        log("[%s] %s", level.value, message)
        return note

    def success(self, message: str) -> Notification:
        return self._push(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self._push(NotificationLevel.ERROR, message)

    def info(self, message: str) -> Notification:
        return self._push(NotificationLevel.INFO, message)

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        notes, self._pending = self._pending, []
        return notes
