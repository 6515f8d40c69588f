"""
User-visible notifications.

Stores report the outcome of user actions ("Product added successfully!",
"Failed to add product") through a ``Notifier``. Each notification is logged
as it is emitted and queued until the front end drains it; the CLI prints
and drains the queue after every command.
"""

from __future__ import annotations

import logging
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class NotificationLevel(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notification(BaseModel):
    """One queued message."""

    model_config = ConfigDict(frozen=True)

    level: NotificationLevel
    message: str


_LOG_LEVELS = {
    NotificationLevel.SUCCESS: logging.INFO,
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.ERROR: logging.WARNING,
}


class Notifier:
    """Collects notifications in emission order."""

    def __init__(self) -> None:
        self._pending: list[Notification] = []

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        note = Notification(level=level, message=message)
        logger.log(_LOG_LEVELS[level], "[%s] %s", level, message)
        self._pending.append(note)
        return note

    def success(self, message: str) -> Notification:
        return self.notify(NotificationLevel.SUCCESS, message)

    def error(self, message: str) -> Notification:
        return self.notify(NotificationLevel.ERROR, message)

    def info(self, message: str) -> Notification:
        return self.notify(NotificationLevel.INFO, message)

    @property
    def pending(self) -> list[Notification]:
        """Queued notifications, oldest first (a copy)."""
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Return and clear the queue."""
        drained, self._pending = self._pending, []
        return drained
