"""
Shared state machine for the domain stores.

Every store action follows the same contract:
  1. ``_begin()``: ``status = loading``, ``error = None``.
  2. Await the persistence client / scoring strategy.
  3. On success: update the cached data, then ``_succeed()`` (``status = idle``).
  4. On an expected failure: ``_fail()`` logs it, sets ``error`` and
     ``status = idle``, optionally emits an error notification, and leaves
     the cached data untouched.

Expected failures are ``ProductTrackerError`` (backend, auth, not found) and
``ValueError`` (which covers pydantic validation of rows and strategy
output). Anything else is a programming error and propagates.

No retries, no queueing, no de-duplication of concurrent calls.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Optional

from product_tracker.backend.base import PersistenceClient
from product_tracker.errors import ProductTrackerError
from product_tracker.notifications import Notifier

logger = logging.getLogger(__name__)

EXPECTED_ERRORS: tuple[type[Exception], ...] = (ProductTrackerError, ValueError)


class AsyncStatus(StrEnum):
    """Whether a store action is in flight."""

    IDLE = "idle"
    LOADING = "loading"


class BaseStore:
    """Common ``status`` / ``error`` state and the action lifecycle.

    Attributes:
        client: Persistence backend.
        notifier: Sink for user-visible notifications.
        status: ``idle`` or ``loading``.
        error: Message of the last failed action, cleared when the next starts.
    """

    def __init__(self, client: PersistenceClient, notifier: Notifier) -> None:
        self.client = client
        self.notifier = notifier
        self.status = AsyncStatus.IDLE
        self.error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.status == AsyncStatus.LOADING

    def _begin(self) -> None:
        self.status = AsyncStatus.LOADING
        self.error = None

    def _succeed(self) -> None:
        self.status = AsyncStatus.IDLE

    def _fail(self, exc: Exception, fallback: str, notify: Optional[str] = None) -> None:
        """Record a failed action.

        Args:
            exc: The caught exception.
            fallback: Error text used when ``exc`` carries no message.
            notify: Error notification to emit, if any.
        """
        logger.error("%s: %s", fallback, exc)
        self.status = AsyncStatus.IDLE
        self.error = str(exc) or fallback
        if notify:
            self.notifier.error(notify)
