"""
Exception hierarchy for Product Tracker.

Backends raise these at their boundary (transport and driver exceptions are
translated here); stores catch ``ProductTrackerError``, record the message
in their ``error`` field and emit a notification. Nothing in this hierarchy
is fatal to the process.
"""

from __future__ import annotations

from typing import Optional


class ProductTrackerError(Exception):
    """Base class for all expected, action-scoped failures."""


class AuthError(ProductTrackerError):
    """Bad credentials, duplicate sign-up, or no signed-in user."""


class PersistenceError(ProductTrackerError):
    """The backing store rejected or failed an operation.

    Attributes:
        table: Table the operation targeted, when known.
    """

    def __init__(self, message: str, table: Optional[str] = None) -> None:
        super().__init__(message)
        self.table = table


class NotFoundError(PersistenceError):
    """An update or delete addressed an id the store does not hold."""

    def __init__(self, table: str, row_id: str) -> None:
        super().__init__(f"No row with id '{row_id}' in {table}.", table=table)
        self.row_id = row_id
