"""
Abstract persistence interface shared by the local and hosted backends.

Every backend offers the same two collaborators:

  - ``PersistenceClient``: row-level ``select`` / ``insert`` / ``update`` /
    ``delete`` over the ``products``, ``user_profiles`` and
    ``ai_recommendations`` tables, exchanging plain JSON-shaped row dicts.
  - ``AuthClient`` (``client.auth``): email/password sign-up and sign-in,
    sign-out, and the current user.

Backends translate their driver or transport errors into
``product_tracker.errors`` exceptions at this boundary; stores never see
``sqlite3.Error`` or ``httpx.HTTPError``.

Writes by id accept an ``owner_id``. When given, the row must also have
``user_id == owner_id``; a row owned by someone else is reported exactly
like a missing one (``NotFoundError``).

Usage::

    client = build_client(config)
    await client.auth.sign_in("me@example.com", "secret")
    rows = await client.select(
        "products",
        filters={"user_id": user.id},
        order=Order("purchase_date"),
    )
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from product_tracker.models.profile import AuthSession, AuthUser

Row = dict[str, Any]

OWNER_COLUMN = "user_id"


def owner_filters(row_id: str, owner_id: Optional[str]) -> dict[str, Any]:
    """Equality filters selecting ``row_id``, scoped to ``owner_id`` when given."""
    filters: dict[str, Any] = {"id": row_id}
    if owner_id is not None:
        filters[OWNER_COLUMN] = owner_id
    return filters


@dataclass(frozen=True)
class Order:
    """Sort specification for ``PersistenceClient.select``."""

    column: str
    descending: bool = True


class AuthClient(ABC):
    """Email/password authentication against a backend."""

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthUser:
        """Register a new user. Starts a session when the backend issues one.

        Raises:
            AuthError: Duplicate email, weak password, or rejected request.
        """

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in and start a session.

        Raises:
            AuthError: Unknown email or wrong password.
        """

    @abstractmethod
    async def sign_out(self) -> None:
        """End the current session. A no-op when nobody is signed in."""

    @abstractmethod
    async def get_user(self) -> Optional[AuthUser]:
        """Return the signed-in user, or ``None``."""

    @property
    @abstractmethod
    def session(self) -> Optional[AuthSession]:
        """The current session held by this client, if any."""


class PersistenceClient(ABC):
    """Row storage for the data tables plus an ``auth`` collaborator."""

    @property
    @abstractmethod
    def auth(self) -> AuthClient:
        """The authentication collaborator for this backend."""

    @abstractmethod
    async def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> list[Row]:
        """Return rows of ``table`` matching every equality filter.

        Args:
            table: Target table.
            filters: Column → value equality constraints (ANDed).
            order: Optional sort column and direction.
            limit: Maximum number of rows.

        Raises:
            PersistenceError: Backend or transport failure.
        """

    @abstractmethod
    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        """Insert ``row`` and return it as stored (with id and defaults).

        Raises:
            PersistenceError: Constraint violation or backend failure.
        """

    @abstractmethod
    async def update(
        self,
        table: str,
        row_id: str,
        patch: Mapping[str, Any],
        owner_id: Optional[str] = None,
    ) -> Row:
        """Apply ``patch`` to one row and return the updated row.

        Raises:
            NotFoundError: No row with ``row_id`` (owned by ``owner_id``).
            PersistenceError: Backend failure.
        """

    @abstractmethod
    async def delete(self, table: str, row_id: str, owner_id: Optional[str] = None) -> None:
        """Delete one row.

        Raises:
            NotFoundError: No row with ``row_id`` (owned by ``owner_id``).
            PersistenceError: Backend failure.
        """

    async def select_one(
        self, table: str, row_id: str, owner_id: Optional[str] = None
    ) -> Optional[Row]:
        """Return the row with ``row_id`` (owned by ``owner_id``), or ``None``."""
        rows = await self.select(table, filters=owner_filters(row_id, owner_id), limit=1)
        return rows[0] if rows else None

    async def close(self) -> None:
        """Release connections held by the client."""
