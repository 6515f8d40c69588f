"""
Repository for locally-registered users (``auth_users``).

Only the local backend uses this table; the hosted backend keeps its users
behind its own auth service.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from product_tracker.db.repositories.base import BaseRepository
from product_tracker.models.profile import AuthUser

logger = logging.getLogger(__name__)


class AuthUserRepository(BaseRepository):
    """Read/write access to the ``auth_users`` table."""

    def insert(self, user_id: str, email: str, password_hash: str) -> AuthUser:
        """Register a new user.

        Args:
            user_id: Pre-assigned UUID.
            email: Login email; unique, case-insensitive.
            password_hash: bcrypt hash of the password.

        Returns:
            The stored ``AuthUser``.

        Raises:
            sqlite3.IntegrityError: If the email is already registered.
        """
        self.write(
            "INSERT INTO auth_users (id, email, password_hash) VALUES (?, ?, ?);",
            (user_id, email, password_hash),
        )
        user = self.get_by_id(user_id)
        assert user is not None
        return user

    def get_by_id(self, user_id: str) -> Optional[AuthUser]:
        """Fetch a user by id, or ``None``."""
        row = self.fetchone("SELECT * FROM auth_users WHERE id = ?;", (user_id,))
        return _row_to_user(row) if row else None

    def get_credentials(self, email: str) -> Optional[tuple[AuthUser, str]]:
        """Fetch a user and their password hash by email.

        Returns:
            ``(AuthUser, password_hash)`` or ``None`` if the email is unknown.
        """
        row = self.fetchone("SELECT * FROM auth_users WHERE email = ?;", (email,))
        if row is None:
            return None
        return _row_to_user(row), row["password_hash"]


def _row_to_user(row: sqlite3.Row) -> AuthUser:
    return AuthUser(id=row["id"], email=row["email"], created_at=row["created_at"])
