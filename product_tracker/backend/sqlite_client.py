"""
Local-first backend on a single SQLite file.

``SqliteClient`` keeps one connection open for its lifetime, applies the
schema and pending migrations on construction, and serves the data tables
through ``TableRepository``. ``SqliteAuthClient`` registers users in
``auth_users`` with bcrypt password hashes and keeps the session in memory
(one process, one signed-in user).

SQLite calls are synchronous; they run inline inside the async methods,
which is fine for a local CLI working on a small file.

Usage::

    client = SqliteClient.from_config(config.database)
    user = await client.auth.sign_up("me@example.com", "secret123")
    row = await client.insert("products", {...})
"""

from __future__ import annotations

import logging
import secrets
import sqlite3
import uuid
from contextlib import contextmanager
from typing import Any, Generator, Mapping, Optional

import bcrypt

from product_tracker.backend.base import OWNER_COLUMN, AuthClient, Order, PersistenceClient, Row
from product_tracker.config import DatabaseConfig
from product_tracker.db.connection import open_connection
from product_tracker.db.migrations import run_migrations
from product_tracker.db.repositories.auth_repo import AuthUserRepository
from product_tracker.db.repositories.table_repo import TableRepository
from product_tracker.db.schema import apply_schema
from product_tracker.errors import AuthError, NotFoundError, PersistenceError
from product_tracker.models.profile import AuthSession, AuthUser

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a plaintext password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a plaintext password against a bcrypt hash."""
    return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))


@contextmanager
def _translate_errors(table: Optional[str]) -> Generator[None, None, None]:
    """Re-raise driver errors as ``PersistenceError``."""
    try:
        yield
    except sqlite3.Error as exc:
        logger.error("SQLite error on %s: %s", table or "<db>", exc)
        raise PersistenceError(f"Database error on {table or 'database'}: {exc}", table=table) from exc


class SqliteAuthClient(AuthClient):
    """Email/password auth over the ``auth_users`` table.

    Attributes:
        bcrypt_rounds: Work factor for new password hashes.
    """

    def __init__(self, conn: sqlite3.Connection, bcrypt_rounds: int = 12) -> None:
        self._repo = AuthUserRepository(conn)
        self.bcrypt_rounds = bcrypt_rounds
        self._session: Optional[AuthSession] = None

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    async def sign_up(self, email: str, password: str) -> AuthUser:
        email = _normalize_email(email)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters.")

        password_hash = hash_password(password, rounds=self.bcrypt_rounds)
        try:
            user = self._repo.insert(str(uuid.uuid4()), email, password_hash)
        except sqlite3.IntegrityError as exc:
            raise AuthError("User already registered") from exc
        except sqlite3.Error as exc:
            raise PersistenceError(f"Database error on auth_users: {exc}", table="auth_users") from exc

        self._session = _new_session(user)
        logger.info("Registered user %s", user.id)
        return user

    async def sign_in(self, email: str, password: str) -> AuthSession:
        email = _normalize_email(email)
        with _translate_errors("auth_users"):
            found = self._repo.get_credentials(email)
        if found is None or not verify_password(password, found[1]):
            raise AuthError("Invalid login credentials")

        self._session = _new_session(found[0])
        logger.info("Signed in user %s", found[0].id)
        return self._session

    async def sign_out(self) -> None:
        if self._session is not None:
            logger.info("Signed out user %s", self._session.user.id)
        self._session = None

    async def get_user(self) -> Optional[AuthUser]:
        if self._session is None:
            return None
        with _translate_errors("auth_users"):
            return self._repo.get_by_id(self._session.user.id)


class SqliteClient(PersistenceClient):
    """``PersistenceClient`` backed by a local SQLite database.

    Attributes:
        db_path: Database file path, or ``":memory:"``.
    """

    def __init__(
        self,
        db_path: str = ":memory:",
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
        bcrypt_rounds: int = 12,
    ) -> None:
        self.db_path = db_path
        with _translate_errors(None):
            self._conn = open_connection(db_path, wal_mode=wal_mode, busy_timeout_ms=busy_timeout_ms)
            apply_schema(self._conn)
            run_migrations(self._conn)
        self._auth = SqliteAuthClient(self._conn, bcrypt_rounds=bcrypt_rounds)
        self._repos: dict[str, TableRepository] = {}

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "SqliteClient":
        return cls(
            db_path=config.db_path,
            wal_mode=config.wal_mode,
            busy_timeout_ms=config.busy_timeout_ms,
        )

    @property
    def auth(self) -> SqliteAuthClient:
        return self._auth

    @property
    def connection(self) -> sqlite3.Connection:
        """The underlying connection (tests and ``init-db`` use it directly)."""
        return self._conn

    def _repo(self, table: str) -> TableRepository:
        if table not in self._repos:
            with _translate_errors(table):
                self._repos[table] = TableRepository(self._conn, table)
        return self._repos[table]

    async def select(
        self,
        table: str,
        filters: Optional[Mapping[str, Any]] = None,
        order: Optional[Order] = None,
        limit: Optional[int] = None,
    ) -> list[Row]:
        repo = self._repo(table)
        with _translate_errors(table):
            return repo.select(
                filters=filters,
                order_by=order.column if order else None,
                descending=order.descending if order else True,
                limit=limit,
            )

    async def insert(self, table: str, row: Mapping[str, Any]) -> Row:
        repo = self._repo(table)
        with _translate_errors(table):
            stored = repo.insert(row)
        logger.debug("Inserted %s row %s", table, stored["id"])
        return stored

    async def update(
        self,
        table: str,
        row_id: str,
        patch: Mapping[str, Any],
        owner_id: Optional[str] = None,
    ) -> Row:
        repo = self._repo(table)
        with _translate_errors(table):
            updated = repo.update(row_id, patch, filters=_owner(owner_id))
        if updated is None:
            raise NotFoundError(table, row_id)
        return updated

    async def delete(self, table: str, row_id: str, owner_id: Optional[str] = None) -> None:
        repo = self._repo(table)
        with _translate_errors(table):
            deleted = repo.delete(row_id, filters=_owner(owner_id))
        if not deleted:
            raise NotFoundError(table, row_id)

    async def close(self) -> None:
        self._conn.close()
        logger.debug("Closed SQLite connection to %s", self.db_path)


def _owner(owner_id: Optional[str]) -> Optional[dict[str, str]]:
    return {OWNER_COLUMN: owner_id} if owner_id is not None else None


def _normalize_email(email: str) -> str:
    email = email.strip()
    if "@" not in email:
        raise AuthError(f"Invalid email address: '{email}'.")
    return email


def _new_session(user: AuthUser) -> AuthSession:
    return AuthSession(access_token=secrets.token_urlsafe(32), user=user)
