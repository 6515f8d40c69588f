"""
Shared SQLite plumbing for the local backend's repositories.

A repository wraps one ``sqlite3.Connection`` owned by ``SqliteClient``.
Reads go through ``fetchone`` / ``fetchall``; every write goes through
``write``, which commits on success and rolls back on a driver error so a
failed insert never leaves the connection mid-transaction.

Rows come back as ``sqlite3.Row`` (``open_connection`` sets the row
factory); repositories turn them into JSON-shaped dicts or models.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)

Params = Sequence[Any]


class BaseRepository:
    """One connection plus read and committed-write helpers.

    Attributes:
        conn: Connection owned by the caller; never closed here.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    def _run(self, sql: str, params: Params) -> sqlite3.Cursor:
        logger.debug("SQL %s %s", " ".join(sql.split()), tuple(params))
        return self.conn.execute(sql, tuple(params))

    def fetchone(self, sql: str, params: Params = ()) -> Optional[sqlite3.Row]:
        return self._run(sql, params).fetchone()

    def fetchall(self, sql: str, params: Params = ()) -> list[sqlite3.Row]:
        return self._run(sql, params).fetchall()

    def write(self, sql: str, params: Params = ()) -> int:
        """Run one INSERT / UPDATE / DELETE and commit it.

        Returns:
            Number of rows the statement touched.

        Raises:
            sqlite3.Error: After rolling the statement back.
        """
        try:
            cursor = self._run(sql, params)
        except sqlite3.Error:
            self.conn.rollback()
            raise
        self.conn.commit()
        return cursor.rowcount

    def column_names(self, table: str) -> list[str]:
        """Columns of ``table`` in declaration order."""
        return [row["name"] for row in self.fetchall(f"PRAGMA table_info({table});")]
