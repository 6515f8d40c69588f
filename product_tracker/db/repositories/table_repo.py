"""
Generic row repository for the data tables.

``TableRepository`` gives the local backend the same four verbs the hosted
backend exposes (select / insert / update / delete) over plain row dicts.
Rows go in and come out in their JSON shape: columns listed in
``schema.JSON_COLUMNS`` are encoded to TEXT on the way in and decoded on the
way out, and ``schema.BOOL_COLUMNS`` are mapped between ``bool`` and 0/1.

Column names are checked against ``PRAGMA table_info`` before they are
interpolated into SQL, so filters and patches can never name arbitrary SQL.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from typing import Any, Mapping, Optional

from product_tracker.db.repositories.base import BaseRepository
from product_tracker.db.schema import BOOL_COLUMNS, DATA_TABLES, JSON_COLUMNS
from product_tracker.errors import PersistenceError

logger = logging.getLogger(__name__)


class TableRepository(BaseRepository):
    """Row-level access to one of ``user_profiles``, ``products``, ``ai_recommendations``.

    Attributes:
        table: Target table name.
    """

    def __init__(self, conn: sqlite3.Connection, table: str) -> None:
        if table not in DATA_TABLES:
            raise PersistenceError(f"Unknown table '{table}'.", table=table)
        super().__init__(conn)
        self.table = table
        self._columns = frozenset(self.column_names(table))
        self._json_cols = JSON_COLUMNS.get(table, frozenset())
        self._bool_cols = BOOL_COLUMNS.get(table, frozenset())

    # ── Reads ─────────────────────────────────────────────────────────────────

    def select(
        self,
        filters: Optional[Mapping[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Return rows matching every equality filter.

        Args:
            filters: Column → value equality constraints (ANDed).
            order_by: Column to sort on. Ties fall back to insertion order in
                the same direction.
            descending: Sort direction for ``order_by``.
            limit: Maximum number of rows.

        Returns:
            Decoded row dicts.
        """
        clauses, params = self._where(filters or {})
        sql = f"SELECT * FROM {self.table}"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        if order_by is not None:
            self._check_columns([order_by])
            direction = "DESC" if descending else "ASC"
            sql += f" ORDER BY {order_by} {direction}, rowid {direction}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        rows = self.fetchall(sql + ";", params)
        return [self._decode(r) for r in rows]

    def get(self, row_id: str) -> Optional[dict[str, Any]]:
        """Fetch one row by id, or ``None``."""
        row = self.fetchone(f"SELECT * FROM {self.table} WHERE id = ?;", (row_id,))
        return self._decode(row) if row else None

    # ── Writes ────────────────────────────────────────────────────────────────

    def insert(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Insert a row and return it as stored.

        A missing ``id`` is assigned a UUID4. ``None`` values are omitted so
        column defaults apply.

        Args:
            row: JSON-shaped row dict.

        Returns:
            The stored row, including defaulted columns.
        """
        values = {k: v for k, v in row.items() if v is not None}
        values.setdefault("id", str(uuid.uuid4()))
        self._check_columns(values)

        cols = list(values)
        placeholders = ", ".join("?" for _ in cols)
        self.write(
            f"INSERT INTO {self.table} ({', '.join(cols)}) VALUES ({placeholders});",
            [self._encode(c, values[c]) for c in cols],
        )
        stored = self.get(values["id"])
        assert stored is not None
        return stored

    def update(
        self,
        row_id: str,
        patch: Mapping[str, Any],
        filters: Optional[Mapping[str, Any]] = None,
    ) -> Optional[dict[str, Any]]:
        """Apply ``patch`` to the row with ``row_id``.

        Args:
            row_id: Target row id.
            patch: Column → new value. ``id`` is ignored.
            filters: Extra equality constraints the row must also meet
                (e.g. ``{"user_id": owner}``).

        Returns:
            The updated row, or ``None`` if no row matches.
        """
        clauses, params = self._where({**(filters or {}), "id": row_id})
        values = {k: v for k, v in patch.items() if k != "id"}
        if not values:
            rows = self.select(filters={**(filters or {}), "id": row_id}, limit=1)
            return rows[0] if rows else None
        self._check_columns(values)

        assignments = ", ".join(f"{c} = ?" for c in values)
        touched = self.write(
            f"UPDATE {self.table} SET {assignments} WHERE {' AND '.join(clauses)};",
            [*(self._encode(c, v) for c, v in values.items()), *params],
        )
        if touched == 0:
            return None
        return self.get(row_id)

    def delete(self, row_id: str, filters: Optional[Mapping[str, Any]] = None) -> bool:
        """Delete the row with ``row_id`` that also meets ``filters``.

        Returns:
            ``False`` if no row matched.
        """
        clauses, params = self._where({**(filters or {}), "id": row_id})
        touched = self.write(f"DELETE FROM {self.table} WHERE {' AND '.join(clauses)};", params)
        return touched > 0

    # ── Encoding ──────────────────────────────────────────────────────────────

    def _check_columns(self, names: Any) -> None:
        unknown = sorted(set(names) - self._columns)
        if unknown:
            raise PersistenceError(
                f"Unknown column(s) for {self.table}: {', '.join(unknown)}.",
                table=self.table,
            )

    def _where(self, filters: Mapping[str, Any]) -> tuple[list[str], list[Any]]:
        self._check_columns(filters)
        clauses: list[str] = []
        params: list[Any] = []
        for col, val in filters.items():
            if val is None:
                clauses.append(f"{col} IS NULL")
            else:
                clauses.append(f"{col} = ?")
                params.append(self._encode(col, val))
        return clauses, params

    def _encode(self, column: str, value: Any) -> Any:
        if value is None:
            return None
        if column in self._json_cols:
            return json.dumps(value)
        if column in self._bool_cols:
            return int(bool(value))
        return value

    def _decode(self, row: sqlite3.Row) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key in row.keys():
            val = row[key]
            if val is not None and key in self._json_cols:
                val = json.loads(val)
            elif val is not None and key in self._bool_cols:
                val = bool(val)
            result[key] = val
        return result
