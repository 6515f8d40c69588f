"""
Tests for schema DDL and migrations.

What we test
------------
- apply_schema creates every table and is idempotent.
- Foreign keys and CHECK constraints are enforced.
- run_migrations adds relevance_score and the unread index, once; a failing
  migration is not recorded and stays pending.
"""

from __future__ import annotations

import sqlite3

import pytest

from product_tracker.db.connection import get_connection, open_connection
from product_tracker.db.migrations import MIGRATIONS, pending_migrations, run_migrations
from product_tracker.db.schema import ALL_TABLE_NAMES, apply_schema


def _table_names(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'table';").fetchall()
    return {r["name"] for r in rows}


def _index_names(conn: sqlite3.Connection) -> set[str]:
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type = 'index';").fetchall()
    return {r["name"] for r in rows}


class TestApplySchema:
    def test_all_tables_created(self, in_memory_db):
        assert set(ALL_TABLE_NAMES) <= _table_names(in_memory_db)

    def test_idempotent(self, in_memory_db):
        apply_schema(in_memory_db)
        apply_schema(in_memory_db)
        assert set(ALL_TABLE_NAMES) <= _table_names(in_memory_db)

    def test_foreign_keys_enforced(self, in_memory_db):
        with pytest.raises(sqlite3.IntegrityError):
            in_memory_db.execute(
                "INSERT INTO products (id, user_id, name, price, purchase_date, category) "
                "VALUES ('p1', 'ghost', 'X', 1, '2025-01-01', 'software');"
            )

    def test_negative_price_rejected(self, in_memory_db):
        in_memory_db.execute(
            "INSERT INTO auth_users (id, email, password_hash) VALUES ('u1', 'a@b.c', 'h');"
        )
        with pytest.raises(sqlite3.IntegrityError):
            in_memory_db.execute(
                "INSERT INTO products (id, user_id, name, price, purchase_date, category) "
                "VALUES ('p1', 'u1', 'X', -1, '2025-01-01', 'software');"
            )

    def test_email_unique_case_insensitive(self, in_memory_db):
        in_memory_db.execute(
            "INSERT INTO auth_users (id, email, password_hash) VALUES ('u1', 'a@b.c', 'h');"
        )
        with pytest.raises(sqlite3.IntegrityError):
            in_memory_db.execute(
                "INSERT INTO auth_users (id, email, password_hash) VALUES ('u2', 'A@B.C', 'h');"
            )

    def test_get_connection_commits(self, tmp_path):
        db_path = str(tmp_path / "nested" / "tracker.db")
        with get_connection(db_path) as conn:
            apply_schema(conn)
        conn = open_connection(db_path)
        try:
            assert set(ALL_TABLE_NAMES) <= _table_names(conn)
        finally:
            conn.close()


class TestMigrations:
    def test_fresh_database_applies_all(self):
        conn = open_connection(":memory:")
        apply_schema(conn)
        try:
            assert run_migrations(conn) == len(MIGRATIONS)
            cols = {r["name"] for r in conn.execute("PRAGMA table_info(ai_recommendations);")}
            assert "relevance_score" in cols
            assert "idx_recs_user_unread" in _index_names(conn)
        finally:
            conn.close()

    def test_second_run_is_noop(self, in_memory_db):
        assert run_migrations(in_memory_db) == 0

    def test_versions_recorded(self, in_memory_db):
        rows = in_memory_db.execute("SELECT version_id FROM schema_versions;").fetchall()
        assert {r["version_id"] for r in rows} == set(MIGRATIONS)

    def test_nothing_pending_after_run(self, in_memory_db):
        assert pending_migrations(in_memory_db) == []

    def test_failed_migration_stays_pending(self, in_memory_db, monkeypatch):
        def broken(conn):
            conn.execute("ALTER TABLE no_such_table ADD COLUMN x TEXT;")

        monkeypatch.setitem(MIGRATIONS, "0099_broken", (broken, "Always fails"))
        with pytest.raises(sqlite3.OperationalError):
            run_migrations(in_memory_db)
        assert pending_migrations(in_memory_db) == ["0099_broken"]
