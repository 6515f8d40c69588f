"""
Forward-only migrations for the local SQLite database.

``apply_schema()`` creates the tables as they were first shipped; anything
added later lives here. ``MIGRATIONS`` maps a version id to
``(function, description)`` and is applied in insertion order. Applied ids
are stored in ``schema_versions``, so ``run_migrations`` can run on every
``SqliteClient`` start.

A migration's ``schema_versions`` row is written in the same ``with conn:``
block as the migration, so a migration that raises is never recorded and
runs again next time.

New migration: write ``migration_NNNN_<what>(conn)`` below and register it
under the next ``"NNNN_<what>"`` key. Keep migrations idempotent (check
``PRAGMA table_info`` or use ``IF NOT EXISTS``) because a database created
by a newer ``apply_schema`` may already have the change.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable

logger = logging.getLogger(__name__)

MigrationFn = Callable[[sqlite3.Connection], None]

_VERSION_TABLE_DDL = """
    CREATE TABLE IF NOT EXISTS schema_versions (
        version_id  TEXT NOT NULL PRIMARY KEY,
        applied_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
        description TEXT
    );
"""


def _has_column(conn: sqlite3.Connection, table: str, column: str) -> bool:
    return any(row[1] == column for row in conn.execute(f"PRAGMA table_info({table});"))


# ── Migrations ────────────────────────────────────────────────────────────────

def migration_0001_bootstrap(conn: sqlite3.Connection) -> None:
    """Baseline marker; the initial tables come from ``apply_schema()``."""


def migration_0002_add_relevance_score(conn: sqlite3.Connection) -> None:
    """Add ``relevance_score`` to ``ai_recommendations``."""
    if not _has_column(conn, "ai_recommendations", "relevance_score"):
        conn.execute("ALTER TABLE ai_recommendations ADD COLUMN relevance_score REAL;")


def migration_0003_add_unread_index(conn: sqlite3.Connection) -> None:
    """Partial index backing the dashboard's unread count."""
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_recs_user_unread "
        "ON ai_recommendations(user_id) WHERE is_read = 0;"
    )


MIGRATIONS: dict[str, tuple[MigrationFn, str]] = {
    "0001_bootstrap": (
        migration_0001_bootstrap,
        "Baseline: schema_versions table created",
    ),
    "0002_relevance_score": (
        migration_0002_add_relevance_score,
        "Add relevance_score to ai_recommendations",
    ),
    "0003_unread_index": (
        migration_0003_add_unread_index,
        "Add partial index on unread ai_recommendations",
    ),
}


# ── Runner ────────────────────────────────────────────────────────────────────

def pending_migrations(conn: sqlite3.Connection) -> list[str]:
    """Version ids in ``MIGRATIONS`` not yet recorded in ``schema_versions``."""
    with conn:
        conn.execute(_VERSION_TABLE_DDL)
    applied = {row[0] for row in conn.execute("SELECT version_id FROM schema_versions;")}
    return [version_id for version_id in MIGRATIONS if version_id not in applied]


def run_migrations(conn: sqlite3.Connection) -> int:
    """Apply every pending migration in order.

    Returns:
        How many migrations this call applied (0 when already current).

    Raises:
        sqlite3.Error: A migration failed; it and everything after it are
            left unapplied.
    """
    pending = pending_migrations(conn)
    for version_id in pending:
        fn, description = MIGRATIONS[version_id]
        logger.info("Applying migration %s: %s", version_id, description)
        try:
            with conn:
                fn(conn)
                conn.execute(
                    "INSERT INTO schema_versions (version_id, description) VALUES (?, ?);",
                    (version_id, description),
                )
        except sqlite3.Error:
            logger.exception("Migration %s failed", version_id)
            raise

    if pending:
        logger.info("Applied %d migration(s).", len(pending))
    return len(pending)
