"""
SQLite schema DDL for the local backend.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is **idempotent**:
safe to call on an already-initialized database (e.g. after restart or in tests).

Table creation order respects foreign key dependencies:
  1. auth_users          (no FKs)
  2. user_profiles       (→ auth_users)
  3. products            (→ auth_users)
  4. ai_recommendations  (→ auth_users, products)

``products``, ``user_profiles`` and ``ai_recommendations`` mirror the hosted
backend's tables column for column. JSON-valued columns are stored as TEXT
and listed in ``JSON_COLUMNS`` so the repository layer can encode/decode
them; boolean columns are INTEGER 0/1 and listed in ``BOOL_COLUMNS``.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_NOW = "(strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))"

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_AUTH_USERS = f"""
CREATE TABLE IF NOT EXISTS auth_users (
    id              TEXT    PRIMARY KEY,
    email           TEXT    NOT NULL UNIQUE COLLATE NOCASE,
    password_hash   TEXT    NOT NULL,
    created_at      TEXT    NOT NULL DEFAULT {_NOW}
);
"""

_DDL_USER_PROFILES = f"""
CREATE TABLE IF NOT EXISTS user_profiles (
    id              TEXT    PRIMARY KEY REFERENCES auth_users(id),
    email           TEXT    NOT NULL,
    full_name       TEXT,
    avatar_url      TEXT,
    budget          REAL    CHECK (budget IS NULL OR budget >= 0),
    goals           TEXT,
    preferences     TEXT,
    ai_insights     TEXT,
    created_at      TEXT    NOT NULL DEFAULT {_NOW},
    updated_at      TEXT    NOT NULL DEFAULT {_NOW}
);
"""

_DDL_PRODUCTS = f"""
CREATE TABLE IF NOT EXISTS products (
    id              TEXT    PRIMARY KEY,
    user_id         TEXT    NOT NULL REFERENCES auth_users(id),
    name            TEXT    NOT NULL,
    description     TEXT    NOT NULL DEFAULT '',
    url             TEXT    NOT NULL DEFAULT '',
    price           REAL    NOT NULL CHECK (price >= 0),
    purchase_date   TEXT    NOT NULL,
    category        TEXT    NOT NULL,
    features        TEXT    NOT NULL DEFAULT '{{}}',
    ai_analysis     TEXT,
    tags            TEXT,
    created_at      TEXT    NOT NULL DEFAULT {_NOW}
);
"""

_DDL_PRODUCTS_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_products_user_purchase
    ON products(user_id, purchase_date DESC);
"""

_DDL_AI_RECOMMENDATIONS = f"""
CREATE TABLE IF NOT EXISTS ai_recommendations (
    id                  TEXT    PRIMARY KEY,
    user_id             TEXT    NOT NULL REFERENCES auth_users(id),
    product_id          TEXT    REFERENCES products(id) ON DELETE SET NULL,
    recommendation_type TEXT    NOT NULL,
    content             TEXT    NOT NULL,
    is_read             INTEGER NOT NULL DEFAULT 0,
    created_at          TEXT    NOT NULL DEFAULT {_NOW}
);
"""

_DDL_AI_RECOMMENDATIONS_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_recs_user_created
    ON ai_recommendations(user_id, created_at DESC);
"""

_ALL_DDL: list[str] = [
    _DDL_AUTH_USERS,
    _DDL_USER_PROFILES,
    _DDL_PRODUCTS,
    _DDL_PRODUCTS_INDEXES,
    _DDL_AI_RECOMMENDATIONS,
    _DDL_AI_RECOMMENDATIONS_INDEXES,
]

ALL_TABLE_NAMES: list[str] = [
    "auth_users",
    "user_profiles",
    "products",
    "ai_recommendations",
]

# Tables reachable through the generic persistence client.
DATA_TABLES: frozenset[str] = frozenset({"user_profiles", "products", "ai_recommendations"})

JSON_COLUMNS: dict[str, frozenset[str]] = {
    "user_profiles": frozenset({"goals", "preferences", "ai_insights"}),
    "products": frozenset({"features", "ai_analysis", "tags"}),
    "ai_recommendations": frozenset({"content"}),
}

BOOL_COLUMNS: dict[str, frozenset[str]] = {
    "user_profiles": frozenset(),
    "products": frozenset(),
    "ai_recommendations": frozenset({"is_read"}),
}


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the full DDL schema to the given connection.

    Idempotent; uses ``IF NOT EXISTS`` throughout.

    Args:
        conn: An open ``sqlite3.Connection`` (FK enforcement should be ON).
    """
    logger.info("Applying schema (%d statements)...", len(_ALL_DDL))
    for ddl in _ALL_DDL:
        conn.executescript(ddl)
    conn.commit()
    logger.info("Schema applied. Tables: %s", ", ".join(ALL_TABLE_NAMES))
