"""
Shared pytest fixtures for the Product Tracker test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema and migrations applied.
  - ``sqlite_client``: A ``SqliteClient`` on ``:memory:`` with a cheap
    bcrypt work factor.
  - ``app_config`` / ``rng`` / ``strategy``: Seeded scoring setup.
  - ``ctx`` / ``signed_in_ctx``: A full service context over the in-memory
    client, before and after signing up a test user.
  - ``make_product``: Factory for ``Product`` objects.
"""

from __future__ import annotations

import random
import sqlite3
from datetime import date
from typing import Any, Callable, Generator

import pytest

from product_tracker.backend.sqlite_client import SqliteClient
from product_tracker.config import AppConfig, ScoringConfig
from product_tracker.context import AppContext, build_context
from product_tracker.db.connection import open_connection
from product_tracker.db.migrations import run_migrations
from product_tracker.db.schema import apply_schema
from product_tracker.models.product import Product
from product_tracker.recommendations.strategy import RandomizedScoringStrategy
from product_tracker.taxonomy.product_taxonomy import ProductCategory

TEST_EMAIL = "sam@example.com"
TEST_PASSWORD = "correct-horse"


# ── Database fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with schema + migrations.

    Foreign key enforcement is ON. Connection is closed after the test.
    """
    conn = open_connection(":memory:")
    apply_schema(conn)
    run_migrations(conn)
    yield conn
    conn.close()


@pytest.fixture
def sqlite_client() -> Generator[SqliteClient, None, None]:
    """A ``SqliteClient`` on a private in-memory database."""
    client = SqliteClient(":memory:", bcrypt_rounds=4)
    yield client
    client.connection.close()


# ── Scoring fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def app_config() -> AppConfig:
    """Default config with a fixed scoring seed."""
    return AppConfig(scoring=ScoringConfig(seed=42))


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def strategy(app_config: AppConfig, rng: random.Random) -> RandomizedScoringStrategy:
    return RandomizedScoringStrategy(app_config.scoring, rng=rng)


# ── Context fixtures ──────────────────────────────────────────────────────────

@pytest.fixture
def ctx(app_config: AppConfig, sqlite_client: SqliteClient) -> AppContext:
    """Service context over the in-memory client, nobody signed in."""
    return build_context(app_config, client=sqlite_client, rng=random.Random(42))


@pytest.fixture
async def signed_in_ctx(ctx: AppContext) -> AppContext:
    """Service context with ``TEST_EMAIL`` signed up and signed in."""
    user = await ctx.auth.sign_up(TEST_EMAIL, TEST_PASSWORD, "Sam Doe")
    assert user is not None, ctx.auth.error
    ctx.notifier.drain()
    return ctx


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def make_product() -> Callable[..., Product]:
    """Factory for valid ``Product`` objects; keyword overrides win."""
    counter = iter(range(1, 10_000))

    def _make(**overrides: Any) -> Product:
        n = next(counter)
        fields: dict[str, Any] = dict(
            id=f"prod-{n}",
            user_id="user-1",
            name=f"Product {n}",
            category=ProductCategory.SOFTWARE,
            price=29.0,
            purchase_date=date(2025, 1, n % 28 + 1),
        )
        fields.update(overrides)
        return Product(**fields)

    return _make
