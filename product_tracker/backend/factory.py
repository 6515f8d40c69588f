"""
Backend selection.

``build_client(config)`` returns the ``PersistenceClient`` named by
``config.backend.kind``.
"""

from __future__ import annotations

import logging

from product_tracker.backend.base import PersistenceClient
from product_tracker.config import AppConfig

logger = logging.getLogger(__name__)


def build_client(config: AppConfig) -> PersistenceClient:
    """Construct the configured persistence client.

    Args:
        config: Loaded application config.

    Returns:
        ``SqliteClient`` for ``backend.kind = "sqlite"``, ``RestClient`` for
        ``"rest"``.
    """
    if config.backend.kind == "rest":
        from product_tracker.backend.rest_client import RestClient

        logger.info("Using hosted backend at %s", config.backend.url)
        return RestClient.from_config(config.backend)

    from product_tracker.backend.sqlite_client import SqliteClient

    logger.info("Using local SQLite backend at %s", config.database.db_path)
    return SqliteClient.from_config(config.database)
