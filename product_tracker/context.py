"""
Service context: everything a command handler needs, built once.

``build_context(config)`` wires the persistence client, scoring strategy,
notifier and the three stores together. Handlers receive the context
explicitly; there are no module-level store singletons.

Usage::

    ctx = build_context(config)
    try:
        await ctx.auth.sign_in(email, password)
        await ctx.products.fetch_products(ctx.auth.user.id)
    finally:
        await ctx.aclose()

Tests pass ``client=`` and ``rng=`` to run against an in-memory database with
a seeded random source.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from product_tracker.backend.base import PersistenceClient
from product_tracker.backend.factory import build_client
from product_tracker.config import AppConfig
from product_tracker.notifications import Notifier
from product_tracker.recommendations.strategy import ScoringStrategy, build_strategy
from product_tracker.stores.auth_store import AuthStore
from product_tracker.stores.product_store import ProductStore
from product_tracker.stores.recommendation_store import RecommendationStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Process-wide collaborators, threaded through handlers."""

    config: AppConfig
    client: PersistenceClient
    strategy: ScoringStrategy
    notifier: Notifier
    auth: AuthStore
    products: ProductStore
    recommendations: RecommendationStore

    async def aclose(self) -> None:
        """Release the persistence client's connections."""
        await self.client.close()


def build_context(
    config: AppConfig,
    client: Optional[PersistenceClient] = None,
    strategy: Optional[ScoringStrategy] = None,
    rng: Optional[random.Random] = None,
) -> AppContext:
    """Construct the service context.

    Args:
        config: Loaded application config.
        client: Persistence client override; defaults to ``build_client(config)``.
        strategy: Scoring strategy override; defaults to ``build_strategy(config.scoring)``.
        rng: Random source for the default strategy (ignored when
            ``strategy`` is given).

    Returns:
        A ready ``AppContext``.
    """
    client = client if client is not None else build_client(config)
    strategy = strategy if strategy is not None else build_strategy(config.scoring, rng=rng)
    notifier = Notifier()
    logger.debug(
        "Built context: client=%s strategy=%s",
        type(client).__name__, type(strategy).__name__,
    )
    return AppContext(
        config=config,
        client=client,
        strategy=strategy,
        notifier=notifier,
        auth=AuthStore(client, notifier),
        products=ProductStore(client, strategy, notifier),
        recommendations=RecommendationStore(client, strategy, notifier),
    )
