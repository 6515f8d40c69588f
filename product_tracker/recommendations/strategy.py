"""
Pluggable scoring strategies.

Stores depend on the ``ScoringStrategy`` interface only; which
implementation runs is chosen by ``scoring.strategy`` in config through
``build_strategy()``. ``RandomizedScoringStrategy`` is the placeholder model
(see ``scorer``, ``insights`` and ``analysis``); a real model slots in as a
new subclass plus a registry entry.

Usage::

    strategy = build_strategy(config.scoring)                  # seeded from config
    strategy = build_strategy(config.scoring, rng=random.Random(7))
    content = strategy.recommend_product(request)
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional, Union

from product_tracker.config import ScoringConfig
from product_tracker.models.product import Product, ProductAnalysis, ProductDraft
from product_tracker.models.recommendation import (
    ProductPurchaseContent,
    ProductRecommendationRequest,
    UserInsights,
)
from product_tracker.recommendations.analysis import analyze_product, extract_product_features
from product_tracker.recommendations.insights import analyze_user_profile
from product_tracker.recommendations.scorer import score_purchase

logger = logging.getLogger(__name__)


class ScoringStrategy(ABC):
    """Produces recommendations, insights, analyses and feature maps."""

    name: str  # Override in subclass

    @abstractmethod
    def recommend_product(self, request: ProductRecommendationRequest) -> ProductPurchaseContent:
        """Buy / don't-buy verdict for a prospective product."""

    @abstractmethod
    def analyze_profile(self, products: Iterable[Product]) -> UserInsights:
        """Profile insights from the user's tracked products."""

    @abstractmethod
    def analyze_product(self, product: Union[Product, ProductDraft]) -> ProductAnalysis:
        """Analysis attached to a product when it is added."""

    @abstractmethod
    def extract_features(self, url: str, description: str) -> dict[str, Any]:
        """Raw feature map for a product page."""


class RandomizedScoringStrategy(ScoringStrategy):
    """Placeholder model: templated text with randomized signals.

    Attributes:
        config: Thresholds and ranges from ``[scoring]``.
        rng: Injected random source; seed it for reproducible output.
    """

    name = "randomized"

    def __init__(self, config: ScoringConfig, rng: Optional[random.Random] = None) -> None:
        self.config = config
        self.rng = rng if rng is not None else random.Random(config.seed)

    def recommend_product(self, request: ProductRecommendationRequest) -> ProductPurchaseContent:
        content = score_purchase(request, self.rng, self.config)
        logger.debug(
            "Scored '%s': worth_buying=%s alignment=%.1f similar=%d",
            request.product_name,
            content.worth_buying,
            content.goal_alignment.alignment_score,
            len(content.similarity_to_existing.similar_products),
        )
        return content

    def analyze_profile(self, products: Iterable[Product]) -> UserInsights:
        return analyze_user_profile(products)

    def analyze_product(self, product: Union[Product, ProductDraft]) -> ProductAnalysis:
        return analyze_product(product)

    def extract_features(self, url: str, description: str) -> dict[str, Any]:
        return extract_product_features(url, description)


_STRATEGIES: dict[str, Callable[[ScoringConfig, Optional[random.Random]], ScoringStrategy]] = {
    RandomizedScoringStrategy.name: RandomizedScoringStrategy,
}


def build_strategy(config: ScoringConfig, rng: Optional[random.Random] = None) -> ScoringStrategy:
    """Construct the strategy named by ``config.strategy``.

    Args:
        config: The ``[scoring]`` config section.
        rng: Optional random source overriding ``config.seed``.

    Raises:
        ValueError: If the strategy name is not registered.
    """
    try:
        factory = _STRATEGIES[config.strategy]
    except KeyError:
        raise ValueError(
            f"Unknown scoring strategy '{config.strategy}'. "
            f"Available: {sorted(_STRATEGIES)}."
        ) from None
    return factory(config, rng)
