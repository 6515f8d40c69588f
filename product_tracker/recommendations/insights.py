"""
Profile-level insights derived from a user's tracked products.

Only the primary interest area is computed from the input (the modal
product category); the remaining fields are canned text until a real model
replaces ``RandomizedScoringStrategy``.
"""

from __future__ import annotations

from collections import Counter
from typing import Iterable, Optional, Sequence

from product_tracker.models.product import Product
from product_tracker.models.recommendation import UserInsights
from product_tracker.taxonomy.recommendation_taxonomy import SkillLevel

DEFAULT_INTEREST_AREA = "Marketing"

PRIMARY_GOAL = "Grow existing business"

SPENDING_PATTERNS: tuple[str, ...] = (
    "Consistent investment in marketing tools",
    "Focus on automation and analytics",
    "Preference for all-in-one solutions",
)

SECONDARY_INTEREST_AREAS: tuple[str, ...] = ("Automation", "Analytics", "Content Marketing")

INSIGHT_RECOMMENDATIONS: tuple[str, ...] = (
    "Consider investing in advanced analytics tools",
    "Look for tools that integrate with your existing stack",
    "Focus on ROI-driven marketing solutions",
    "Explore AI-powered marketing automation",
)


def most_common_category(categories: Sequence[str]) -> Optional[str]:
    """Return the most frequent category, or ``None`` for an empty input.

    Ties go to the tied category that occurs latest in ``categories``.

    Args:
        categories: Category values in product order. Empty strings are ignored.

    Returns:
        The modal category.
    """
    values = [c for c in categories if c]
    if not values:
        return None
    counts = Counter(values)
    top = max(counts.values())
    for value in reversed(values):
        if counts[value] == top:
            return value
    return None  # unreachable


def analyze_user_profile(products: Iterable[Product]) -> UserInsights:
    """Build ``UserInsights`` for the given products.

    Args:
        products: The user's tracked products (any order).

    Returns:
        ``UserInsights`` whose first interest area is the modal category, or
        ``"Marketing"`` when there are no products.
    """
    primary_area = most_common_category([str(p.category) for p in products])
    return UserInsights(
        primary_goal=PRIMARY_GOAL,
        spending_patterns=list(SPENDING_PATTERNS),
        interest_areas=[primary_area or DEFAULT_INTEREST_AREA, *SECONDARY_INTEREST_AREAS],
        skill_level=SkillLevel.INTERMEDIATE,
        recommendations=list(INSIGHT_RECOMMENDATIONS),
    )
