"""
Dashboard summary: the numbers shown on the overview screen.

``build_dashboard_summary()`` is a pure function over already-fetched
products and recommendations; it never touches the backend.
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from pydantic import BaseModel, ConfigDict

from product_tracker.models.product import Product
from product_tracker.models.recommendation import AIRecommendation


class CategoryCount(BaseModel):
    """Number of tracked products in one category."""

    model_config = ConfigDict(frozen=True)

    category: str
    count: int


class DashboardSummary(BaseModel):
    """Overview of a user's stack.

    Attributes:
        recent_products: Newest purchases first.
        recent_recommendations: Newest recommendations first.
        total_monthly_spend: Sum of all product prices.
        product_count: Number of tracked products.
        unread_count: Unread recommendations.
        category_breakdown: Products per category, most common first.
    """

    model_config = ConfigDict(frozen=True)

    recent_products: list[Product] = []
    recent_recommendations: list[AIRecommendation] = []
    total_monthly_spend: float = 0.0
    product_count: int = 0
    unread_count: int = 0
    category_breakdown: list[CategoryCount] = []


def build_dashboard_summary(
    products: Sequence[Product],
    recommendations: Sequence[AIRecommendation],
    recent_products: int = 5,
    recent_recommendations: int = 3,
) -> DashboardSummary:
    """Summarize products and recommendations for the dashboard.

    Args:
        products: All of the user's products (any order).
        recommendations: All of the user's recommendations (any order).
        recent_products: How many recent products to include.
        recent_recommendations: How many recent recommendations to include.

    Returns:
        ``DashboardSummary``. Category ties keep first-seen order.
    """
    by_purchase = sorted(products, key=lambda p: p.purchase_date, reverse=True)
    by_created = sorted(
        recommendations,
        key=lambda r: r.created_at.timestamp() if r.created_at else 0.0,
        reverse=True,
    )
    counts = Counter(str(p.category) for p in products)

    return DashboardSummary(
        recent_products=by_purchase[:recent_products],
        recent_recommendations=by_created[:recent_recommendations],
        total_monthly_spend=round(sum(p.price for p in products), 2),
        product_count=len(products),
        unread_count=sum(1 for r in recommendations if not r.is_read),
        category_breakdown=[
            CategoryCount(category=cat, count=n) for cat, n in counts.most_common()
        ],
    )
