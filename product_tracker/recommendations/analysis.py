"""
Templated product analysis and feature extraction.

Both functions are deterministic stand-ins: the analysis is built from the
product's name and category, and feature extraction returns a fixed map
regardless of the URL or description.
"""

from __future__ import annotations

from typing import Any, Union

from product_tracker.models.product import Product, ProductAnalysis, ProductDraft

ANALYSIS_SCORE = 7.5

KEY_FEATURES: tuple[str, ...] = (
    "Easy to use interface",
    "Integration with popular platforms",
    "Detailed analytics",
    "Automation capabilities",
)

PROS: tuple[str, ...] = (
    "User-friendly",
    "Good value for money",
    "Regular updates",
    "Responsive support",
)

CONS: tuple[str, ...] = (
    "Limited advanced features",
    "Could have better documentation",
    "Some learning curve for beginners",
)

EXTRA_TAGS: tuple[str, ...] = ("Digital", "Tool", "Software")


def analyze_product(product: Union[Product, ProductDraft]) -> ProductAnalysis:
    """Return the templated analysis for a stored product or a draft."""
    # Raw category value, same as the interest areas in profile insights.
    category = str(product.category) if product.category else ""
    return ProductAnalysis(
        summary=(
            f"{product.name} is a {category.lower() or 'marketing'} tool "
            "that helps with digital marketing efforts."
        ),
        key_features=list(KEY_FEATURES),
        pros=list(PROS),
        cons=list(CONS),
        recommendation_score=ANALYSIS_SCORE,
        tags=[category or "Marketing", *EXTRA_TAGS],
    )


def extract_product_features(url: str, description: str) -> dict[str, Any]:
    """Return the fixed raw feature map for a product page.

    Args:
        url: Product URL (unused by this stand-in).
        description: Product description (unused by this stand-in).

    Returns:
        ``{"core_features": [...], "pricing_tier": ..., "target_audience": ...}``
    """
    return {
        "core_features": [
            "Email automation",
            "Landing page builder",
            "A/B testing",
            "Analytics dashboard",
            "Integration with CRM systems",
        ],
        "pricing_tier": "mid-range",
        "target_audience": "small to medium businesses",
    }
