"""
Purchase recommendation scoring: turns a ``ProductRecommendationRequest``
into a ``ProductPurchaseContent`` verdict.

This is a placeholder model. Apart from the similarity check, every signal
is drawn from an injected ``random.Random``; seed it for reproducible output.

Steps (draw order is fixed so a seeded run is repeatable)
----------------------------------------------------------
1. Similarity:
    An owned product is similar when its category equals the requested name
    (case-insensitive) or either name contains the other. Each match draws
    a score uniform in [0.5, 1.0) times ``similarity_scale`` (default 10,
    so scores share the 0–10 scale of ``alignment_score``).

2. Price estimate:
    Integer uniform in [price_min, price_max), default [20, 200).
    within_budget = estimated_price <= user_budget.

3. Goal partition:
    Each requested goal is aligned with probability ``aligned_probability``
    (default 0.7). alignment_score = 10 * |aligned| / |goals|, 0 if none.

4. Verdict:
    worth_buying = alignment_score > 6 AND within_budget AND similar < 2

5. Text:
    Templated recommendation, budget impact text, and two fixed alternative
    suggestions when the verdict is negative.
"""

from __future__ import annotations

import random
import re
from typing import Iterable, Sequence

from product_tracker.config import ScoringConfig
from product_tracker.models.product import Product
from product_tracker.models.recommendation import (
    AlternativeSuggestion,
    BudgetAnalysis,
    GoalAlignment,
    ProductPurchaseContent,
    ProductRecommendationRequest,
    SimilarityToExisting,
    SimilarProduct,
)

OPEN_SOURCE_ALTERNATIVE_URL = "https://example.com/open-source-marketing-tools"


# ── Signals ───────────────────────────────────────────────────────────────────

def is_similar(product: Product, product_name: str) -> bool:
    """Whether an owned product overlaps the requested product name."""
    wanted = product_name.lower()
    owned = product.name.lower()
    same_category = str(product.category).lower() == wanted
    return same_category or wanted in owned or owned in wanted


def find_similar_products(
    products: Iterable[Product],
    product_name: str,
    rng: random.Random,
    similarity_scale: float = 10.0,
) -> list[SimilarProduct]:
    """Return owned products similar to ``product_name``, in input order.

    Args:
        products: Products the user already owns.
        product_name: Name of the product under consideration.
        rng: Random source for the similarity scores.
        similarity_scale: Multiplier applied to the [0.5, 1.0) draw.

    Returns:
        One ``SimilarProduct`` per match.
    """
    return [
        SimilarProduct(
            id=p.id,
            name=p.name,
            similarity_score=(rng.random() * 0.5 + 0.5) * similarity_scale,
        )
        for p in products
        if is_similar(p, product_name)
    ]


def estimate_price(rng: random.Random, price_min: int = 20, price_max: int = 200) -> int:
    """Stand-in monthly price, integer uniform in ``[price_min, price_max)``."""
    return rng.randrange(price_min, price_max)


def partition_goals(
    goals: Sequence[str],
    rng: random.Random,
    aligned_probability: float = 0.7,
) -> GoalAlignment:
    """Split ``goals`` into aligned / misaligned with one draw per goal."""
    aligned = [g for g in goals if rng.random() < aligned_probability]
    return GoalAlignment.from_partition(goals, aligned)


def is_worth_buying(
    alignment_score: float,
    within_budget: bool,
    similar_count: int,
    min_alignment: float = 6.0,
    max_similar: int = 2,
) -> bool:
    """Final verdict: strong alignment, affordable, and little overlap.

    Rules (all must hold):
        alignment_score >  min_alignment   (default 6)
        within_budget
        similar_count   <  max_similar     (default 2)
    """
    return alignment_score > min_alignment and within_budget and similar_count < max_similar


# ── Text ──────────────────────────────────────────────────────────────────────

def budget_impact_text(estimated_price: float, budget: float, within_budget: bool) -> str:
    """Describe the share of the monthly budget the purchase would take."""
    if budget <= 0:
        return "High impact (no budget set)"
    pct = _round_half_up(estimated_price / budget * 100)
    level = "Low" if within_budget else "High"
    return f"{level} impact ({pct}% of your budget)"


def build_recommendation_text(
    product_name: str,
    worth_buying: bool,
    alignment: GoalAlignment,
    within_budget: bool,
    estimated_price: int,
    user_budget: float,
    similar: Sequence[SimilarProduct],
) -> str:
    """Assemble the recommendation paragraph from the scored signals."""
    price = f"${estimated_price}"
    budget = f"${_format_amount(user_budget)}"
    similar_names = ", ".join(p.name for p in similar)
    parts: list[str] = []

    if worth_buying:
        parts.append(
            f"Based on our analysis, {product_name} appears to be a good investment "
            "for your marketing stack."
        )
        if alignment.aligned_goals:
            parts.append(f"It aligns well with your goals of {', '.join(alignment.aligned_goals)}.")
        parts.append(f"At an estimated price of {price}, it fits within your budget of {budget}.")
        if similar:
            parts.append(
                f"However, note that you already have {len(similar)} similar product(s): "
                f"{similar_names}. Consider if this new tool offers unique features that "
                "your existing tools don't provide."
            )
        else:
            parts.append(
                "This tool fills a gap in your current marketing stack and should provide good value."
            )
        return " ".join(parts)

    parts.append(f"We don't recommend purchasing {product_name} at this time.")
    if not alignment.aligned_goals:
        parts.append("It doesn't align well with any of your stated goals.")
    elif len(alignment.misaligned_goals) > len(alignment.aligned_goals):
        parts.append("It only partially aligns with your goals.")
    if not within_budget:
        parts.append(f"At an estimated price of {price}, it exceeds your budget of {budget}.")
    if similar:
        parts.append(
            f"You already have similar tools: {similar_names}. Consider maximizing the use "
            "of these existing tools before investing in a new one."
        )
    return " ".join(parts)


def slugify(name: str) -> str:
    """Lowercase ``name`` and collapse whitespace runs to single hyphens."""
    return re.sub(r"\s+", "-", name.strip().lower())


def build_alternatives(product_name: str) -> list[AlternativeSuggestion]:
    """The two fixed alternatives offered when a purchase is not recommended."""
    return [
        AlternativeSuggestion(
            name=f"Alternative to {product_name}",
            url=f"https://example.com/alternative-to-{slugify(product_name)}",
            reason="More affordable option with similar features",
        ),
        AlternativeSuggestion(
            name="Free Open Source Alternative",
            url=OPEN_SOURCE_ALTERNATIVE_URL,
            reason="No-cost option to try before investing",
        ),
    ]


# ── Composition ───────────────────────────────────────────────────────────────

def score_purchase(
    request: ProductRecommendationRequest,
    rng: random.Random,
    config: ScoringConfig,
) -> ProductPurchaseContent:
    """Score one purchase request end to end.

    Never raises for a valid request; every field of the result is populated.

    Args:
        request: The validated request.
        rng: Random source (seeded for reproducible output).
        config: Scoring thresholds and ranges.

    Returns:
        Fully populated ``ProductPurchaseContent``.
    """
    similar = find_similar_products(
        request.existing_products, request.product_name, rng, config.similarity_scale
    )
    estimated_price = estimate_price(rng, config.price_min, config.price_max)
    within_budget = estimated_price <= request.user_budget
    alignment = partition_goals(request.user_goals, rng, config.aligned_probability)

    worth_buying = is_worth_buying(
        alignment.alignment_score,
        within_budget,
        len(similar),
        min_alignment=config.worth_buying_min_alignment,
        max_similar=config.max_similar_products,
    )

    return ProductPurchaseContent(
        recommendation=build_recommendation_text(
            request.product_name,
            worth_buying,
            alignment,
            within_budget,
            estimated_price,
            request.user_budget,
            similar,
        ),
        worth_buying=worth_buying,
        estimated_price=float(estimated_price),
        goal_alignment=alignment,
        budget_analysis=BudgetAnalysis(
            within_budget=within_budget,
            budget_impact=budget_impact_text(estimated_price, request.user_budget, within_budget),
        ),
        similarity_to_existing=SimilarityToExisting(
            has_similar=bool(similar),
            similar_products=similar,
        ),
        alternative_suggestions=[] if worth_buying else build_alternatives(request.product_name),
    )


# ── Helpers ───────────────────────────────────────────────────────────────────

def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _format_amount(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:.2f}"
