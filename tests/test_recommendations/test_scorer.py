"""
Tests for purchase recommendation scoring.

What we test
------------
- is_similar / find_similar_products: name containment and category match.
- partition_goals: partition property for any seed.
- is_worth_buying: every combination of the three rules.
- budget_impact_text: percentages, rounding, zero budget.
- build_alternatives / slugify: fixed alternatives when not worth buying.
- score_purchase: seeded determinism, forced verdicts, similarity scale.
"""

from __future__ import annotations

import itertools
import random

import pytest

from product_tracker.config import ScoringConfig
from product_tracker.models.recommendation import ProductRecommendationRequest
from product_tracker.recommendations.scorer import (
    OPEN_SOURCE_ALTERNATIVE_URL,
    budget_impact_text,
    build_alternatives,
    estimate_price,
    find_similar_products,
    is_similar,
    is_worth_buying,
    partition_goals,
    score_purchase,
    slugify,
)
from product_tracker.taxonomy.product_taxonomy import ProductCategory


def _request(**overrides) -> ProductRecommendationRequest:
    fields = dict(product_name="SEMrush", user_budget=100.0, user_goals=["side_hustle"])
    fields.update(overrides)
    return ProductRecommendationRequest(**fields)


# ── Similarity ────────────────────────────────────────────────────────────────

class TestIsSimilar:
    def test_requested_name_contained_in_owned(self, make_product):
        assert is_similar(make_product(name="ClickFunnels Pro"), "ClickFunnels")

    def test_owned_name_contained_in_requested(self, make_product):
        assert is_similar(make_product(name="clickfunnels"), "ClickFunnels Pro")

    def test_unrelated_names(self, make_product):
        assert not is_similar(make_product(name="Mailchimp"), "SEMrush")

    def test_category_equal_to_requested_name(self, make_product):
        product = make_product(name="Canva", category=ProductCategory.SOFTWARE)
        assert is_similar(product, "Software")


class TestFindSimilarProducts:
    def test_only_matches_returned_in_order(self, make_product, rng):
        products = [
            make_product(name="ClickFunnels Pro"),
            make_product(name="Mailchimp"),
            make_product(name="ClickFunnels Classic"),
        ]
        similar = find_similar_products(products, "ClickFunnels", rng)
        assert [s.name for s in similar] == ["ClickFunnels Pro", "ClickFunnels Classic"]
        assert [s.id for s in similar] == [products[0].id, products[2].id]

    def test_scores_on_default_scale(self, make_product, rng):
        products = [make_product(name="Tool") for _ in range(20)]
        for s in find_similar_products(products, "Tool", rng):
            assert 5.0 <= s.similarity_score < 10.0

    def test_scores_on_unit_scale(self, make_product, rng):
        products = [make_product(name="Tool") for _ in range(20)]
        for s in find_similar_products(products, "Tool", rng, similarity_scale=1.0):
            assert 0.5 <= s.similarity_score < 1.0

    def test_no_products(self, rng):
        assert find_similar_products([], "Tool", rng) == []


# ── Price and goals ───────────────────────────────────────────────────────────

class TestEstimatePrice:
    def test_range(self, rng):
        prices = {estimate_price(rng) for _ in range(500)}
        assert min(prices) >= 20
        assert max(prices) < 200

    def test_custom_range(self, rng):
        assert estimate_price(rng, 5, 6) == 5


class TestPartitionGoals:
    @pytest.mark.parametrize("seed", range(10))
    def test_partition_property(self, seed):
        goals = ["main_business", "side_hustle", "passive_income", "e_commerce"]
        alignment = partition_goals(goals, random.Random(seed))
        assert set(alignment.aligned_goals) | set(alignment.misaligned_goals) == set(goals)
        assert not set(alignment.aligned_goals) & set(alignment.misaligned_goals)
        assert alignment.alignment_score == 10 * len(alignment.aligned_goals) / len(goals)

    def test_empty_goals(self, rng):
        alignment = partition_goals([], rng)
        assert alignment.alignment_score == 0.0

    def test_probability_one_aligns_everything(self, rng):
        alignment = partition_goals(["a", "b"], rng, aligned_probability=1.0)
        assert alignment.misaligned_goals == []
        assert alignment.alignment_score == 10.0

    def test_probability_zero_aligns_nothing(self, rng):
        alignment = partition_goals(["a", "b"], rng, aligned_probability=0.0)
        assert alignment.aligned_goals == []
        assert alignment.alignment_score == 0.0


# ── Verdict ───────────────────────────────────────────────────────────────────

class TestIsWorthBuying:
    @pytest.mark.parametrize(
        "alignment_ok,within_budget,few_similar",
        list(itertools.product([True, False], repeat=3)),
    )
    def test_all_rules_required(self, alignment_ok, within_budget, few_similar):
        score = 7.0 if alignment_ok else 6.0
        similar = 1 if few_similar else 2
        expected = alignment_ok and within_budget and few_similar
        assert is_worth_buying(score, within_budget, similar) is expected

    def test_thresholds_are_strict(self):
        assert not is_worth_buying(6.0, True, 0)
        assert is_worth_buying(6.01, True, 1)
        assert not is_worth_buying(10.0, True, 2)


# ── Text ──────────────────────────────────────────────────────────────────────

class TestBudgetImpactText:
    def test_low_impact(self):
        assert budget_impact_text(50, 100, True) == "Low impact (50% of your budget)"

    def test_high_impact(self):
        assert budget_impact_text(150, 100, False) == "High impact (150% of your budget)"

    def test_rounds_half_up(self):
        assert budget_impact_text(1, 200, True) == "Low impact (1% of your budget)"
        assert budget_impact_text(1, 3, True) == "Low impact (33% of your budget)"

    def test_zero_budget(self):
        assert budget_impact_text(120, 0, False) == "High impact (no budget set)"


class TestAlternatives:
    def test_slugify_collapses_whitespace(self):
        assert slugify("  ClickFunnels   Pro 2 ") == "clickfunnels-pro-2"

    def test_two_fixed_alternatives(self):
        alts = build_alternatives("Active Campaign")
        assert [a.name for a in alts] == [
            "Alternative to Active Campaign",
            "Free Open Source Alternative",
        ]
        assert alts[0].url == "https://example.com/alternative-to-active-campaign"
        assert alts[1].url == OPEN_SOURCE_ALTERNATIVE_URL


# ── End to end ────────────────────────────────────────────────────────────────

class TestScorePurchase:
    def test_seeded_runs_match(self, make_product):
        config = ScoringConfig()
        req = _request(existing_products=[make_product(name="SEMrush Lite")])
        first = score_purchase(req, random.Random(7), config)
        second = score_purchase(req, random.Random(7), config)
        assert first == second

    def test_forced_positive_verdict(self):
        config = ScoringConfig(aligned_probability=1.0, price_min=20, price_max=21)
        content = score_purchase(_request(), random.Random(1), config)
        assert content.worth_buying is True
        assert content.estimated_price == 20.0
        assert content.budget_analysis.within_budget is True
        assert content.budget_analysis.budget_impact == "Low impact (20% of your budget)"
        assert content.alternative_suggestions == []
        assert "fills a gap" in content.recommendation
        assert "side_hustle" in content.recommendation

    def test_forced_negative_verdict(self):
        config = ScoringConfig(aligned_probability=0.0)
        content = score_purchase(_request(), random.Random(1), config)
        assert content.worth_buying is False
        assert len(content.alternative_suggestions) == 2
        assert content.recommendation.startswith("We don't recommend purchasing SEMrush")
        assert "doesn't align well" in content.recommendation

    def test_over_budget_mentioned(self):
        config = ScoringConfig(aligned_probability=1.0, price_min=150, price_max=151)
        content = score_purchase(_request(), random.Random(1), config)
        assert content.worth_buying is False
        assert "exceeds your budget of $100" in content.recommendation

    def test_two_similar_products_block_purchase(self, make_product):
        config = ScoringConfig(aligned_probability=1.0, price_min=20, price_max=21)
        owned = [make_product(name="SEMrush"), make_product(name="SEMrush Pro")]
        content = score_purchase(_request(existing_products=owned), random.Random(1), config)
        assert content.similarity_to_existing.has_similar is True
        assert len(content.similarity_to_existing.similar_products) == 2
        assert content.worth_buying is False
        assert "You already have similar tools" in content.recommendation

    def test_similarity_scale_applied(self, make_product):
        config = ScoringConfig(similarity_scale=1.0)
        owned = [make_product(name="SEMrush")]
        content = score_purchase(_request(existing_products=owned), random.Random(3), config)
        score = content.similarity_to_existing.similar_products[0].similarity_score
        assert 0.5 <= score < 1.0
