"""
Tests for recommendation models.

What we test
------------
- GoalAlignment: partition invariants (disjoint, score derived from counts).
- SimilarityToExisting: has_similar flag agrees with the list.
- AIRecommendation: content parsed by recommendation_type, mismatched
  content rejected, typed accessors.
- ProductRecommendationRequest: goal de-duplication and input validation.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from product_tracker.models.recommendation import (
    AIRecommendation,
    GoalAlignment,
    ProductPurchaseContent,
    ProductRecommendationRequest,
    SimilarityToExisting,
    SimilarProduct,
    UserInsights,
)
from product_tracker.taxonomy.recommendation_taxonomy import RecommendationType, SkillLevel


def _purchase_content(**overrides) -> dict:
    content = {
        "recommendation": "We don't recommend purchasing X at this time.",
        "worth_buying": False,
        "estimated_price": 120.0,
        "goal_alignment": {
            "alignment_score": 5.0,
            "aligned_goals": ["side_hustle"],
            "misaligned_goals": ["e_commerce"],
        },
        "budget_analysis": {"within_budget": False, "budget_impact": "High impact (120% of your budget)"},
        "similarity_to_existing": {"has_similar": False, "similar_products": []},
        "alternative_suggestions": [],
    }
    content.update(overrides)
    return content


def _insights_content() -> dict:
    return {
        "primary_goal": "Grow existing business",
        "spending_patterns": [],
        "interest_areas": ["software"],
        "skill_level": "Intermediate",
        "recommendations": [],
    }


# ── GoalAlignment ─────────────────────────────────────────────────────────────

class TestGoalAlignment:
    def test_from_partition_scores_share_aligned(self):
        alignment = GoalAlignment.from_partition(["a", "b", "c", "d"], ["a", "c", "d"])
        assert alignment.aligned_goals == ["a", "c", "d"]
        assert alignment.misaligned_goals == ["b"]
        assert alignment.alignment_score == 7.5

    def test_empty_goals_score_zero(self):
        alignment = GoalAlignment.from_partition([], [])
        assert alignment.alignment_score == 0.0
        assert alignment.aligned_goals == []
        assert alignment.misaligned_goals == []

    def test_duplicate_goals_counted_once(self):
        alignment = GoalAlignment.from_partition(["a", "a", "b"], ["a"])
        assert alignment.aligned_goals == ["a"]
        assert alignment.alignment_score == 5.0

    def test_aligned_outside_requested_ignored(self):
        alignment = GoalAlignment.from_partition(["a"], ["a", "zzz"])
        assert alignment.aligned_goals == ["a"]
        assert alignment.alignment_score == 10.0

    def test_overlap_rejected(self):
        with pytest.raises(ValidationError, match="overlap"):
            GoalAlignment(alignment_score=5.0, aligned_goals=["a"], misaligned_goals=["a"])

    def test_inconsistent_score_rejected(self):
        with pytest.raises(ValidationError, match="does not match"):
            GoalAlignment(alignment_score=9.0, aligned_goals=["a"], misaligned_goals=["b"])

    def test_near_miss_score_rejected(self):
        """Only the exact share is accepted, not a value within float tolerance."""
        exact = 10 * 1 / 3
        assert GoalAlignment(
            alignment_score=exact, aligned_goals=["a"], misaligned_goals=["b", "c"]
        ).alignment_score == exact
        with pytest.raises(ValidationError, match="does not match"):
            GoalAlignment(
                alignment_score=exact + 1e-10, aligned_goals=["a"], misaligned_goals=["b", "c"]
            )

    def test_thirds_survive_json_round_trip(self):
        alignment = GoalAlignment.from_partition(["a", "b", "c"], ["a", "b"])
        restored = GoalAlignment.model_validate_json(alignment.model_dump_json())
        assert restored.alignment_score == 10 * 2 / 3


# ── Similarity ────────────────────────────────────────────────────────────────

class TestSimilarityToExisting:
    def test_flag_must_match_list(self):
        with pytest.raises(ValidationError):
            SimilarityToExisting(has_similar=True, similar_products=[])

    def test_flag_with_products(self):
        sim = SimilarityToExisting(
            has_similar=True,
            similar_products=[SimilarProduct(id="p1", name="Mailchimp", similarity_score=6.2)],
        )
        assert sim.similar_products[0].name == "Mailchimp"

    def test_negative_similarity_rejected(self):
        with pytest.raises(ValidationError):
            SimilarProduct(name="x", similarity_score=-0.1)


# ── AIRecommendation ──────────────────────────────────────────────────────────

class TestAIRecommendation:
    def test_purchase_content_parsed(self):
        rec = AIRecommendation.from_row({
            "id": "r1",
            "user_id": "u1",
            "recommendation_type": "product_purchase",
            "content": _purchase_content(),
            "is_read": False,
        })
        assert isinstance(rec.content, ProductPurchaseContent)
        assert rec.purchase is rec.content
        assert rec.insights is None

    def test_insights_content_parsed(self):
        rec = AIRecommendation.from_row({
            "id": "r2",
            "user_id": "u1",
            "recommendation_type": "user_insights",
            "content": _insights_content(),
        })
        assert isinstance(rec.content, UserInsights)
        assert rec.insights.skill_level == SkillLevel.INTERMEDIATE
        assert rec.purchase is None

    def test_content_shape_must_match_type(self):
        insights = UserInsights.model_validate(_insights_content())
        with pytest.raises(ValidationError, match="must be ProductPurchaseContent"):
            AIRecommendation(
                id="r3",
                user_id="u1",
                recommendation_type=RecommendationType.PRODUCT_PURCHASE,
                content=insights,
            )

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            AIRecommendation.from_row({
                "id": "r4",
                "user_id": "u1",
                "recommendation_type": "horoscope",
                "content": _insights_content(),
            })

    def test_json_dump_round_trips_content(self):
        row = {
            "id": "r5",
            "user_id": "u1",
            "product_id": None,
            "recommendation_type": "product_purchase",
            "content": _purchase_content(),
            "is_read": True,
            "relevance_score": 5.0,
            "created_at": None,
        }
        assert AIRecommendation.from_row(row).model_dump(mode="json") == row


# ── Request ───────────────────────────────────────────────────────────────────

class TestProductRecommendationRequest:
    def test_goals_deduplicated_in_order(self):
        req = ProductRecommendationRequest(
            product_name="SEMrush", user_goals=["b", "a", "b"]
        )
        assert req.user_goals == ["b", "a"]

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            ProductRecommendationRequest(product_name="  ")

    def test_negative_budget_rejected(self):
        with pytest.raises(ValidationError):
            ProductRecommendationRequest(product_name="SEMrush", user_budget=-1)
