"""Tests for product, feature-map and profile models."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from product_tracker.models.features import (
    ListFeature,
    MapFeature,
    ScalarFeature,
    feature_to_raw,
    features_from_raw,
    to_feature_value,
)
from product_tracker.models.product import Product, ProductAnalysis, ProductDraft, ProductUpdate
from product_tracker.models.profile import ProfileUpdate, UserProfile
from product_tracker.taxonomy.product_taxonomy import ProductCategory, UserGoal


# ── Feature map ───────────────────────────────────────────────────────────────

class TestFeatureValues:
    def test_scalar_lifted(self):
        assert to_feature_value(20) == ScalarFeature(value=20)
        assert to_feature_value(None) == ScalarFeature(value=None)

    def test_nested_structures_lifted(self):
        value = to_feature_value({"tiers": ["basic", "pro"], "seats": 3})
        assert isinstance(value, MapFeature)
        assert isinstance(value.entries["tiers"], ListFeature)
        assert value.entries["tiers"].items[1] == ScalarFeature(value="pro")
        assert value.entries["seats"].kind == "scalar"

    def test_lowering_restores_plain_json(self):
        raw = {"core_features": ["A/B testing", "Analytics"], "limits": {"seats": 3}}
        lifted = features_from_raw(raw)
        assert {k: feature_to_raw(v) for k, v in lifted.items()} == raw

    def test_unsupported_type_rejected(self):
        with pytest.raises(ValueError, match="Unsupported feature value"):
            to_feature_value(object())

    def test_none_map_is_empty(self):
        assert features_from_raw(None) == {}


# ── Product ───────────────────────────────────────────────────────────────────

class TestProduct:
    def _row(self, **overrides):
        row = {
            "id": "p1",
            "user_id": "u1",
            "name": "ClickFunnels",
            "description": None,
            "url": "https://clickfunnels.com",
            "category": "software",
            "price": 97.0,
            "purchase_date": "2025-03-01",
            "features": {"pricing_tier": "mid-range"},
            "ai_analysis": None,
            "tags": None,
            "created_at": "2025-03-01T10:00:00Z",
        }
        row.update(overrides)
        return row

    def test_from_row(self):
        product = Product.from_row(self._row())
        assert product.category == ProductCategory.SOFTWARE
        assert product.purchase_date == date(2025, 3, 1)
        assert product.description == ""
        assert product.features["pricing_tier"] == ScalarFeature(value="mid-range")

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            Product.from_row(self._row(price=-1))

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            Product.from_row(self._row(name="   "))

    def test_unknown_category_rejected(self):
        with pytest.raises(ValidationError):
            Product.from_row(self._row(category="spaceship"))

    def test_frozen(self):
        product = Product.from_row(self._row())
        with pytest.raises(ValidationError):
            product.price = 1.0

    def test_analysis_parsed(self):
        analysis = {"summary": "Good", "recommendation_score": 7.5, "tags": ["Software"]}
        product = Product.from_row(self._row(ai_analysis=analysis))
        assert product.ai_analysis.recommendation_score == 7.5


class TestProductAnalysis:
    def test_score_bounds(self):
        with pytest.raises(ValidationError):
            ProductAnalysis(summary="x", recommendation_score=11)


class TestProductDraft:
    def test_defaults(self):
        draft = ProductDraft(name="Course X")
        assert draft.category == ProductCategory.COURSE
        assert draft.features is None

    def test_to_row_attaches_owner(self):
        draft = ProductDraft(name="Course X", price=10, purchase_date=date(2025, 1, 2))
        row = draft.to_row("u1")
        assert row["user_id"] == "u1"
        assert row["features"] == {}
        assert row["purchase_date"] == "2025-01-02"


class TestProductUpdate:
    def test_only_set_fields_in_patch(self):
        patch = ProductUpdate(price=49.0).to_patch()
        assert patch == {"price": 49.0}

    def test_features_lowered_in_patch(self):
        patch = ProductUpdate(features={"seats": 3}).to_patch()
        assert patch == {"features": {"seats": 3}}

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            ProductUpdate(price=-5)


# ── Profile ───────────────────────────────────────────────────────────────────

class TestUserProfile:
    def test_goals_deduplicated(self):
        profile = UserProfile(
            id="u1", email="a@b.c", goals=["side_hustle", "side_hustle", "e_commerce"]
        )
        assert profile.goals == [UserGoal.SIDE_HUSTLE, UserGoal.E_COMMERCE]

    def test_null_goals_become_empty(self):
        assert UserProfile(id="u1", email="a@b.c", goals=None).goals == []

    def test_negative_budget_rejected(self):
        with pytest.raises(ValidationError):
            UserProfile(id="u1", email="a@b.c", budget=-10)

    def test_insights_skill_level_normalized(self):
        profile = UserProfile.from_row({
            "id": "u1",
            "email": "a@b.c",
            "ai_insights": {"primary_goal": "Grow", "skill_level": "intermediate"},
        })
        assert profile.ai_insights.skill_level == "Intermediate"

    def test_profile_update_patch(self):
        patch = ProfileUpdate(budget=150.0, goals=["passive_income"]).to_patch()
        assert patch == {"budget": 150.0, "goals": ["passive_income"]}
