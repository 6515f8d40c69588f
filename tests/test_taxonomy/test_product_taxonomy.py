"""Tests for the product category and goal taxonomies."""

from __future__ import annotations

import pytest

from product_tracker.taxonomy.product_taxonomy import (
    CATEGORY_DESCRIPTIONS,
    CATEGORY_LABELS,
    GOAL_DESCRIPTIONS,
    GOAL_LABELS,
    ProductCategory,
    UserGoal,
    category_label,
    goal_label,
)
from product_tracker.taxonomy.recommendation_taxonomy import RecommendationType, SkillLevel


class TestProductCategory:
    def test_ten_categories(self):
        assert len(ProductCategory) == 10

    @pytest.mark.parametrize("category", list(ProductCategory))
    def test_every_category_labelled(self, category):
        assert CATEGORY_LABELS[category]
        assert CATEGORY_DESCRIPTIONS[category]

    def test_values_are_strings(self):
        assert ProductCategory.PHYSICAL_PRODUCT == "physical_product"

    def test_label_lookup(self):
        assert category_label("plugin") == "Plugin/Extension"
        assert category_label("not-a-category") == "not-a-category"


class TestUserGoal:
    def test_ten_goals(self):
        assert len(UserGoal) == 10

    @pytest.mark.parametrize("goal", list(UserGoal))
    def test_every_goal_labelled(self, goal):
        assert GOAL_LABELS[goal]
        assert GOAL_DESCRIPTIONS[goal]

    def test_label_lookup(self):
        assert goal_label("e_commerce") == "E-Commerce"
        assert goal_label("world_domination") == "world_domination"


class TestRecommendationTaxonomy:
    def test_types(self):
        assert {t.value for t in RecommendationType} == {"product_purchase", "user_insights"}

    def test_skill_levels_capitalized(self):
        assert [s.value for s in SkillLevel] == ["Beginner", "Intermediate", "Advanced"]
