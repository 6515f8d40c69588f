"""
Recommendation taxonomy.

``RecommendationType`` is the discriminator stored on every
``ai_recommendations`` row; it decides which content model the row's JSON
``content`` column is parsed into.

This module has NO imports from any other ``product_tracker`` package.
"""

from enum import StrEnum


class RecommendationType(StrEnum):
    """Kind of generated recommendation."""

    PRODUCT_PURCHASE = "product_purchase"
    """Buy / don't-buy verdict for a prospective product."""

    USER_INSIGHTS = "user_insights"
    """Profile-level summary derived from the user's tracked products."""


class SkillLevel(StrEnum):
    """Marketing skill level reported in user insights."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
