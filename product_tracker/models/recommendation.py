"""
Recommendation models.

``AIRecommendation`` is one row of the ``ai_recommendations`` table. Its
``content`` column is polymorphic, shaped by ``recommendation_type``:

  - ``product_purchase`` → ``ProductPurchaseContent``
  - ``user_insights``    → ``UserInsights``

``ProductRecommendationRequest`` is the input to a scoring strategy.

Goal alignment invariant
------------------------
``GoalAlignment`` partitions the requested goals: ``aligned_goals`` and
``misaligned_goals`` never overlap, and ``alignment_score`` equals
``10 * len(aligned_goals) / len(requested)`` (0 when nothing was requested).
Scoring code builds it through ``GoalAlignment.from_partition()`` so the
score is always derived, never supplied.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from product_tracker.models.product import Product
from product_tracker.taxonomy.recommendation_taxonomy import RecommendationType, SkillLevel

ALIGNMENT_SCALE = 10.0


def dedupe(values: Iterable[str]) -> list[str]:
    """Drop repeated values, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for v in values:
        if v not in seen:
            seen.add(v)
            result.append(v)
    return result


def alignment_score_for(aligned: int, total: int) -> float:
    """``10 * aligned / total``, or 0 when nothing was requested."""
    return ALIGNMENT_SCALE * aligned / total if total else 0.0


class GoalAlignment(BaseModel):
    """How the requested goals split into aligned and misaligned.

    Attributes:
        alignment_score: 0–10, share of requested goals that are aligned.
        aligned_goals: Goals the product serves.
        misaligned_goals: Goals the product does not serve.
    """

    model_config = ConfigDict(frozen=True)

    alignment_score: float
    aligned_goals: list[str] = []
    misaligned_goals: list[str] = []

    @model_validator(mode="after")
    def validate_partition(self) -> "GoalAlignment":
        overlap = set(self.aligned_goals) & set(self.misaligned_goals)
        if overlap:
            raise ValueError(
                f"aligned_goals and misaligned_goals overlap: {sorted(overlap)}."
            )
        total = len(self.aligned_goals) + len(self.misaligned_goals)
        expected = alignment_score_for(len(self.aligned_goals), total)
        if self.alignment_score != expected:
            raise ValueError(
                f"alignment_score {self.alignment_score} does not match "
                f"{len(self.aligned_goals)}/{total} aligned goals (expected {expected})."
            )
        return self

    @classmethod
    def from_partition(
        cls,
        goals: Iterable[str],
        aligned: Iterable[str],
    ) -> "GoalAlignment":
        """Build the alignment for ``goals`` given the subset that is aligned.

        Args:
            goals: Requested goals (duplicates are dropped).
            aligned: Goals judged aligned; entries not in ``goals`` are ignored.

        Returns:
            ``GoalAlignment`` with the score derived from the partition.
        """
        requested = dedupe(goals)
        aligned_set = set(aligned)
        aligned_goals = [g for g in requested if g in aligned_set]
        misaligned_goals = [g for g in requested if g not in aligned_set]
        return cls(
            alignment_score=alignment_score_for(len(aligned_goals), len(requested)),
            aligned_goals=aligned_goals,
            misaligned_goals=misaligned_goals,
        )


class BudgetAnalysis(BaseModel):
    """Budget fit of a prospective purchase."""

    model_config = ConfigDict(frozen=True)

    within_budget: bool
    budget_impact: str


class SimilarProduct(BaseModel):
    """An already-owned product that overlaps the requested one.

    ``similarity_score`` is on the configured similarity scale (0–10 by
    default, matching ``alignment_score``).
    """

    model_config = ConfigDict(frozen=True)

    id: Optional[str] = None
    name: str
    similarity_score: float

    @field_validator("similarity_score")
    @classmethod
    def validate_score(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"similarity_score must be non-negative, got {v}.")
        return v


class SimilarityToExisting(BaseModel):
    """Overlap between the requested product and the user's current stack."""

    model_config = ConfigDict(frozen=True)

    has_similar: bool
    similar_products: list[SimilarProduct] = []

    @model_validator(mode="after")
    def validate_flag(self) -> "SimilarityToExisting":
        if self.has_similar != bool(self.similar_products):
            raise ValueError("has_similar must be true exactly when similar_products is non-empty.")
        return self


class AlternativeSuggestion(BaseModel):
    """A suggested replacement when a purchase is not recommended."""

    model_config = ConfigDict(frozen=True)

    name: str
    url: Optional[str] = None
    reason: str


class ProductPurchaseContent(BaseModel):
    """Content of a ``product_purchase`` recommendation.

    Attributes:
        recommendation: Templated explanation text.
        worth_buying: Final verdict.
        estimated_price: Stand-in monthly price used for the budget check.
        goal_alignment: Partition of the user's goals.
        budget_analysis: Budget fit and impact text.
        similarity_to_existing: Overlap with owned products.
        alternative_suggestions: Replacements; empty when worth buying.
    """

    model_config = ConfigDict(frozen=True)

    recommendation: str
    worth_buying: bool
    estimated_price: Optional[float] = None
    goal_alignment: GoalAlignment
    budget_analysis: BudgetAnalysis
    similarity_to_existing: SimilarityToExisting
    alternative_suggestions: list[AlternativeSuggestion] = []


class UserInsights(BaseModel):
    """Content of a ``user_insights`` recommendation (and ``UserProfile.ai_insights``)."""

    model_config = ConfigDict(frozen=True)

    primary_goal: str
    spending_patterns: list[str] = []
    interest_areas: list[str] = []
    skill_level: SkillLevel
    recommendations: list[str] = []

    @field_validator("skill_level", mode="before")
    @classmethod
    def normalize_skill_level(cls, v: Any) -> Any:
        # Older rows stored the level in lowercase.
        if isinstance(v, str):
            return v.strip().capitalize()
        return v


RecommendationContent = Union[ProductPurchaseContent, UserInsights]

_CONTENT_MODELS: dict[RecommendationType, type[BaseModel]] = {
    RecommendationType.PRODUCT_PURCHASE: ProductPurchaseContent,
    RecommendationType.USER_INSIGHTS: UserInsights,
}


class AIRecommendation(BaseModel):
    """A generated recommendation tied to a user and optionally a product.

    Attributes:
        id: Backend-assigned identifier.
        user_id: Owning user's id.
        product_id: Product the recommendation concerns, if any.
        recommendation_type: Discriminator for ``content``.
        content: ``ProductPurchaseContent`` or ``UserInsights``.
        is_read: Flipped to ``True`` once by a read action; never back.
        relevance_score: Optional 0–10 ranking hint.
        created_at: Backend-assigned creation timestamp.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    product_id: Optional[str] = None
    recommendation_type: RecommendationType
    content: RecommendationContent
    is_read: bool = False
    relevance_score: Optional[float] = None
    created_at: Optional[datetime] = None

    @model_validator(mode="before")
    @classmethod
    def parse_content(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        content = data.get("content")
        if not isinstance(content, Mapping):
            return data
        try:
            rec_type = RecommendationType(data.get("recommendation_type"))
        except ValueError:
            return data  # field validation reports the bad discriminator
        parsed = dict(data)
        parsed["content"] = _CONTENT_MODELS[rec_type].model_validate(content)
        return parsed

    @model_validator(mode="after")
    def validate_content_shape(self) -> "AIRecommendation":
        expected = _CONTENT_MODELS[self.recommendation_type]
        if not isinstance(self.content, expected):
            raise ValueError(
                f"content for '{self.recommendation_type}' must be {expected.__name__}, "
                f"got {type(self.content).__name__}."
            )
        return self

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AIRecommendation":
        """Build an ``AIRecommendation`` from a backend row dict."""
        return cls.model_validate(dict(row))

    @property
    def purchase(self) -> Optional[ProductPurchaseContent]:
        """The content as ``ProductPurchaseContent``, or ``None`` for insights."""
        return self.content if isinstance(self.content, ProductPurchaseContent) else None

    @property
    def insights(self) -> Optional[UserInsights]:
        """The content as ``UserInsights``, or ``None`` for purchase verdicts."""
        return self.content if isinstance(self.content, UserInsights) else None


class ProductRecommendationRequest(BaseModel):
    """Input to a purchase recommendation.

    Attributes:
        product_name: Name of the product being considered.
        product_url: Its homepage, if known.
        user_budget: Monthly budget; never negative.
        user_goals: Requested goals; duplicates are dropped, order kept.
        existing_products: Products the user already owns.
        user_id: Requesting user, when the result will be persisted.
        product_id: Tracked product the request concerns, if any.
    """

    model_config = ConfigDict(frozen=True)

    product_name: str
    product_url: str = ""
    user_budget: float = 0.0
    user_goals: list[str] = []
    existing_products: list[Product] = []
    user_id: Optional[str] = None
    product_id: Optional[str] = None

    @field_validator("product_name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("product_name must be non-empty.")
        return v

    @field_validator("user_budget")
    @classmethod
    def validate_budget(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"user_budget must be non-negative, got {v}.")
        return v

    @field_validator("user_goals")
    @classmethod
    def dedupe_goals(cls, v: list[str]) -> list[str]:
        return dedupe(str(g) for g in v)
