"""
Recommendation store: generated purchase verdicts and profile insights.

Every generated recommendation is persisted to ``ai_recommendations`` and
prepended to the cache. The only mutation afterwards is flipping
``is_read``, which is idempotent: an already-read record is returned as is
and no write is issued.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional

from pydantic import BaseModel

from product_tracker.backend.base import Order, PersistenceClient
from product_tracker.errors import NotFoundError, ProductTrackerError
from product_tracker.models.product import Product
from product_tracker.models.recommendation import AIRecommendation, ProductRecommendationRequest
from product_tracker.notifications import Notifier
from product_tracker.recommendations.strategy import ScoringStrategy
from product_tracker.stores.base import EXPECTED_ERRORS, BaseStore
from product_tracker.taxonomy.recommendation_taxonomy import RecommendationType

logger = logging.getLogger(__name__)

TABLE = "ai_recommendations"


class RecommendationStore(BaseStore):
    """Cache of ``AIRecommendation`` rows, newest first.

    Attributes:
        strategy: Scoring strategy producing the content.
        recommendations: Cached recommendations, newest first.
        recommendation: The most recent purchase recommendation requested.
    """

    def __init__(
        self,
        client: PersistenceClient,
        strategy: ScoringStrategy,
        notifier: Notifier,
    ) -> None:
        super().__init__(client, notifier)
        self.strategy = strategy
        self.recommendations: list[AIRecommendation] = []
        self.recommendation: Optional[AIRecommendation] = None

    @property
    def unread_count(self) -> int:
        return sum(1 for r in self.recommendations if not r.is_read)

    @property
    def unread(self) -> list[AIRecommendation]:
        return [r for r in self.recommendations if not r.is_read]

    def get_recommendation(self, recommendation_id: str) -> Optional[AIRecommendation]:
        """Cached recommendation by id; ``None`` when it is not loaded."""
        return next((r for r in self.recommendations if r.id == recommendation_id), None)

    async def fetch_recommendations(self, user_id: str) -> list[AIRecommendation]:
        """Replace the cache with the user's recommendations, newest first."""
        self._begin()
        try:
            rows = await self.client.select(
                TABLE, filters={"user_id": user_id}, order=Order("created_at")
            )
            recs = [AIRecommendation.from_row(r) for r in rows]
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to fetch recommendations")
            return self.recommendations

        self.recommendations = recs
        self._succeed()
        return recs

    async def _persist(
        self,
        user_id: Optional[str],
        rec_type: RecommendationType,
        content: BaseModel,
        product_id: Optional[str] = None,
        relevance_score: Optional[float] = None,
    ) -> AIRecommendation:
        if not user_id:
            raise ProductTrackerError("A signed-in user is required to save a recommendation.")
        row: dict[str, Any] = {
            "user_id": user_id,
            "product_id": product_id,
            "recommendation_type": str(rec_type),
            "content": content.model_dump(mode="json"),
            "is_read": False,
            "relevance_score": relevance_score,
        }
        stored = await self.client.insert(TABLE, row)
        return AIRecommendation.from_row(stored)

    async def request_recommendation(
        self, request: ProductRecommendationRequest
    ) -> Optional[AIRecommendation]:
        """Score a prospective purchase and persist the verdict.

        Returns:
            The stored recommendation, or ``None`` on failure.
        """
        self._begin()
        try:
            content = self.strategy.recommend_product(request)
            rec = await self._persist(
                request.user_id,
                RecommendationType.PRODUCT_PURCHASE,
                content,
                product_id=request.product_id,
                relevance_score=content.goal_alignment.alignment_score,
            )
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to generate recommendation", notify="Failed to generate recommendation")
            return None

        self.recommendations = [rec, *self.recommendations]
        self.recommendation = rec
        self._succeed()
        logger.info(
            "Recommendation %s for '%s': worth_buying=%s",
            rec.id, request.product_name, content.worth_buying,
        )
        return rec

    async def generate_user_insights(
        self, user_id: str, products: Iterable[Product]
    ) -> Optional[AIRecommendation]:
        """Derive profile insights from ``products`` and persist them."""
        self._begin()
        try:
            insights = self.strategy.analyze_profile(products)
            rec = await self._persist(user_id, RecommendationType.USER_INSIGHTS, insights)
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to generate insights", notify="Failed to generate insights")
            return None

        self.recommendations = [rec, *self.recommendations]
        self._succeed()
        return rec

    async def mark_as_read(
        self, recommendation_id: str, user_id: str
    ) -> Optional[AIRecommendation]:
        """Flip ``is_read`` to true on one of ``user_id``'s recommendations. Idempotent.

        Returns:
            The (now read) recommendation, or ``None`` on failure.
        """
        self._begin()
        try:
            rec = self.get_recommendation(recommendation_id)
            if rec is None or rec.user_id != user_id:
                row = await self.client.select_one(TABLE, recommendation_id, owner_id=user_id)
                if row is None:
                    raise NotFoundError(TABLE, recommendation_id)
                rec = AIRecommendation.from_row(row)
            if not rec.is_read:
                rec = AIRecommendation.from_row(
                    await self.client.update(
                        TABLE, recommendation_id, {"is_read": True}, owner_id=user_id
                    )
                )
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to mark recommendation as read")
            return None

        self.recommendations = [rec if r.id == rec.id else r for r in self.recommendations]
        self._succeed()
        return rec

    async def mark_all_as_read(self, user_id: str) -> int:
        """Mark each cached unread recommendation of ``user_id`` read, one at a time.

        Stops at the first failure.

        Returns:
            Number of recommendations marked read.
        """
        marked = 0
        for rec in [r for r in self.unread if r.user_id == user_id]:
            if await self.mark_as_read(rec.id, user_id) is None:
                break
            marked += 1
        return marked
