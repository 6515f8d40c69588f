"""
Product store: the signed-in user's tracked products.

Cached ``products`` are ordered by ``purchase_date`` descending after a
fetch; newly added products are prepended. Writes go to the backend first
and the cache is patched from the row the backend returns.
"""

from __future__ import annotations

import logging
from typing import Optional

from product_tracker.backend.base import Order, PersistenceClient
from product_tracker.models.features import FeatureValue, features_from_raw
from product_tracker.models.product import Product, ProductAnalysis, ProductDraft, ProductUpdate
from product_tracker.notifications import Notifier
from product_tracker.recommendations.strategy import ScoringStrategy
from product_tracker.stores.base import EXPECTED_ERRORS, BaseStore

logger = logging.getLogger(__name__)

TABLE = "products"

FAILED_ANALYSIS = ProductAnalysis(
    summary="Analysis failed",
    key_features=[],
    pros=[],
    cons=["Analysis failed due to an error"],
    recommendation_score=0.0,
    tags=[],
)


class ProductStore(BaseStore):
    """Cache of ``Product`` rows plus the add / edit / delete actions.

    Attributes:
        strategy: Scoring strategy used for analysis and feature extraction.
        products: Cached products, newest purchase first.
    """

    def __init__(
        self,
        client: PersistenceClient,
        strategy: ScoringStrategy,
        notifier: Notifier,
    ) -> None:
        super().__init__(client, notifier)
        self.strategy = strategy
        self.products: list[Product] = []

    async def fetch_products(self, user_id: str) -> list[Product]:
        """Replace the cache with the user's products, newest purchase first."""
        self._begin()
        try:
            rows = await self.client.select(
                TABLE, filters={"user_id": user_id}, order=Order("purchase_date")
            )
            products = [Product.from_row(r) for r in rows]
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to fetch products")
            return self.products

        self.products = products
        self._succeed()
        logger.debug("Fetched %d products for user %s", len(products), user_id)
        return products

    async def add_product(self, draft: ProductDraft, user_id: str) -> Optional[str]:
        """Analyze and insert a new product.

        Features are extracted from the description when the draft has none.

        Returns:
            The new product's id, or ``None`` on failure.
        """
        self._begin()
        try:
            row = draft.to_row(user_id)
            if draft.features is None and draft.description:
                row["features"] = self.strategy.extract_features(draft.url, draft.description)
            analysis = self.strategy.analyze_product(draft)
            row["ai_analysis"] = analysis.model_dump(mode="json")
            row["tags"] = list(analysis.tags)

            stored = await self.client.insert(TABLE, row)
            product = Product.from_row(stored)
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to add product", notify="Failed to add product")
            return None

        self.products = [product, *self.products]
        self._succeed()
        self.notifier.success("Product added successfully!")
        return product.id

    async def update_product(
        self, product_id: str, updates: ProductUpdate, user_id: str
    ) -> Optional[Product]:
        """Patch one of ``user_id``'s products remotely, then in the cache.

        Another user's product id fails like a missing one.

        Returns:
            The updated product, or ``None`` on failure.
        """
        self._begin()
        try:
            stored = await self.client.update(
                TABLE, product_id, updates.to_patch(), owner_id=user_id
            )
            product = Product.from_row(stored)
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to update product", notify="Failed to update product")
            return None

        self.products = [product if p.id == product_id else p for p in self.products]
        self._succeed()
        self.notifier.success("Product updated successfully!")
        return product

    async def delete_product(self, product_id: str, user_id: str) -> bool:
        """Delete one of ``user_id``'s products remotely, then drop it from the cache."""
        self._begin()
        try:
            await self.client.delete(TABLE, product_id, owner_id=user_id)
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to delete product", notify="Failed to delete product")
            return False

        self.products = [p for p in self.products if p.id != product_id]
        self._succeed()
        self.notifier.success("Product deleted successfully!")
        return True

    def get_product(self, product_id: str) -> Optional[Product]:
        """Cached product by id; ``None`` when it is not loaded."""
        return next((p for p in self.products if p.id == product_id), None)

    async def analyze_product_with_ai(self, product: Product | ProductDraft) -> ProductAnalysis:
        """Run the strategy's analysis; ``FAILED_ANALYSIS`` on error."""
        self._begin()
        try:
            analysis = self.strategy.analyze_product(product)
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to analyze product")
            return FAILED_ANALYSIS
        self._succeed()
        return analysis

    async def extract_features_from_url(self, url: str, description: str) -> dict[str, FeatureValue]:
        """Run the strategy's feature extraction; ``{}`` on error."""
        self._begin()
        try:
            features = features_from_raw(self.strategy.extract_features(url, description))
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to extract features")
            return {}
        self._succeed()
        return features

    @property
    def monthly_spend(self) -> float:
        """Sum of cached product prices."""
        return sum(p.price for p in self.products)
