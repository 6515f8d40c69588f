"""
Product models.

``Product`` is a tracked marketing-tool purchase as stored in the
``products`` table. It is frozen: edits go through ``ProductUpdate`` and the
store replaces its cached copy with the row the backend returns.

``ProductDraft`` is the user-submitted form (no id, no owner, no analysis);
``ProductUpdate`` is a partial patch where only explicitly-set fields are
written.

``ProductAnalysis`` is the templated analysis attached at creation time.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from product_tracker.models.features import FeatureValue, features_from_raw, features_to_raw
from product_tracker.taxonomy.product_taxonomy import ProductCategory
from product_tracker.utils.time_utils import today


def _validate_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Product name must be non-empty.")
    return v


def _validate_price(v: float) -> float:
    if v < 0:
        raise ValueError(f"price must be a non-negative monthly amount, got {v}.")
    return v


class ProductAnalysis(BaseModel):
    """Templated analysis of a product.

    Attributes:
        summary: One-sentence description of the product.
        key_features: Headline features.
        pros: Strengths.
        cons: Weaknesses.
        recommendation_score: 0–10 overall score.
        tags: Free-form tags copied onto the product row.
    """

    model_config = ConfigDict(frozen=True)

    summary: str
    key_features: list[str] = []
    pros: list[str] = []
    cons: list[str] = []
    recommendation_score: float = 0.0
    tags: list[str] = []

    @field_validator("recommendation_score")
    @classmethod
    def validate_score(cls, v: float) -> float:
        if not 0.0 <= v <= 10.0:
            raise ValueError(f"recommendation_score must be in [0, 10], got {v}.")
        return v


class Product(BaseModel):
    """A tracked product purchase owned by one user.

    Attributes:
        id: Backend-assigned identifier.
        user_id: Owning user's id.
        name: Display name, e.g. ``"ClickFunnels"``.
        description: Free-text description.
        url: Product homepage.
        category: One of ``ProductCategory``.
        price: Monthly cost; never negative.
        purchase_date: Date of purchase.
        features: Typed feature map (see ``models.features``).
        ai_analysis: Analysis attached when the product was added.
        tags: Tags copied from the analysis.
        created_at: Backend-assigned creation timestamp.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    name: str
    description: str = ""
    url: str = ""
    category: ProductCategory
    price: float
    purchase_date: date
    features: dict[str, FeatureValue] = {}
    ai_analysis: Optional[ProductAnalysis] = None
    tags: Optional[list[str]] = None
    created_at: Optional[datetime] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        return _validate_price(v)

    @field_validator("features", mode="before")
    @classmethod
    def lift_features(cls, v: Any) -> dict[str, Any]:
        return features_from_raw(v)

    @field_validator("description", "url", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Product":
        """Build a ``Product`` from a backend row dict."""
        return cls.model_validate(dict(row))


class ProductDraft(BaseModel):
    """User-submitted product form, before it has an id or analysis.

    ``features`` left as ``None`` asks the store to extract them from the
    description.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    url: str = ""
    category: ProductCategory = ProductCategory.COURSE
    price: float = 0.0
    purchase_date: date = Field(default_factory=today)
    features: Optional[dict[str, FeatureValue]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: float) -> float:
        return _validate_price(v)

    @field_validator("features", mode="before")
    @classmethod
    def lift_features(cls, v: Any) -> Optional[dict[str, Any]]:
        return None if v is None else features_from_raw(v)

    def to_row(self, user_id: str) -> dict[str, Any]:
        """Serialize for insertion, attaching the owner."""
        row = self.model_dump(mode="json", exclude={"features"})
        row["user_id"] = user_id
        row["features"] = features_to_raw(self.features or {})
        return row


class ProductUpdate(BaseModel):
    """Partial product edit. Only fields explicitly set are written."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    category: Optional[ProductCategory] = None
    price: Optional[float] = None
    purchase_date: Optional[date] = None
    features: Optional[dict[str, FeatureValue]] = None
    tags: Optional[list[str]] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _validate_name(v)

    @field_validator("price")
    @classmethod
    def validate_price(cls, v: Optional[float]) -> Optional[float]:
        return None if v is None else _validate_price(v)

    @field_validator("features", mode="before")
    @classmethod
    def lift_features(cls, v: Any) -> Optional[dict[str, Any]]:
        return None if v is None else features_from_raw(v)

    def to_patch(self) -> dict[str, Any]:
        """Return only the explicitly-set fields as a JSON-ready dict."""
        patch = self.model_dump(mode="json", exclude_unset=True, exclude={"features"})
        if "features" in self.model_fields_set and self.features is not None:
            patch["features"] = features_to_raw(self.features)
        return patch
