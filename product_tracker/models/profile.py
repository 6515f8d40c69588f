"""
Auth and profile models.

``AuthUser`` / ``AuthSession`` are what the auth collaborator hands back;
``UserProfile`` is the 1:1 ``user_profiles`` row keyed by the auth user's id.
Profiles are created at sign-up, patched through ``ProfileUpdate``, and
never deleted in-app.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from product_tracker.models.recommendation import UserInsights, dedupe
from product_tracker.taxonomy.product_taxonomy import UserGoal


class AuthUser(BaseModel):
    """An authenticated identity."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    created_at: Optional[datetime] = None


class AuthSession(BaseModel):
    """A signed-in session: bearer token plus the user it belongs to."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    user: AuthUser
    refresh_token: Optional[str] = None


def _validate_budget(v: Optional[float]) -> Optional[float]:
    if v is not None and v < 0:
        raise ValueError(f"budget must be a non-negative monthly amount, got {v}.")
    return v


def _normalize_goals(v: Any) -> Any:
    # Goals are a set; keep them as a de-duplicated list for JSON storage.
    if v is None:
        return v
    return dedupe(str(g) for g in v)


class UserProfile(BaseModel):
    """Profile of a signed-up user.

    Attributes:
        id: Same as the auth user's id.
        email: Sign-up email.
        full_name: Display name.
        avatar_url: Optional avatar.
        budget: Monthly marketing budget; never negative.
        goals: Set of ``UserGoal`` values, stored without duplicates.
        preferences: Free-form JSON preferences.
        ai_insights: Latest generated insights, if any.
        created_at: Creation timestamp.
        updated_at: Last update timestamp.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    budget: Optional[float] = None
    goals: list[UserGoal] = []
    preferences: Optional[dict[str, Any]] = None
    ai_insights: Optional[UserInsights] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("budget")
    @classmethod
    def validate_budget(cls, v: Optional[float]) -> Optional[float]:
        return _validate_budget(v)

    @field_validator("goals", mode="before")
    @classmethod
    def normalize_goals(cls, v: Any) -> Any:
        return [] if v is None else _normalize_goals(v)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "UserProfile":
        """Build a ``UserProfile`` from a backend row dict."""
        return cls.model_validate(dict(row))


class ProfileUpdate(BaseModel):
    """Partial profile edit. Only fields explicitly set are written."""

    model_config = ConfigDict(frozen=True)

    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    budget: Optional[float] = None
    goals: Optional[list[UserGoal]] = None
    preferences: Optional[dict[str, Any]] = None
    ai_insights: Optional[UserInsights] = None

    @field_validator("budget")
    @classmethod
    def validate_budget(cls, v: Optional[float]) -> Optional[float]:
        return _validate_budget(v)

    @field_validator("goals", mode="before")
    @classmethod
    def normalize_goals(cls, v: Any) -> Any:
        return _normalize_goals(v)

    def to_patch(self) -> dict[str, Any]:
        """Return only the explicitly-set fields as a JSON-ready dict."""
        return self.model_dump(mode="json", exclude_unset=True)
