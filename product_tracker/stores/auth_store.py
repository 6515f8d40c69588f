"""
Auth store: the signed-in user, their session, and their profile.

Auth failures are inline form errors: they set ``error`` but emit no
notification.
"""

from __future__ import annotations

import logging
from typing import Optional

from product_tracker.backend.base import PersistenceClient
from product_tracker.errors import AuthError, NotFoundError
from product_tracker.models.profile import AuthSession, AuthUser, ProfileUpdate, UserProfile
from product_tracker.notifications import Notifier
from product_tracker.stores.base import EXPECTED_ERRORS, BaseStore
from product_tracker.utils.time_utils import to_iso, utcnow

logger = logging.getLogger(__name__)

TABLE = "user_profiles"


class AuthStore(BaseStore):
    """Current user, session and profile.

    Attributes:
        user: Signed-in user, or ``None``.
        session: Active session, or ``None``.
        profile: The user's ``user_profiles`` row, or ``None``.
    """

    def __init__(self, client: PersistenceClient, notifier: Notifier) -> None:
        super().__init__(client, notifier)
        self.user: Optional[AuthUser] = None
        self.session: Optional[AuthSession] = None
        self.profile: Optional[UserProfile] = None

    @property
    def is_signed_in(self) -> bool:
        return self.user is not None

    async def _find_profile(self, user_id: str) -> Optional[UserProfile]:
        row = await self.client.select_one(TABLE, user_id)
        if row is None:
            logger.warning("No profile row for user %s", user_id)
            return None
        return UserProfile.from_row(row)

    def _clear(self) -> None:
        self.user = None
        self.session = None
        self.profile = None

    async def initialize(self) -> None:
        """Restore user and profile from the client's session, or clear state."""
        self._begin()
        try:
            session = self.client.auth.session
            user = await self.client.auth.get_user() if session else None
            profile = await self._find_profile(user.id) if user else None
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to initialize authentication")
            return

        if user is None:
            self._clear()
        else:
            self.user, self.session, self.profile = user, session, profile
        self._succeed()

    async def sign_in(self, email: str, password: str) -> Optional[AuthUser]:
        """Sign in and load the profile. Returns the user, or ``None`` on failure.

        A missing profile row does not block sign-in; ``profile`` stays ``None``.
        """
        self._begin()
        try:
            session = await self.client.auth.sign_in(email, password)
            profile = await self._find_profile(session.user.id)
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to sign in")
            return None

        self.user, self.session, self.profile = session.user, session, profile
        self._succeed()
        logger.info("Signed in as %s", session.user.email)
        return session.user

    async def sign_up(self, email: str, password: str, full_name: str) -> Optional[AuthUser]:
        """Register a user and create their profile row."""
        self._begin()
        try:
            user = await self.client.auth.sign_up(email, password)
            now = to_iso(utcnow())
            row = await self.client.insert(
                TABLE,
                {
                    "id": user.id,
                    "email": email.strip(),
                    "full_name": full_name,
                    "created_at": now,
                    "updated_at": now,
                },
            )
            profile = UserProfile.from_row(row)
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to sign up")
            return None

        self.user, self.session, self.profile = user, self.client.auth.session, profile
        self._succeed()
        logger.info("Signed up %s", user.email)
        return user

    async def sign_out(self) -> None:
        """End the session and clear local state."""
        self._begin()
        try:
            await self.client.auth.sign_out()
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to sign out")
            return
        self._clear()
        self._succeed()

    async def update_profile(self, updates: ProfileUpdate) -> Optional[UserProfile]:
        """Patch the signed-in user's profile, then reload it.

        Returns:
            The refreshed profile, or ``None`` on failure.
        """
        try:
            if self.user is None or self.profile is None:
                raise AuthError("No authenticated user")
            self._begin()
            patch = updates.to_patch()
            patch["updated_at"] = to_iso(utcnow())
            await self.client.update(TABLE, self.user.id, patch)
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to update profile")
            return None

        return await self.refresh_profile()

    async def refresh_profile(self) -> Optional[UserProfile]:
        """Reload the signed-in user's profile. A no-op when signed out."""
        if self.user is None:
            return None
        self._begin()
        try:
            profile = await self._find_profile(self.user.id)
            if profile is None:
                raise NotFoundError(TABLE, self.user.id)
        except EXPECTED_ERRORS as exc:
            self._fail(exc, "Failed to refresh profile")
            return None

        self.profile = profile
        self._succeed()
        return profile
