"""Anonymous sign-in for desktop clients."""

import logging
import uuid

from cleaner_api.models.profile import UserProfile
from cleaner_api.services.entitlement_service import EntitlementService, get_entitlement_service

logger = logging.getLogger(__name__)


class AnonymousAuthService:
    """
    Issues opaque user IDs to clients that have none yet.

    The client keeps the ID and sends it back in the ``X-User-ID`` header.
    Identity is not verified beyond that; the ID is the only credential.
    """

    def __init__(self, entitlements: EntitlementService | None = None):
        self._entitlements = entitlements

    @property
    def entitlements(self) -> EntitlementService:
        """Get entitlement service."""
        if self._entitlements is None:
            self._entitlements = get_entitlement_service()
        return self._entitlements

    @staticmethod
    def new_user_id() -> str:
        return uuid.uuid4().hex

    async def sign_in(self) -> UserProfile:
        """Issue a new user ID and create its default profile."""
        user_id = self.new_user_id()
        profile = await self.entitlements.get_or_create_profile(user_id)
        logger.info("Anonymous sign-in issued user %s", user_id)
        return profile


# Global instance
_auth_service: AnonymousAuthService | None = None


def get_auth_service() -> AnonymousAuthService:
    """Get the auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AnonymousAuthService()
    return _auth_service


def reset_auth_service() -> None:
    """Reset the auth service (for testing)."""
    global _auth_service
    _auth_service = None
