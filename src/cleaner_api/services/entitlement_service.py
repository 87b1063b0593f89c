"""Entitlement service for per-user premium state."""

import calendar
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Literal

from cleaner_api.config import PlanId, Settings, get_plan_config, get_settings
from cleaner_api.errors.exceptions import (
    DocumentNotFoundError,
    DuplicateKeyError,
    InvalidArgumentError,
    ProfileNotFoundError,
)
from cleaner_api.models.profile import UserProfile, new_profile_document
from cleaner_api.services.retry import RetryPolicy, retry_async
from cleaner_api.storage.document_store import DocumentStore
from cleaner_api.storage.manager import get_document_store

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

Duration = int | Literal["lifetime"]


def utc_now() -> datetime:
    return datetime.now(UTC)


def add_months(moment: datetime, months: int) -> datetime:
    """
    Add calendar months to a timestamp.

    The day is clamped to the last valid day of the target month, so
    January 31 plus one month is the last day of February.
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def is_premium_active(profile: UserProfile, now: datetime | None = None) -> bool:
    """Check whether a profile holds an active premium entitlement."""
    return profile.is_active(now)


def duration_for_plan(plan: str) -> Duration:
    """Resolve a plan ID to a grant duration."""
    try:
        plan_config = get_plan_config(PlanId(plan))
    except ValueError:
        raise InvalidArgumentError(
            message=f"Unknown plan '{plan}'",
            details={"plan": plan, "allowed": [p.value for p in PlanId]},
        ) from None

    if plan_config.duration_months is None:
        return "lifetime"
    return plan_config.duration_months


def premium_fields(duration: Duration, now: datetime) -> dict[str, Any]:
    """
    Profile fields for a premium grant starting at ``now``.

    Raises:
        InvalidArgumentError: If the duration is not a positive month count
    """
    if duration == "lifetime":
        return {"isPremium": True, "premiumExpires": None}

    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 1:
        raise InvalidArgumentError(
            message="Premium duration must be a positive number of months or 'lifetime'",
            details={"duration": duration},
        )

    return {"isPremium": True, "premiumExpires": add_months(now, duration).isoformat()}


class EntitlementService:
    """Service for reading and updating user premium state."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        settings: Settings | None = None,
        retry_policy: RetryPolicy | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._store = store
        self._settings = settings or get_settings()
        self._retry_policy = retry_policy or RetryPolicy.from_settings(self._settings)
        self._clock = clock or utc_now

    @property
    def store(self) -> DocumentStore:
        """Get document store."""
        if self._store is None:
            self._store = get_document_store()
        return self._store

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    def now(self) -> datetime:
        """Current time according to the service clock."""
        return self._clock()

    def new_profile_document(self, user_id: str) -> dict[str, Any]:
        """Default profile for a user seen for the first time."""
        return new_profile_document(
            is_admin=user_id == self._settings.admin_user_id,
            created_at=self.now(),
        )

    async def get_profile(self, user_id: str) -> UserProfile:
        """
        Get an existing profile.

        Raises:
            ProfileNotFoundError: If the user has no profile
        """

        async def operation() -> UserProfile:
            document = await self.store.get(USERS_COLLECTION, user_id)
            if document is None:
                raise ProfileNotFoundError(user_id)
            return UserProfile.from_document(user_id, document.data)

        return await retry_async(operation, self._retry_policy, f"get profile {user_id}")

    async def get_or_create_profile(self, user_id: str) -> UserProfile:
        """
        Get a profile, creating the default one on first sight.

        Two first-time calls for the same user may race; the loser's create
        reports a duplicate key and it re-reads the winner's record.
        """

        async def operation() -> UserProfile:
            document = await self.store.get(USERS_COLLECTION, user_id)
            if document is not None:
                return UserProfile.from_document(user_id, document.data)

            data = self.new_profile_document(user_id)
            try:
                created = await self.store.create(USERS_COLLECTION, user_id, data)
            except DuplicateKeyError:
                document = await self.store.get(USERS_COLLECTION, user_id)
                if document is None:
                    raise
                return UserProfile.from_document(user_id, document.data)

            logger.info("Created profile for user %s (admin: %s)", user_id, data["isAdmin"])
            return UserProfile.from_document(user_id, created.data)

        return await retry_async(operation, self._retry_policy, f"load profile {user_id}")

    async def _update_profile(self, user_id: str, fields: dict[str, Any]) -> UserProfile:
        """Merge fields into an existing profile."""

        async def operation() -> UserProfile:
            try:
                document = await self.store.update(USERS_COLLECTION, user_id, fields)
            except DocumentNotFoundError as e:
                raise ProfileNotFoundError(user_id) from e
            return UserProfile.from_document(user_id, document.data)

        return await retry_async(operation, self._retry_policy, f"update profile {user_id}")

    async def grant_premium(self, user_id: str, duration: Duration) -> UserProfile:
        """
        Grant premium for a number of calendar months, or for life.

        The expiry is computed from now; an existing expiry is not extended.

        Args:
            user_id: Target user
            duration: Positive number of months, or "lifetime"

        Returns:
            Updated profile

        Raises:
            InvalidArgumentError: If the duration is not positive
            ProfileNotFoundError: If the user has no profile
        """
        fields = premium_fields(duration, self.now())
        profile = await self._update_profile(user_id, fields)

        logger.info(
            "Granted %s premium to user %s (expires: %s)",
            "lifetime" if duration == "lifetime" else f"{duration} month",
            user_id,
            fields["premiumExpires"] or "never",
        )
        return profile

    async def revoke_to_free(self, user_id: str) -> UserProfile:
        """Put a user back on the free plan. Idempotent."""
        profile = await self._update_profile(
            user_id,
            {"isPremium": False, "premiumExpires": None},
        )
        logger.info("Set user %s to the free plan", user_id)
        return profile

    async def promote_to_admin(self, user_id: str) -> UserProfile:
        """Give a user the admin role. Idempotent."""
        profile = await self._update_profile(user_id, {"isAdmin": True})
        logger.info("Promoted user %s to admin", user_id)
        return profile

    def is_active(self, profile: UserProfile, now: datetime | None = None) -> bool:
        """Check a profile's premium status, by default against the service clock."""
        return is_premium_active(profile, now or self.now())


# Singleton instance
_entitlement_service: EntitlementService | None = None


def get_entitlement_service() -> EntitlementService:
    """Get entitlement service instance."""
    global _entitlement_service
    if _entitlement_service is None:
        _entitlement_service = EntitlementService()
    return _entitlement_service


def reset_entitlement_service() -> None:
    """Reset entitlement service (for testing)."""
    global _entitlement_service
    _entitlement_service = None
