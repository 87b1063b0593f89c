"""User profile models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictInt
from pydantic.alias_generators import to_camel


class EntitlementKind(str, Enum):
    """Tagged view of a profile's premium state."""

    NOT_PREMIUM = "not_premium"
    LIFETIME = "lifetime"
    EXPIRES_AT = "expires_at"


class Entitlement(BaseModel):
    """Premium state without the null-means-two-things ambiguity of the stored shape."""

    kind: EntitlementKind
    expires_at: datetime | None = None


class UserProfile(BaseModel):
    """
    Per-user profile record.

    Stored in the ``users`` collection keyed by the opaque user ID, with
    camelCase field names. ``premium_expires`` is None both for free users and
    for lifetime grants; ``is_premium`` tells them apart.
    """

    user_id: str = Field(..., description="Opaque user identifier")
    is_premium: bool = Field(default=False)
    premium_expires: datetime | None = Field(default=None)
    is_admin: bool = Field(default=False)
    custom_reward_message: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @classmethod
    def from_document(cls, user_id: str, data: dict[str, Any]) -> "UserProfile":
        """Build a profile from a stored document."""
        return cls.model_validate({**data, "userId": user_id})

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored document shape."""
        return self.model_dump(by_alias=True, mode="json", exclude={"user_id"})

    @property
    def entitlement(self) -> Entitlement:
        """Tagged premium state."""
        if not self.is_premium:
            return Entitlement(kind=EntitlementKind.NOT_PREMIUM)
        if self.premium_expires is None:
            return Entitlement(kind=EntitlementKind.LIFETIME)
        return Entitlement(kind=EntitlementKind.EXPIRES_AT, expires_at=self.premium_expires)

    def is_active(self, now: datetime | None = None) -> bool:
        """Check whether the profile currently holds an active premium entitlement."""
        if not self.is_premium:
            return False
        if self.premium_expires is None:
            return True
        return self.premium_expires > (now or datetime.now(UTC))


def new_profile_document(is_admin: bool, created_at: datetime | None = None) -> dict[str, Any]:
    """Default document for a user seen for the first time."""
    return {
        "isPremium": False,
        "premiumExpires": None,
        "isAdmin": is_admin,
        "customRewardMessage": None,
        "createdAt": (created_at or datetime.now(UTC)).isoformat(),
    }


class GrantPremiumRequest(BaseModel):
    """Request to grant premium to a user."""

    duration: StrictInt | Literal["lifetime"] = Field(
        ...,
        description="Number of calendar months, or 'lifetime'",
    )


class PlanStatus(BaseModel):
    """Human-facing summary of the user's plan."""

    name: str
    kind: EntitlementKind
    expires_at: datetime | None = None


class ProfileResponse(BaseModel):
    """API response for a user profile."""

    user_id: str
    is_premium: bool
    premium_expires: datetime | None = None
    is_admin: bool
    custom_reward_message: str | None = None
    created_at: datetime
    is_active: bool
    plan: PlanStatus

    @classmethod
    def from_profile(cls, profile: UserProfile, now: datetime | None = None) -> "ProfileResponse":
        """Create response from profile model."""
        entitlement = profile.entitlement
        active = profile.is_active(now)

        if entitlement.kind == EntitlementKind.LIFETIME:
            name = "Lifetime Plan"
        elif active:
            name = "Premium Plan"
        elif entitlement.kind == EntitlementKind.EXPIRES_AT:
            name = "Free Plan (premium expired)"
        else:
            name = "Free Plan"

        return cls(
            user_id=profile.user_id,
            is_premium=profile.is_premium,
            premium_expires=profile.premium_expires,
            is_admin=profile.is_admin,
            custom_reward_message=profile.custom_reward_message,
            created_at=profile.created_at,
            is_active=active,
            plan=PlanStatus(
                name=name,
                kind=entitlement.kind,
                expires_at=entitlement.expires_at,
            ),
        )
