"""FastAPI authentication dependencies."""

from fastapi import Depends, Header

from cleaner_api.errors.exceptions import MissingCredentialsError, PermissionDeniedError
from cleaner_api.models.profile import UserProfile
from cleaner_api.services.entitlement_service import EntitlementService, get_entitlement_service


async def get_optional_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-ID"),
) -> str | None:
    """Extract the user ID from the header, if any."""
    if x_user_id is None:
        return None
    user_id = x_user_id.strip()
    return user_id or None


async def get_current_user_id(
    user_id: str | None = Depends(get_optional_user_id),
) -> str:
    """
    Get the ID of the signed-in user.

    Raises:
        MissingCredentialsError: If no X-User-ID header was sent
    """
    if user_id is None:
        raise MissingCredentialsError()
    return user_id


async def get_current_profile(
    user_id: str = Depends(get_current_user_id),
    entitlements: EntitlementService = Depends(get_entitlement_service),
) -> UserProfile:
    """
    Get the signed-in user's profile.

    A user seen for the first time gets the default free profile.
    """
    return await entitlements.get_or_create_profile(user_id)


async def require_admin(
    profile: UserProfile = Depends(get_current_profile),
) -> UserProfile:
    """
    Require the signed-in user to be an admin.

    Usage:
        @router.post("/admin/redeem-codes")
        async def issue(admin: UserProfile = Depends(require_admin)):
            ...
    """
    if not profile.is_admin:
        raise PermissionDeniedError(
            message="Admin access required",
            details={"user_id": profile.user_id},
        )
    return profile
