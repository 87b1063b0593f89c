"""Profile endpoint."""

from fastapi import APIRouter, Depends

from cleaner_api.auth.dependencies import get_current_profile
from cleaner_api.models.profile import ProfileResponse, UserProfile
from cleaner_api.services.entitlement_service import EntitlementService, get_entitlement_service

router = APIRouter(tags=["Profile"])


@router.get(
    "/profile",
    response_model=ProfileResponse,
    summary="Get Profile",
    description="Get the signed-in user's plan, role and reward message.",
)
async def get_profile(
    profile: UserProfile = Depends(get_current_profile),
    entitlements: EntitlementService = Depends(get_entitlement_service),
) -> ProfileResponse:
    """
    Get the current user's profile.

    First-time users get the default free profile.
    """
    return ProfileResponse.from_profile(profile, now=entitlements.now())
