"""Admin endpoints for managing users and redeem codes."""

from fastapi import APIRouter, Depends, status

from cleaner_api.auth.dependencies import require_admin
from cleaner_api.models.profile import GrantPremiumRequest, ProfileResponse, UserProfile
from cleaner_api.models.redeem_code import IssueCodeRequest, RedeemCodeResponse
from cleaner_api.services.entitlement_service import EntitlementService, get_entitlement_service
from cleaner_api.services.redemption_service import RedemptionService, get_redemption_service

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.post(
    "/users/{user_id}/premium",
    response_model=ProfileResponse,
    summary="Grant Premium",
    description="Grant premium for a number of calendar months, or for life.",
)
async def grant_premium(
    user_id: str,
    request: GrantPremiumRequest,
    admin: UserProfile = Depends(require_admin),
    entitlements: EntitlementService = Depends(get_entitlement_service),
) -> ProfileResponse:
    """
    Grant premium to a user.

    The expiry is computed from now and replaces any existing one.
    """
    profile = await entitlements.grant_premium(user_id, request.duration)
    return ProfileResponse.from_profile(profile, now=entitlements.now())


@router.post(
    "/users/{user_id}/free",
    response_model=ProfileResponse,
    summary="Set Free Plan",
    description="Put a user back on the free plan.",
)
async def revoke_to_free(
    user_id: str,
    admin: UserProfile = Depends(require_admin),
    entitlements: EntitlementService = Depends(get_entitlement_service),
) -> ProfileResponse:
    profile = await entitlements.revoke_to_free(user_id)
    return ProfileResponse.from_profile(profile, now=entitlements.now())


@router.post(
    "/users/{user_id}/admin",
    response_model=ProfileResponse,
    summary="Promote To Admin",
    description="Give a user the admin role.",
)
async def promote_to_admin(
    user_id: str,
    admin: UserProfile = Depends(require_admin),
    entitlements: EntitlementService = Depends(get_entitlement_service),
) -> ProfileResponse:
    profile = await entitlements.promote_to_admin(user_id)
    return ProfileResponse.from_profile(profile, now=entitlements.now())


@router.post(
    "/redeem-codes",
    response_model=RedeemCodeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Issue Redeem Code",
    description="Create a new redeem code with a reward and a usage limit.",
)
async def issue_redeem_code(
    request: IssueCodeRequest,
    admin: UserProfile = Depends(require_admin),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> RedeemCodeResponse:
    """
    Issue a new redeem code.

    Plan rewards take a plan ID (1m, 6m, lifetime); custom rewards take the
    message to show on the redeeming user's profile.
    """
    redeem_code = await redemption_service.issue_code(request.reward, request.limit)
    return RedeemCodeResponse.from_code(redeem_code)


@router.get(
    "/redeem-codes/{code}",
    response_model=RedeemCodeResponse,
    summary="Get Redeem Code",
    description="Get a redeem code with its usage ledger.",
)
async def get_redeem_code(
    code: str,
    admin: UserProfile = Depends(require_admin),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> RedeemCodeResponse:
    redeem_code = await redemption_service.get_code(code)
    return RedeemCodeResponse.from_code(redeem_code)
