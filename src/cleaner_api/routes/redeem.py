"""Redeem endpoint."""

from fastapi import APIRouter, Depends

from cleaner_api.auth.dependencies import get_current_user_id
from cleaner_api.models.redeem_code import RedeemRequest, RedeemResponse
from cleaner_api.services.redemption_service import RedemptionService, get_redemption_service

router = APIRouter(tags=["Redeem"])


@router.post(
    "/redeem",
    response_model=RedeemResponse,
    summary="Redeem Code",
    description="Redeem a code for a plan or a custom reward message.",
    responses={
        404: {"description": "Code does not exist"},
        409: {"description": "Code used up, or already used by this user"},
        503: {"description": "Store busy or unavailable, retry later"},
    },
)
async def redeem_code(
    request: RedeemRequest,
    user_id: str = Depends(get_current_user_id),
    redemption_service: RedemptionService = Depends(get_redemption_service),
) -> RedeemResponse:
    """
    Redeem a code for the signed-in user.

    Each user can redeem a given code once, and a code stops working after
    its usage limit is reached.
    """
    outcome = await redemption_service.redeem(request.code, user_id)
    return RedeemResponse.from_outcome(outcome, now=redemption_service.entitlements.now())
