"""Pydantic models for the PC Cleaner API."""

from cleaner_api.models.profile import (
    Entitlement,
    EntitlementKind,
    GrantPremiumRequest,
    ProfileResponse,
    UserProfile,
)
from cleaner_api.models.redeem_code import (
    CodeStatus,
    IssueCodeRequest,
    RedeemCode,
    RedeemRequest,
    Reward,
    RewardOutcome,
    RewardType,
)
from cleaner_api.models.responses import ErrorDetail, ErrorResponse, HealthResponse

__all__ = [
    "CodeStatus",
    "Entitlement",
    "EntitlementKind",
    "ErrorDetail",
    "ErrorResponse",
    "GrantPremiumRequest",
    "HealthResponse",
    "IssueCodeRequest",
    "ProfileResponse",
    "RedeemCode",
    "RedeemRequest",
    "Reward",
    "RewardOutcome",
    "RewardType",
    "UserProfile",
]
