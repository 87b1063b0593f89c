"""Premium download endpoint."""

import logging

from fastapi import APIRouter, Depends

from cleaner_api.auth.dependencies import get_current_profile
from cleaner_api.config import get_settings
from cleaner_api.errors.exceptions import PremiumRequiredError
from cleaner_api.models.profile import UserProfile
from cleaner_api.models.responses import DownloadResponse
from cleaner_api.services.entitlement_service import EntitlementService, get_entitlement_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/downloads", tags=["Downloads"])


@router.get(
    "/cleaner",
    response_model=DownloadResponse,
    summary="Download Cleaner",
    description="Get the cleaner script download link. Requires an active premium plan.",
)
async def download_cleaner(
    profile: UserProfile = Depends(get_current_profile),
    entitlements: EntitlementService = Depends(get_entitlement_service),
) -> DownloadResponse:
    """Premium-gated download link."""
    if not entitlements.is_active(profile):
        raise PremiumRequiredError(profile.user_id)

    url = get_settings().cleaner_download_url
    logger.info("Issued cleaner download to user %s", profile.user_id)
    return DownloadResponse(file_name=url.rsplit("/", 1)[-1], url=url)
