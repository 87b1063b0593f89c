"""Anonymous sign-in endpoint."""

from fastapi import APIRouter, Depends, status

from cleaner_api.auth.anonymous import AnonymousAuthService, get_auth_service
from cleaner_api.models.responses import AnonymousSignInResponse

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/anonymous",
    response_model=AnonymousSignInResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Anonymous Sign-In",
    description="Issue a new user ID with a default free profile.",
)
async def sign_in_anonymously(
    auth_service: AnonymousAuthService = Depends(get_auth_service),
) -> AnonymousSignInResponse:
    """Send the returned user_id in the X-User-ID header on later calls."""
    profile = await auth_service.sign_in()
    return AnonymousSignInResponse(
        user_id=profile.user_id,
        is_admin=profile.is_admin,
        created_at=profile.created_at,
    )
