"""Authentication module."""

from cleaner_api.auth.anonymous import AnonymousAuthService, get_auth_service
from cleaner_api.auth.dependencies import (
    get_current_profile,
    get_current_user_id,
    get_optional_user_id,
    require_admin,
)

__all__ = [
    "AnonymousAuthService",
    "get_auth_service",
    "get_current_profile",
    "get_current_user_id",
    "get_optional_user_id",
    "require_admin",
]
