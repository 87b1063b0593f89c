"""API routes module."""

from cleaner_api.routes.admin import router as admin_router
from cleaner_api.routes.auth import router as auth_router
from cleaner_api.routes.downloads import router as downloads_router
from cleaner_api.routes.health import router as health_router
from cleaner_api.routes.profile import router as profile_router
from cleaner_api.routes.redeem import router as redeem_router

__all__ = [
    "admin_router",
    "auth_router",
    "downloads_router",
    "health_router",
    "profile_router",
    "redeem_router",
]
