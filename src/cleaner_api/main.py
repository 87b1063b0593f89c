"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cleaner_api import __version__
from cleaner_api.config import StoreBackend, get_settings
from cleaner_api.errors.handlers import register_exception_handlers
from cleaner_api.middleware.request_id import RequestIDMiddleware
from cleaner_api.routes import (
    admin_router,
    auth_router,
    downloads_router,
    health_router,
    profile_router,
    redeem_router,
)
from cleaner_api.storage.lua_scripts import lua_scripts
from cleaner_api.storage.manager import StoreManager
from cleaner_api.storage.redis_client import close_redis, init_redis

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Handles startup and shutdown events:
    - Startup: Connect Redis if configured, load Lua scripts, pick the store
    - Shutdown: Close Redis connection
    """
    settings = get_settings()
    logger.info("Starting PC Cleaner API v%s in %s mode", __version__, settings.api_env.value)

    redis = None
    if settings.store_backend == StoreBackend.REDIS:
        redis = await init_redis()
        if redis is not None:
            try:
                await lua_scripts.load(redis)
                logger.info("Loaded Lua scripts into Redis")
            except Exception as e:
                # The store falls back to EVAL when no SHA is loaded
                logger.warning("Lua script load failed: %s", e)

    StoreManager.configure(redis)

    yield

    logger.info("Shutting down PC Cleaner API")
    lua_scripts.reset()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="PC Cleaner API",
        description=(
            "Entitlement and redeem code API for the PC Cleaner desktop app.\n\n"
            "## Features\n"
            "- Anonymous sign-in with per-user premium plans\n"
            "- Redeem codes with usage limits and race-safe redemption\n"
            "- Admin tools for granting plans and issuing codes\n\n"
            "## Authentication\n"
            "Call `POST /v1/auth/anonymous` once and send the returned user ID "
            "in the `X-User-ID` header on every other call."
        ),
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    app.add_middleware(RequestIDMiddleware)  # type: ignore[arg-type]

    # Register exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(profile_router, prefix=settings.api_prefix)
    app.include_router(redeem_router, prefix=settings.api_prefix)
    app.include_router(downloads_router, prefix=settings.api_prefix)
    app.include_router(admin_router, prefix=settings.api_prefix)

    return app


# Create application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "cleaner_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_env.value == "development",
    )
