"""Health check endpoint."""

from fastapi import APIRouter, Depends

from cleaner_api import __version__
from cleaner_api.models.responses import HealthResponse
from cleaner_api.storage.document_store import DocumentStore
from cleaner_api.storage.manager import get_document_store

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check the health status of the API and its document store.",
)
async def health_check(
    store: DocumentStore = Depends(get_document_store),
) -> HealthResponse:
    """
    Health check endpoint.

    Returns the health status of the API and its components:
    - API status
    - Document store status (Redis or in-memory)
    """
    components = {}

    # Check API (always up if we can respond)
    components["api"] = {"status": "up", "latency_ms": 0}
    components["store"] = await store.health_check()

    all_up = all(c.get("status") == "up" for c in components.values())
    status = "healthy" if all_up else "degraded"

    return HealthResponse(
        status=status,
        version=__version__,
        components=components,
    )


@router.get(
    "/",
    summary="Root",
    description="API root endpoint with basic info.",
)
async def root() -> dict[str, str]:
    """Root endpoint with API info."""
    return {
        "name": "PC Cleaner API",
        "version": __version__,
        "documentation": "/docs",
        "health": "/health",
    }
