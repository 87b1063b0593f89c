"""Standard API response models."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] | None = Field(default=None, description="Additional error details")
    request_id: str | None = Field(default=None, description="Request ID for tracking")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    documentation_url: str | None = Field(
        default=None, description="Link to documentation about this error"
    )


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="API version")
    components: dict[str, dict[str, Any]] = Field(
        default_factory=dict, description="Component health status"
    )
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class AnonymousSignInResponse(BaseModel):
    """Response for an anonymous sign-in."""

    user_id: str = Field(..., description="Opaque user ID to send in the X-User-ID header")
    is_admin: bool
    created_at: datetime


class DownloadResponse(BaseModel):
    """Download link for premium users."""

    file_name: str
    url: str
