"""Custom exception hierarchy for the PC Cleaner API."""

from typing import Any


class CleanerAPIError(Exception):
    """Base exception for all PC Cleaner API errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message: str = "An internal error occurred"
    retryable: bool = False

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message or self.__class__.message
        self.details = details or {}
        super().__init__(self.message)


# Authentication Errors (401)


class AuthenticationError(CleanerAPIError):
    """Base authentication error."""

    status_code = 401
    error_code = "AUTH_ERROR"
    message = "Authentication failed"


class MissingCredentialsError(AuthenticationError):
    """No user identity provided."""

    error_code = "AUTH_MISSING_CREDENTIALS"
    message = "No user identity provided, sign in first"


# Authorization Errors (403)


class AuthorizationError(CleanerAPIError):
    """Base authorization error."""

    status_code = 403
    error_code = "AUTH_FORBIDDEN"
    message = "Access denied"


class PermissionDeniedError(AuthorizationError):
    """User doesn't have permission for this resource."""

    error_code = "AUTH_PERMISSION_DENIED"
    message = "You don't have permission to access this resource"


class PremiumRequiredError(AuthorizationError):
    """Resource is only available to users with an active premium plan."""

    error_code = "PREMIUM_REQUIRED"
    message = "An active premium plan is required"

    def __init__(self, user_id: str):
        super().__init__(details={"user_id": user_id})


# Validation Errors (400)


class ValidationError(CleanerAPIError):
    """Base validation error."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    message = "Validation failed"


class InvalidArgumentError(ValidationError):
    """An argument is outside the accepted range."""

    error_code = "INVALID_ARGUMENT"
    message = "Invalid argument"


# Resource Not Found Errors (404)


class NotFoundError(CleanerAPIError):
    """Base not found error."""

    status_code = 404
    error_code = "NOT_FOUND"
    message = "Resource not found"


class DocumentNotFoundError(NotFoundError):
    """Document missing from the store."""

    error_code = "DOCUMENT_NOT_FOUND"
    message = "Document not found"

    def __init__(self, collection: str, key: str):
        super().__init__(
            message=f"Document '{key}' not found in '{collection}'",
            details={"collection": collection, "key": key},
        )
        self.collection = collection
        self.key = key


class ProfileNotFoundError(NotFoundError):
    """User profile not found."""

    error_code = "PROFILE_NOT_FOUND"
    message = "User profile not found"

    def __init__(self, user_id: str):
        super().__init__(
            message=f"User '{user_id}' not found",
            details={"user_id": user_id},
        )


class RedeemCodeNotFoundError(NotFoundError):
    """Redeem code not found."""

    error_code = "REDEEM_CODE_NOT_FOUND"
    message = "Redeem code is invalid or could not be found"

    def __init__(self, code: str):
        super().__init__(details={"code": code})


# Redemption Errors (409)


class RedemptionError(CleanerAPIError):
    """Base redemption error."""

    status_code = 409
    error_code = "REDEMPTION_ERROR"
    message = "Redeem code could not be used"


class LimitExceededError(RedemptionError):
    """Redeem code has reached its usage limit."""

    error_code = "REDEEM_CODE_EXHAUSTED"
    message = "This code has reached its usage limit"

    def __init__(self, code: str, limit: int):
        super().__init__(details={"code": code, "limit": limit})


class AlreadyUsedError(RedemptionError):
    """User has already redeemed this code."""

    error_code = "REDEEM_CODE_ALREADY_USED"
    message = "You have already used this code"

    def __init__(self, code: str, user_id: str):
        super().__init__(details={"code": code, "user_id": user_id})


# Store Errors


class ConflictError(CleanerAPIError):
    """A concurrent update won the race for a document."""

    status_code = 409
    error_code = "CONFLICT"
    message = "The resource was modified concurrently, please retry"
    retryable = True


class DuplicateKeyError(ConflictError):
    """A document with this key already exists."""

    error_code = "DUPLICATE_KEY"
    message = "A document with this key already exists"
    retryable = False  # the same write can never succeed

    def __init__(self, collection: str, key: str):
        super().__init__(details={"collection": collection, "key": key})
        self.collection = collection
        self.key = key


class TransientError(CleanerAPIError):
    """The document store could not be reached."""

    status_code = 503
    error_code = "STORE_UNAVAILABLE"
    message = "The data store is temporarily unavailable"
    retryable = True


class RetriesExhaustedError(CleanerAPIError):
    """A retryable operation kept failing."""

    status_code = 503
    error_code = "SERVICE_UNAVAILABLE"
    message = "The service is busy, please try again later"

    def __init__(self, operation: str, attempts: int, last_error: CleanerAPIError):
        super().__init__(
            details={
                "operation": operation,
                "attempts": attempts,
                "last_error": last_error.error_code,
            },
        )
        self.last_error = last_error

