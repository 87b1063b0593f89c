"""Services module."""

from cleaner_api.services.entitlement_service import (
    EntitlementService,
    add_months,
    is_premium_active,
)
from cleaner_api.services.redemption_service import RedemptionService, generate_code
from cleaner_api.services.retry import RetryPolicy, retry_async, run_transaction

__all__ = [
    "EntitlementService",
    "RedemptionService",
    "RetryPolicy",
    "add_months",
    "generate_code",
    "is_premium_active",
    "retry_async",
    "run_transaction",
]
