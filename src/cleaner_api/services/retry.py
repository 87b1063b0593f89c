"""Bounded retry with exponential backoff for store operations."""

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from cleaner_api.config import Settings, get_settings
from cleaner_api.errors.exceptions import CleanerAPIError, RetriesExhaustedError
from cleaner_api.storage.document_store import DocumentStore
from cleaner_api.storage.transaction import Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how patiently to retry retryable errors."""

    max_attempts: int = 8
    base_backoff_seconds: float = 0.05
    backoff_multiplier: float = 2.0
    max_backoff_seconds: float = 1.0
    jitter_seconds: float = 0.05

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "RetryPolicy":
        """Build the policy from application settings."""
        settings = settings or get_settings()
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_backoff_seconds=settings.retry_base_backoff_seconds,
            backoff_multiplier=settings.retry_backoff_multiplier,
            max_backoff_seconds=settings.retry_max_backoff_seconds,
            jitter_seconds=settings.retry_jitter_seconds,
        )

    def delay_for(self, attempt: int) -> float:
        """Delay before the attempt following ``attempt`` (1-indexed)."""
        base_backoff = max(self.base_backoff_seconds, 0.0)
        multiplier = max(self.backoff_multiplier, 1.0)

        delay = base_backoff * (multiplier ** (attempt - 1))
        if self.max_backoff_seconds:
            delay = min(delay, max(self.max_backoff_seconds, 0.0))
        if self.jitter_seconds:
            delay += random.uniform(0, self.jitter_seconds)
        return max(delay, 0.0)


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy,
    description: str,
) -> T:
    """
    Run ``operation`` until it succeeds or fails terminally.

    Errors flagged ``retryable`` (conflicts and transient store failures) are
    retried with backoff. Anything else propagates at once. When the attempts
    run out, ``RetriesExhaustedError`` is raised with the last error attached.
    """
    max_attempts = max(policy.max_attempts, 1)
    attempt = 0

    while True:
        attempt += 1
        try:
            return await operation()
        except CleanerAPIError as exc:
            if not exc.retryable:
                raise

            if attempt >= max_attempts:
                logger.warning(
                    "%s failed after %d attempts: %s",
                    description,
                    attempt,
                    exc.error_code,
                )
                raise RetriesExhaustedError(description, attempt, exc) from exc

            delay = policy.delay_for(attempt)
            logger.warning(
                "%s hit %s, retrying in %.3fs (attempt %d/%d)",
                description,
                exc.error_code,
                delay,
                attempt + 1,
                max_attempts,
            )
            if delay:
                await asyncio.sleep(delay)


async def run_transaction(
    store: DocumentStore,
    body: Callable[[Transaction], Awaitable[T]],
    policy: RetryPolicy,
    description: str,
) -> T:
    """
    Run ``body`` inside an optimistic transaction, retrying on conflicts.

    ``body`` reads and buffers writes through the transaction it is given; it
    runs again from scratch on every attempt, so it must not have side
    effects outside the transaction.
    """

    async def attempt() -> T:
        transaction = Transaction(store)
        result = await body(transaction)
        await transaction.commit()
        return result

    return await retry_async(attempt, policy, description)
