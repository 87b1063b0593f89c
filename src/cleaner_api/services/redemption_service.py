"""Redemption service for issuing and redeeming codes."""

import logging
import secrets
import string
from collections.abc import Callable
from functools import partial

from cleaner_api.config import Settings, get_settings
from cleaner_api.errors.exceptions import (
    AlreadyUsedError,
    ConflictError,
    DuplicateKeyError,
    InvalidArgumentError,
    LimitExceededError,
    RedeemCodeNotFoundError,
)
from cleaner_api.models.profile import UserProfile
from cleaner_api.models.redeem_code import (
    RedeemCode,
    Reward,
    RewardOutcome,
    RewardType,
)
from cleaner_api.services.entitlement_service import (
    USERS_COLLECTION,
    EntitlementService,
    duration_for_plan,
    get_entitlement_service,
    premium_fields,
)
from cleaner_api.services.retry import RetryPolicy, retry_async, run_transaction
from cleaner_api.storage.document_store import DocumentStore
from cleaner_api.storage.manager import get_document_store
from cleaner_api.storage.transaction import Transaction

logger = logging.getLogger(__name__)

REDEEM_CODES_COLLECTION = "redeemCodes"

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_SEGMENT_LENGTH = 6


def generate_code(prefix: str) -> str:
    """
    Generate a human-shareable code like ``FAISAL-7K2QX9-4821``.

    Six uppercase alphanumerics followed by a number in 1000-9999.
    Uniqueness is enforced by the store, not here.
    """
    segment = "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_SEGMENT_LENGTH))
    number = 1000 + secrets.randbelow(9000)
    return f"{prefix}-{segment}-{number}"


def normalize_code(code: str) -> str:
    return code.strip()


class RedemptionService:
    """Service for redeem code issuance and redemption."""

    def __init__(
        self,
        store: DocumentStore | None = None,
        entitlements: EntitlementService | None = None,
        settings: Settings | None = None,
        retry_policy: RetryPolicy | None = None,
        code_generator: Callable[[str], str] | None = None,
    ):
        self._store = store
        self._entitlements = entitlements
        self._settings = settings or get_settings()
        self._retry_policy = retry_policy or RetryPolicy.from_settings(self._settings)
        self._generate = code_generator or generate_code

    @property
    def store(self) -> DocumentStore:
        """Get document store."""
        if self._store is None:
            self._store = get_document_store()
        return self._store

    @property
    def entitlements(self) -> EntitlementService:
        """Get entitlement service."""
        if self._entitlements is None:
            self._entitlements = get_entitlement_service()
        return self._entitlements

    def _validate_reward(self, reward: Reward) -> Reward:
        if reward.reward_type == RewardType.PLAN:
            duration_for_plan(reward.reward_value)
            return reward

        message = reward.reward_value.strip()
        if not message:
            raise InvalidArgumentError(
                message="Custom reward message must not be empty",
                details={"reward_type": reward.reward_type.value},
            )
        return Reward.custom(message)

    async def issue_code(self, reward: Reward, limit: int) -> RedeemCode:
        """
        Issue a new redeem code.

        A freshly generated code that collides with an existing one is
        regenerated; an existing code is never overwritten.

        Args:
            reward: Plan or custom-message reward
            limit: Maximum number of distinct users, at least 1

        Returns:
            The stored code with an empty usage ledger

        Raises:
            InvalidArgumentError: If the limit or reward is invalid
            ConflictError: If no unused code could be generated
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidArgumentError(
                message="Usage limit must be at least 1",
                details={"limit": limit},
            )
        reward = self._validate_reward(reward)

        attempts = max(self._settings.code_generation_attempts, 1)
        for attempt in range(1, attempts + 1):
            redeem_code = RedeemCode(
                code=self._generate(self._settings.redeem_code_prefix),
                reward_type=reward.reward_type,
                reward_value=reward.reward_value,
                limit=limit,
                used_by=[],
                created_at=self.entitlements.now(),
            )
            create = partial(
                self.store.create,
                REDEEM_CODES_COLLECTION,
                redeem_code.code,
                redeem_code.to_document(),
            )
            try:
                await retry_async(create, self._retry_policy, "issue redeem code")
            except DuplicateKeyError:
                logger.warning(
                    "Generated redeem code %s already exists (attempt %d/%d)",
                    redeem_code.code,
                    attempt,
                    attempts,
                )
                continue

            logger.info(
                "Issued redeem code %s (%s: %s, limit %d)",
                redeem_code.code,
                reward.reward_type.value,
                reward.reward_value,
                limit,
            )
            return redeem_code

        raise ConflictError(
            message="Could not generate an unused redeem code",
            details={"attempts": attempts},
        )

    async def get_code(self, code: str) -> RedeemCode:
        """
        Get an issued code with its usage ledger.

        Raises:
            RedeemCodeNotFoundError: If the code does not exist
        """
        code = normalize_code(code)

        async def operation() -> RedeemCode:
            document = await self.store.get(REDEEM_CODES_COLLECTION, code) if code else None
            if document is None:
                raise RedeemCodeNotFoundError(code)
            return RedeemCode.from_document(document.data)

        return await retry_async(operation, self._retry_policy, f"get redeem code {code}")

    async def redeem(self, code: str, user_id: str) -> RewardOutcome:
        """
        Redeem a code for a user.

        The usage check, the reward and the ledger append happen in one
        optimistic transaction over the code and the profile. A conflicting
        concurrent redemption makes the whole read-check-write cycle run
        again, so the limit holds and a user appears in the ledger at most
        once regardless of arrival order.

        Raises:
            RedeemCodeNotFoundError: If the code does not exist
            LimitExceededError: If the code is used up
            AlreadyUsedError: If this user already redeemed the code
            RetriesExhaustedError: If conflicts or store errors persist
        """
        code = normalize_code(code)
        if not code:
            raise RedeemCodeNotFoundError(code)

        async def body(transaction: Transaction) -> RewardOutcome:
            code_data = await transaction.get(REDEEM_CODES_COLLECTION, code)
            if code_data is None:
                raise RedeemCodeNotFoundError(code)

            redeem_code = RedeemCode.from_document(code_data)
            # A repeat attempt reads as AlreadyUsed even once the code is used up
            if redeem_code.has_redeemed(user_id):
                raise AlreadyUsedError(code, user_id)
            if len(redeem_code.used_by) >= redeem_code.limit:
                raise LimitExceededError(code, redeem_code.limit)

            profile_data = await transaction.get(USERS_COLLECTION, user_id)
            if profile_data is None:
                profile_data = self.entitlements.new_profile_document(user_id)
                transaction.set(USERS_COLLECTION, user_id, profile_data)

            reward = redeem_code.reward
            if reward.reward_type == RewardType.PLAN:
                fields = premium_fields(
                    duration_for_plan(reward.reward_value),
                    self.entitlements.now(),
                )
                fields["customRewardMessage"] = None
            else:
                fields = {"customRewardMessage": reward.reward_value}

            transaction.update(USERS_COLLECTION, user_id, fields)
            transaction.update(
                REDEEM_CODES_COLLECTION,
                code,
                {"usedBy": [*redeem_code.used_by, user_id]},
            )

            return RewardOutcome(
                code=code,
                reward=reward,
                profile=UserProfile.from_document(user_id, {**profile_data, **fields}),
                remaining_uses=redeem_code.remaining_uses - 1,
            )

        outcome = await run_transaction(
            self.store,
            body,
            self._retry_policy,
            f"redeem code {code}",
        )
        logger.info(
            "User %s redeemed code %s (%s: %s, %d uses left)",
            user_id,
            code,
            outcome.reward.reward_type.value,
            outcome.reward.reward_value,
            outcome.remaining_uses,
        )
        return outcome


# Singleton instance
_redemption_service: RedemptionService | None = None


def get_redemption_service() -> RedemptionService:
    """Get redemption service instance."""
    global _redemption_service
    if _redemption_service is None:
        _redemption_service = RedemptionService()
    return _redemption_service


def reset_redemption_service() -> None:
    """Reset redemption service (for testing)."""
    global _redemption_service
    _redemption_service = None
