"""Redeem code models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from cleaner_api.config import PlanId
from cleaner_api.models.profile import ProfileResponse, UserProfile


class RewardType(str, Enum):
    """Kind of reward a code grants."""

    PLAN = "plan"
    CUSTOM = "custom"


class CodeStatus(str, Enum):
    """Redeem code lifecycle state."""

    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class Reward(BaseModel):
    """Reward attached to a redeem code."""

    reward_type: RewardType
    reward_value: str

    @classmethod
    def plan(cls, plan: PlanId | str) -> "Reward":
        """Reward that grants a premium plan."""
        value = plan.value if isinstance(plan, PlanId) else plan
        return cls(reward_type=RewardType.PLAN, reward_value=value)

    @classmethod
    def custom(cls, message: str) -> "Reward":
        """Reward that shows a free-text message on the profile."""
        return cls(reward_type=RewardType.CUSTOM, reward_value=message)


class RedeemCode(BaseModel):
    """
    Issued redeem code.

    Stored in the ``redeemCodes`` collection keyed by the code string.
    ``used_by`` is the usage ledger: every user ID in it redeemed the code
    exactly once, and its length never exceeds ``limit``.
    """

    code: str = Field(..., description="Human-shareable code string")
    reward_type: RewardType
    reward_value: str
    limit: int = Field(..., ge=1, description="Maximum number of distinct users")
    used_by: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @classmethod
    def from_document(cls, data: dict[str, Any]) -> "RedeemCode":
        """Build a code from a stored document."""
        return cls.model_validate(data)

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored document shape."""
        return self.model_dump(by_alias=True, mode="json")

    @property
    def reward(self) -> Reward:
        return Reward(reward_type=self.reward_type, reward_value=self.reward_value)

    @property
    def remaining_uses(self) -> int:
        return max(0, self.limit - len(self.used_by))

    @property
    def status(self) -> CodeStatus:
        if len(self.used_by) >= self.limit:
            return CodeStatus.EXHAUSTED
        return CodeStatus.ACTIVE

    def has_redeemed(self, user_id: str) -> bool:
        return user_id in self.used_by


class RewardOutcome(BaseModel):
    """Result of a successful redemption."""

    code: str
    reward: Reward
    profile: UserProfile
    remaining_uses: int


class IssueCodeRequest(BaseModel):
    """Request to issue a new redeem code."""

    reward_type: RewardType = Field(default=RewardType.PLAN)
    reward_value: str = Field(
        default=PlanId.ONE_MONTH.value,
        max_length=500,
        description="Plan ID for plan rewards, message for custom rewards",
    )
    limit: int = Field(default=5, description="Maximum number of distinct users")

    @property
    def reward(self) -> Reward:
        return Reward(reward_type=self.reward_type, reward_value=self.reward_value)


class RedeemRequest(BaseModel):
    """Request to redeem a code."""

    code: str = Field(..., min_length=1, max_length=64)


class RedeemCodeResponse(BaseModel):
    """API response for an issued code."""

    code: str
    reward_type: RewardType
    reward_value: str
    limit: int
    used_by: list[str]
    remaining_uses: int
    status: CodeStatus
    created_at: datetime

    @classmethod
    def from_code(cls, code: RedeemCode) -> "RedeemCodeResponse":
        """Create response from code model."""
        return cls(
            code=code.code,
            reward_type=code.reward_type,
            reward_value=code.reward_value,
            limit=code.limit,
            used_by=list(code.used_by),
            remaining_uses=code.remaining_uses,
            status=code.status,
            created_at=code.created_at,
        )


class RedeemResponse(BaseModel):
    """API response for a successful redemption."""

    code: str
    reward_type: RewardType
    reward_value: str
    remaining_uses: int
    profile: ProfileResponse

    @classmethod
    def from_outcome(
        cls, outcome: RewardOutcome, now: datetime | None = None
    ) -> "RedeemResponse":
        """Create response from a redemption outcome."""
        return cls(
            code=outcome.code,
            reward_type=outcome.reward.reward_type,
            reward_value=outcome.reward.reward_value,
            remaining_uses=outcome.remaining_uses,
            profile=ProfileResponse.from_profile(outcome.profile, now=now),
        )
