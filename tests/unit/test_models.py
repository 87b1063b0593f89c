"""Tests for Pydantic models."""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from cleaner_api.config import PLAN_CONFIGS, PlanId, get_plan_config
from cleaner_api.models.profile import (
    EntitlementKind,
    GrantPremiumRequest,
    ProfileResponse,
    UserProfile,
    new_profile_document,
)
from cleaner_api.models.redeem_code import (
    CodeStatus,
    RedeemCode,
    RedeemRequest,
    Reward,
    RewardType,
)

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


class TestUserProfile:
    """Tests for UserProfile model."""

    def test_defaults_from_new_document(self):
        """Test that a first-sight profile is free and not admin."""
        profile = UserProfile.from_document("user_1", new_profile_document(is_admin=False))
        assert profile.user_id == "user_1"
        assert profile.is_premium is False
        assert profile.premium_expires is None
        assert profile.is_admin is False
        assert profile.custom_reward_message is None

    def test_reads_camel_case_document(self):
        """Test that stored camelCase fields are parsed."""
        profile = UserProfile.from_document(
            "user_1",
            {
                "isPremium": True,
                "premiumExpires": "2024-07-15T12:00:00+00:00",
                "isAdmin": True,
                "customRewardMessage": "Thanks!",
                "createdAt": "2024-01-01T00:00:00+00:00",
            },
        )
        assert profile.is_premium is True
        assert profile.premium_expires == datetime(2024, 7, 15, 12, 0, tzinfo=UTC)
        assert profile.is_admin is True
        assert profile.custom_reward_message == "Thanks!"

    def test_document_round_trip_keeps_field_names(self):
        """Test that to_document writes the stored field names."""
        profile = UserProfile(user_id="user_1", is_premium=True, created_at=NOW)
        document = profile.to_document()
        assert set(document) == {
            "isPremium",
            "premiumExpires",
            "isAdmin",
            "customRewardMessage",
            "createdAt",
        }
        assert "userId" not in document

    def test_not_premium_is_inactive(self):
        profile = UserProfile(user_id="user_1")
        assert profile.is_active(NOW) is False
        assert profile.entitlement.kind == EntitlementKind.NOT_PREMIUM

    def test_lifetime_is_active(self):
        """Test that premium without expiry is a lifetime grant."""
        profile = UserProfile(user_id="user_1", is_premium=True, premium_expires=None)
        assert profile.is_active(NOW) is True
        assert profile.entitlement.kind == EntitlementKind.LIFETIME
        assert profile.entitlement.expires_at is None

    def test_future_expiry_is_active(self):
        expires = NOW + timedelta(days=1)
        profile = UserProfile(user_id="user_1", is_premium=True, premium_expires=expires)
        assert profile.is_active(NOW) is True
        assert profile.entitlement.kind == EntitlementKind.EXPIRES_AT
        assert profile.entitlement.expires_at == expires

    def test_past_expiry_is_inactive(self):
        """Test that an expired grant no longer counts."""
        profile = UserProfile(
            user_id="user_1",
            is_premium=True,
            premium_expires=NOW - timedelta(seconds=1),
        )
        assert profile.is_active(NOW) is False

    def test_expiry_at_now_is_inactive(self):
        """Test that expiry must be strictly in the future."""
        profile = UserProfile(user_id="user_1", is_premium=True, premium_expires=NOW)
        assert profile.is_active(NOW) is False

    def test_stale_expiry_ignored_when_not_premium(self):
        """Test that is_premium False wins over a leftover expiry."""
        profile = UserProfile(
            user_id="user_1",
            is_premium=False,
            premium_expires=NOW + timedelta(days=30),
        )
        assert profile.is_active(NOW) is False


class TestProfileResponse:
    """Tests for ProfileResponse plan naming."""

    @pytest.mark.parametrize(
        "is_premium,expires,name",
        [
            (False, None, "Free Plan"),
            (True, None, "Lifetime Plan"),
            (True, NOW + timedelta(days=10), "Premium Plan"),
            (True, NOW - timedelta(days=10), "Free Plan (premium expired)"),
        ],
    )
    def test_plan_name(self, is_premium, expires, name):
        profile = UserProfile(user_id="user_1", is_premium=is_premium, premium_expires=expires)
        response = ProfileResponse.from_profile(profile, now=NOW)
        assert response.plan.name == name
        assert response.is_active == profile.is_active(NOW)


class TestGrantPremiumRequest:
    """Tests for GrantPremiumRequest model."""

    def test_months(self):
        assert GrantPremiumRequest(duration=6).duration == 6

    def test_lifetime(self):
        assert GrantPremiumRequest(duration="lifetime").duration == "lifetime"

    @pytest.mark.parametrize("duration", [True, "6", 1.5])
    def test_non_integer_months_rejected(self, duration):
        """Test that booleans and numeric strings are not read as month counts."""
        with pytest.raises(ValidationError):
            GrantPremiumRequest(duration=duration)

    def test_unknown_string_rejected(self):
        """Test that only 'lifetime' is accepted as a string."""
        with pytest.raises(ValidationError):
            GrantPremiumRequest(duration="forever")


class TestRedeemCode:
    """Tests for RedeemCode model."""

    def _code(self, limit: int, used_by: list[str]) -> RedeemCode:
        return RedeemCode(
            code="FAISAL-ABC123-1234",
            reward_type=RewardType.PLAN,
            reward_value="1m",
            limit=limit,
            used_by=used_by,
        )

    def test_active_until_limit(self):
        code = self._code(limit=2, used_by=["user_1"])
        assert code.status == CodeStatus.ACTIVE
        assert code.remaining_uses == 1

    def test_exhausted_at_limit(self):
        code = self._code(limit=2, used_by=["user_1", "user_2"])
        assert code.status == CodeStatus.EXHAUSTED
        assert code.remaining_uses == 0

    def test_has_redeemed(self):
        code = self._code(limit=2, used_by=["user_1"])
        assert code.has_redeemed("user_1") is True
        assert code.has_redeemed("user_2") is False

    def test_limit_must_be_positive(self):
        """Test that a zero limit fails validation."""
        with pytest.raises(ValidationError):
            self._code(limit=0, used_by=[])

    def test_reads_camel_case_document(self):
        code = RedeemCode.from_document(
            {
                "code": "FAISAL-ABC123-1234",
                "rewardType": "custom",
                "rewardValue": "Hello",
                "limit": 3,
                "usedBy": ["user_1"],
                "createdAt": "2024-01-01T00:00:00+00:00",
            }
        )
        assert code.reward == Reward.custom("Hello")
        assert code.used_by == ["user_1"]
        assert code.to_document()["usedBy"] == ["user_1"]


class TestRewards:
    """Tests for rewards and plan catalogue."""

    def test_plan_reward_from_enum(self):
        reward = Reward.plan(PlanId.SIX_MONTHS)
        assert reward.reward_type == RewardType.PLAN
        assert reward.reward_value == "6m"

    def test_plan_catalogue(self):
        assert get_plan_config(PlanId.ONE_MONTH).duration_months == 1
        assert get_plan_config(PlanId.SIX_MONTHS).duration_months == 6
        assert get_plan_config(PlanId.LIFETIME).duration_months is None
        assert set(PLAN_CONFIGS) == set(PlanId)

    def test_redeem_request_rejects_empty_code(self):
        with pytest.raises(ValidationError):
            RedeemRequest(code="")
