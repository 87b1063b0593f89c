"""Application configuration and plan settings."""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class StoreBackend(str, Enum):
    MEMORY = "memory"
    REDIS = "redis"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_env: Environment = Environment.DEVELOPMENT
    api_prefix: str = "/v1"

    # Document store
    store_backend: StoreBackend = StoreBackend.MEMORY
    redis_url: str = "redis://localhost:6379/0"
    redis_max_connections: int = 100
    redis_namespace: str = "pc_cleaner"

    # Accounts
    admin_user_id: str = "09800983331236749282"

    # Redeem codes
    redeem_code_prefix: str = "FAISAL"
    code_generation_attempts: int = 5

    # Retry of conflicting or transient store operations
    retry_max_attempts: int = 8
    retry_base_backoff_seconds: float = 0.05
    retry_backoff_multiplier: float = 2.0
    retry_max_backoff_seconds: float = 1.0
    retry_jitter_seconds: float = 0.05

    # Downloads
    cleaner_download_url: str = "https://downloads.pc-cleaner.app/PC_Cleaner_Faisal.ps1"

    model_config = {"env_prefix": "", "case_sensitive": False}


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class PlanId(str, Enum):
    """Premium plans that can be granted or redeemed."""

    ONE_MONTH = "1m"
    SIX_MONTHS = "6m"
    LIFETIME = "lifetime"


@dataclass(frozen=True)
class PlanConfig:
    """Configuration for a premium plan."""

    display_name: str
    duration_months: int | None  # None means lifetime


PLAN_CONFIGS: dict[PlanId, PlanConfig] = {
    PlanId.ONE_MONTH: PlanConfig(display_name="1 Month Premium", duration_months=1),
    PlanId.SIX_MONTHS: PlanConfig(display_name="6 Month Premium", duration_months=6),
    PlanId.LIFETIME: PlanConfig(display_name="Lifetime Premium", duration_months=None),
}


def get_plan_config(plan: PlanId) -> PlanConfig:
    """Get configuration for a plan."""
    return PLAN_CONFIGS[plan]
