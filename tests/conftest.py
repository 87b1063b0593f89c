"""Pytest configuration and fixtures."""

from collections.abc import Generator
from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from cleaner_api.auth.anonymous import reset_auth_service
from cleaner_api.config import get_settings
from cleaner_api.main import create_app
from cleaner_api.services.entitlement_service import EntitlementService, reset_entitlement_service
from cleaner_api.services.redemption_service import RedemptionService, reset_redemption_service
from cleaner_api.services.retry import RetryPolicy
from cleaner_api.storage.lua_scripts import lua_scripts
from cleaner_api.storage.manager import StoreManager
from cleaner_api.storage.memory import InMemoryDocumentStore

# Last day of a month followed by a shorter one
FIXED_NOW = datetime(2024, 1, 31, 12, 0, tzinfo=UTC)


@pytest.fixture
def reset_singletons():
    """Reset all singleton services before each test."""
    StoreManager.reset()
    lua_scripts.reset()

    reset_auth_service()
    reset_entitlement_service()
    reset_redemption_service()

    yield

    # Cleanup after test
    StoreManager.reset()
    lua_scripts.reset()


@pytest.fixture
def app(reset_singletons):
    """Create FastAPI app for testing."""
    return create_app()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Create test client."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def store():
    """Fresh in-memory document store."""
    store = InMemoryDocumentStore()
    yield store
    store.clear()


@pytest.fixture
def fast_retry():
    """Retry policy without real backoff."""
    return RetryPolicy(
        max_attempts=8,
        base_backoff_seconds=0.0,
        max_backoff_seconds=0.0,
        jitter_seconds=0.0,
    )


@pytest.fixture
def clock():
    """Clock pinned to FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def entitlements(store, fast_retry, clock):
    """Entitlement service over the test store."""
    return EntitlementService(store=store, retry_policy=fast_retry, clock=clock)


@pytest.fixture
def redemption(store, entitlements, fast_retry):
    """Redemption service over the test store."""
    return RedemptionService(store=store, entitlements=entitlements, retry_policy=fast_retry)


@pytest.fixture
def mock_redis():
    """Create a mock Redis client."""
    redis = AsyncMock()
    redis.ping = AsyncMock(return_value=True)
    redis.hgetall = AsyncMock(return_value={})
    redis.smembers = AsyncMock(return_value=set())
    redis.eval = AsyncMock(return_value=[1, 1])
    redis.evalsha = AsyncMock(return_value=[1, 1])
    redis.script_load = AsyncMock(return_value="sha256hash")
    return redis


# Identity fixtures
@pytest.fixture
def admin_user_id():
    """ID that gets the admin role on first sight."""
    return get_settings().admin_user_id


@pytest.fixture
def admin_headers(admin_user_id):
    """Headers for the built-in admin."""
    return {"X-User-ID": admin_user_id}


@pytest.fixture
def user_headers():
    """Headers for a regular user."""
    return {"X-User-ID": "user_regular_001"}


@pytest.fixture
def other_user_headers():
    """Headers for a second regular user."""
    return {"X-User-ID": "user_regular_002"}
