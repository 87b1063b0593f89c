"""Tests for the Redis document store against a mocked client."""

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import NoScriptError

from cleaner_api.errors.exceptions import (
    ConflictError,
    DocumentNotFoundError,
    DuplicateKeyError,
    TransientError,
)
from cleaner_api.storage.document_store import Write
from cleaner_api.storage.lua_scripts import COMMIT_SCRIPT, lua_scripts
from cleaner_api.storage.redis_store import RedisDocumentStore


@pytest.fixture
def redis_store(mock_redis):
    lua_scripts.reset()
    yield RedisDocumentStore(mock_redis, namespace="test")
    lua_scripts.reset()


def stored(data: dict, version: int) -> dict[str, str]:
    """Hash contents as returned by HGETALL."""
    return {"data": json.dumps(data), "version": str(version)}


class TestRedisDocumentStore:
    """Tests for RedisDocumentStore."""

    @pytest.mark.asyncio
    async def test_get_missing(self, redis_store, mock_redis):
        assert await redis_store.get("users", "u1") is None
        mock_redis.hgetall.assert_awaited_once_with("test:users:u1")

    @pytest.mark.asyncio
    async def test_get_existing(self, redis_store, mock_redis):
        mock_redis.hgetall.return_value = stored({"isPremium": True}, 4)
        document = await redis_store.get("users", "u1")
        assert document.data == {"isPremium": True}
        assert document.version == 4

    @pytest.mark.asyncio
    async def test_commit_sends_keys_and_args(self, redis_store, mock_redis):
        """Test the key and argument layout passed to the commit script."""
        mock_redis.eval.return_value = [1, 1, 3]

        await redis_store.commit(
            [
                Write("users", "u1", {"isPremium": True}, expected_version=0),
                Write("redeemCodes", "C1", {"usedBy": ["u1"]}, expected_version=2),
            ]
        )

        args = mock_redis.eval.await_args.args
        assert args[0] == COMMIT_SCRIPT
        assert args[1] == 4
        assert args[2:6] == (
            "test:users:u1",
            "test:redeemCodes:C1",
            "test:users:__keys__",
            "test:redeemCodes:__keys__",
        )
        assert args[6:] == (
            0,
            json.dumps({"isPremium": True}),
            "u1",
            2,
            json.dumps({"usedBy": ["u1"]}),
            "C1",
        )

    @pytest.mark.asyncio
    async def test_unconditional_write_uses_any_version(self, redis_store, mock_redis):
        await redis_store.set("users", "u1", {"isAdmin": True})
        # script, numkeys, doc key, index key, then expected version
        assert mock_redis.eval.await_args.args[4] == -1

    @pytest.mark.asyncio
    async def test_commit_conflict(self, redis_store, mock_redis):
        """Test that a failed precondition raises ConflictError with the key."""
        mock_redis.eval.return_value = [0, 2]

        with pytest.raises(ConflictError) as exc_info:
            await redis_store.commit(
                [
                    Write("users", "u1", {}, expected_version=0),
                    Write("redeemCodes", "C1", {}, expected_version=2),
                ]
            )
        assert exc_info.value.details["key"] == "C1"

    @pytest.mark.asyncio
    async def test_create_duplicate(self, redis_store, mock_redis):
        mock_redis.eval.return_value = [0, 1]
        with pytest.raises(DuplicateKeyError):
            await redis_store.create("redeemCodes", "C1", {"limit": 1})

    @pytest.mark.asyncio
    async def test_update_missing(self, redis_store):
        with pytest.raises(DocumentNotFoundError):
            await redis_store.update("users", "nobody", {"isAdmin": True})

    @pytest.mark.asyncio
    async def test_update_retries_lost_race(self, redis_store, mock_redis):
        """Test that an unconditional update re-reads after losing a race."""
        mock_redis.hgetall.side_effect = [
            stored({"isAdmin": False, "isPremium": False}, 1),
            stored({"isAdmin": False, "isPremium": True}, 2),
        ]
        mock_redis.eval.side_effect = [[0, 1], [1, 3]]

        document = await redis_store.update("users", "u1", {"isAdmin": True})

        assert document.version == 3
        assert document.data == {"isAdmin": True, "isPremium": True}

    @pytest.mark.asyncio
    async def test_uses_loaded_script(self, redis_store, mock_redis):
        await lua_scripts.load(mock_redis)
        await redis_store.set("users", "u1", {})
        mock_redis.evalsha.assert_awaited_once()
        assert mock_redis.evalsha.await_args.args[0] == "sha256hash"
        mock_redis.eval.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_back_when_script_flushed(self, redis_store, mock_redis):
        await lua_scripts.load(mock_redis)
        mock_redis.evalsha.side_effect = NoScriptError("NOSCRIPT")
        await redis_store.set("users", "u1", {})
        mock_redis.eval.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connection_errors_are_transient(self, redis_store, mock_redis):
        mock_redis.hgetall.side_effect = RedisConnectionError("down")
        with pytest.raises(TransientError) as exc_info:
            await redis_store.get("users", "u1")
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_query_filters(self, redis_store, mock_redis):
        mock_redis.smembers.return_value = {"a", "b"}
        mock_redis.hgetall.side_effect = [
            stored({"kind": "grant"}, 1),
            stored({"kind": "redeem"}, 1),
        ]
        results = await redis_store.query("events", {"kind": "redeem"})
        assert [doc.key for doc in results] == ["b"]

    @pytest.mark.asyncio
    async def test_health_check(self, redis_store, mock_redis):
        health = await redis_store.health_check()
        assert health["status"] == "up"
        assert health["type"] == "redis"

    @pytest.mark.asyncio
    async def test_health_check_down(self, redis_store, mock_redis):
        mock_redis.ping = AsyncMock(side_effect=RedisConnectionError("down"))
        health = await redis_store.health_check()
        assert health["status"] == "error"
