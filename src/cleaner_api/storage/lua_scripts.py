"""Redis Lua scripts for atomic document operations."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from redis.asyncio import Redis

# Conditional multi-document commit
# Keys: [doc_key_1..doc_key_n, index_key_1..index_key_n]
# Args: per document [expected_version (-1 = any), data_json, doc_id]
# Returns: {1, new_version_1..new_version_n} or {0, index_of_failed_document}
COMMIT_SCRIPT = """
local n = #KEYS / 2

-- Check every precondition before touching anything
for i = 1, n do
    local expected = tonumber(ARGV[(i - 1) * 3 + 1])
    if expected >= 0 then
        local current = tonumber(redis.call('HGET', KEYS[i], 'version') or '0')
        if current ~= expected then
            return {0, i}
        end
    end
end

local result = {1}
for i = 1, n do
    local base = (i - 1) * 3
    redis.call('HSET', KEYS[i], 'data', ARGV[base + 2])
    result[i + 1] = redis.call('HINCRBY', KEYS[i], 'version', 1)
    redis.call('SADD', KEYS[n + i], ARGV[base + 3])
end
return result
"""


class LuaScripts:
    """Manager for Lua script SHA hashes."""

    def __init__(self) -> None:
        self.commit_sha: str | None = None
        self._loaded = False

    async def load(self, redis_client: "Redis") -> None:
        """Load all scripts into Redis and store SHA hashes."""
        if self._loaded:
            return

        self.commit_sha = await redis_client.script_load(COMMIT_SCRIPT)
        self._loaded = True

    def reset(self) -> None:
        """Reset loaded state (for testing)."""
        self._loaded = False
        self.commit_sha = None


# Global instance
lua_scripts = LuaScripts()
