"""
Redis-based distributed lock.

Several API processes each start a drone simulation worker; the lock makes
sure only one of them advances the in-flight drones per tick, otherwise
every process would move each drone once and deliveries would finish N
times faster.

Acquire uses ``SET NX EX``; release is an atomic compare-and-delete in Lua
so a worker never frees a lock that expired and was taken by another.
"""

from __future__ import annotations

import uuid

import redis.asyncio as aioredis

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class LockNotAcquired(RuntimeError):
    """Raised by the context manager when another holder owns the lock."""


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, name: str, ttl_seconds: int = 60
    ):
        self.redis = client
        self.key = f"medifly:lock:{name}"
        self.ttl = ttl_seconds
        self.token = uuid.uuid4().hex

    async def acquire(self) -> bool:
        """Try once; ``True`` when this instance now owns the lock."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def release(self) -> bool:
        """Release only if still owned.  Returns whether a key was deleted."""
        deleted = await self.redis.eval(_RELEASE_SCRIPT, 1, self.key, self.token)
        return bool(deleted)

    async def __aenter__(self) -> DistributedLock:
        if not await self.acquire():
            raise LockNotAcquired(f"Could not acquire lock: {self.key}")
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.release()
