"""Process-wide async Redis client, used for the drone worker's tick lock."""

from __future__ import annotations

import redis.asyncio as aioredis

from medifly.config import settings

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Connect lazily; every caller in the process shares one pool."""
    global _client
    if _client is None:
        _client = aioredis.from_url(
            settings.redis_url, decode_responses=True, health_check_interval=30
        )
    return _client


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
