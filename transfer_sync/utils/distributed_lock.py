"""
Redis distributed lock.

Gives a scheduled job single-flight semantics across dramatiq workers.
"""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from loguru import logger

# Delete only if we still own the lock
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class DistributedLock:
    """Non-blocking lock stored as a Redis key with expiry."""

    def __init__(self, redis_client: redis.Redis, prefix: str = "") -> None:
        """
        Initialize lock helper.

        Args:
            redis_client: Async Redis client
            prefix: Key prefix for all locks
        """
        self.redis_client = redis_client
        self.prefix = prefix

    @asynccontextmanager
    async def lock(self, name: str, timeout: int) -> AsyncIterator[bool]:
        """
        Try to take the lock once.

        Yields True if acquired, False if another holder has it.
        The key expires after ``timeout`` seconds in case the holder dies.
        """
        key = f"{self.prefix}{name}"
        token = uuid.uuid4().hex
        acquired = bool(
            await self.redis_client.set(key, token, nx=True, ex=timeout)
        )
        if not acquired:
            logger.info(f"Lock {key} is held by another worker")
        try:
            yield acquired
        finally:
            if acquired:
                await self.redis_client.eval(_RELEASE_SCRIPT, 1, key, token)
