"""
Record store adapter.

Generic string-keyed operations over the shared Redis store. The store
only offers single-key atomicity; multi-key consistency is the callers'
concern.
"""

import redis.asyncio as redis
from loguru import logger
from redis.exceptions import WatchError


class RecordStore:
    """
    Thin async adapter over a Redis client.

    The client must be created with ``decode_responses=True`` so every
    value comes back as ``str``.
    """

    def __init__(self, client: redis.Redis) -> None:
        """
        Initialize record store.

        Args:
            client: Async Redis client
        """
        self.client = client

    async def get(self, key: str) -> str | None:
        return await self.client.get(key)

    async def set(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    async def set_if_absent(self, key: str, value: str) -> bool:
        """
        Set key only when it does not exist yet.

        Returns:
            True if this call created the key
        """
        return bool(await self.client.set(key, value, nx=True))

    async def delete(self, key: str) -> None:
        await self.client.delete(key)

    async def lpush(self, key: str, value: str) -> None:
        await self.client.lpush(key, value)

    async def lrange(self, key: str, start: int, stop: int) -> list[str]:
        return await self.client.lrange(key, start, stop)

    async def exists(self, key: str) -> bool:
        return await self.client.exists(key) == 1

    async def keys(self, pattern: str) -> list[str]:
        """
        List keys matching a glob pattern.

        Uses incremental SCAN so large keyspaces do not block the server.
        """
        return [key async for key in self.client.scan_iter(match=pattern, count=500)]

    async def compare_and_set(self, key: str, expected: str | None, value: str) -> bool:
        """
        Replace the value of key only if it still equals ``expected``.

        Optimistic WATCH/MULTI transaction: a concurrent write between the
        read and the commit aborts the write.

        Args:
            key: Record key
            expected: Value previously read (None if the key was absent)
            value: New value

        Returns:
            True if the write was applied, False on conflict
        """
        async with self.client.pipeline(transaction=True) as pipe:
            try:
                await pipe.watch(key)
                current = await pipe.get(key)
                if current != expected:
                    await pipe.unwatch()
                    return False
                pipe.multi()
                pipe.set(key, value)
                await pipe.execute()
                return True
            except WatchError:
                logger.debug(f"Concurrent write detected on {key}")
                return False

    async def hash_set(self, key: str, field: str, value: str) -> None:
        await self.client.hset(key, field, value)

    async def hash_get(self, key: str, field: str) -> str | None:
        return await self.client.hget(key, field)

    async def hash_get_all(self, key: str) -> dict[str, str]:
        return await self.client.hgetall(key)

    async def close(self) -> None:
        await self.client.aclose()
