"""
Redis-backed queue store.

Waiting rooms are Redis lists (RPUSH to join, LPOP to admit) and leases are
plain string keys with EX. Every process talks to the same Redis, so the
waiting room survives API and worker restarts untouched.

Batch admission runs as one Lua script: popping and leasing happen in a
single atomic step, so a crash can never drop a popped user on the floor and
two admission workers can never pop the same entry.

Failure policy:
  Unlike a cache, the waiting room is authoritative. Redis errors are not
  swallowed; they surface as StoreUnavailableError so the API answers 503
  and the admission loop retries on its next tick.
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ticketgate.core.errors import StoreUnavailableError
from ticketgate.core.logging import get_logger
from ticketgate.core.metrics import queue_store_errors
from ticketgate.services.interfaces.queue_store import QueueStore

logger = get_logger(__name__)

SCRIPT_PATH = os.path.join(os.path.dirname(__file__), 'admit_batch.lua')
with open(SCRIPT_PATH, 'r') as f:
    ADMIT_BATCH_SCRIPT = f.read()


class RedisQueueStore(QueueStore):
    """Queue store on a shared Redis (6.2+ for LPOP count)."""

    def __init__(self, client: redis.Redis):
        self.redis = client
        self.admit_script = self.redis.register_script(ADMIT_BATCH_SCRIPT)

    @asynccontextmanager
    async def _command(self, operation: str, key: Optional[str] = None):
        try:
            yield
        except RedisError as e:
            queue_store_errors.inc()
            logger.error("queue_store_error", operation=operation, key=key, error=str(e))
            raise StoreUnavailableError("Queue store", operation) from e

    async def push(self, key: str, value: str) -> int:
        async with self._command("push", key):
            return await self.redis.rpush(key, value)

    async def pop_n(self, key: str, count: int) -> list[str]:
        if count <= 0:
            return []
        async with self._command("pop_n", key):
            popped = await self.redis.lpop(key, count)
        return list(popped or [])

    async def position_of(self, key: str, value: str) -> Optional[int]:
        async with self._command("position_of", key):
            return await self.redis.lpos(key, value)

    async def length(self, key: str) -> int:
        async with self._command("length", key):
            return await self.redis.llen(key)

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        async with self._command("set_with_ttl", key):
            await self.redis.set(key, value, ex=ttl_seconds)

    async def exists(self, key: str) -> bool:
        async with self._command("exists", key):
            return bool(await self.redis.exists(key))

    async def delete(self, key: str) -> bool:
        async with self._command("delete", key):
            return bool(await self.redis.delete(key))

    async def ping(self) -> bool:
        async with self._command("ping"):
            return bool(await self.redis.ping())

    async def pop_into_leases(
        self,
        queue_key: str,
        count: int,
        lease_prefix: str,
        lease_value: str,
        ttl_seconds: int,
    ) -> list[str]:
        if count <= 0:
            return []
        async with self._command("pop_into_leases", queue_key):
            popped = await self.admit_script(
                keys=[queue_key],
                args=[count, lease_prefix, lease_value, ttl_seconds],
            )
        return list(popped or [])
