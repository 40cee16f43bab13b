"""
In-process queue store.
Implements the waiting room and leases with plain containers.
"""

import asyncio
import time
from collections import deque
from typing import Callable, Optional

from ticketgate.services.interfaces.queue_store import QueueStore


class InMemoryQueueStore(QueueStore):
    """
    Single-process queue store.

    Use when:
    - Running the API without Redis on a developer machine
    - Tests (the clock is injectable so lease expiry needs no sleeping)

    Not shared between processes: with more than one worker process each one
    would see its own waiting room.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._lists: dict[str, deque[str]] = {}
        self._values: dict[str, tuple[str, float]] = {}
        self._lock = asyncio.Lock()

    async def push(self, key: str, value: str) -> int:
        async with self._lock:
            items = self._lists.setdefault(key, deque())
            items.append(value)
            return len(items)

    async def pop_n(self, key: str, count: int) -> list[str]:
        if count <= 0:
            return []
        async with self._lock:
            items = self._lists.get(key)
            if not items:
                return []
            popped = [items.popleft() for _ in range(min(count, len(items)))]
            if not items:
                del self._lists[key]
            return popped

    async def position_of(self, key: str, value: str) -> Optional[int]:
        for index, item in enumerate(self._lists.get(key, ())):
            if item == value:
                return index
        return None

    async def length(self, key: str) -> int:
        return len(self._lists.get(key, ()))

    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        self._values[key] = (value, self._clock() + ttl_seconds)

    async def exists(self, key: str) -> bool:
        entry = self._values.get(key)
        if entry is None:
            return False
        if entry[1] <= self._clock():
            del self._values[key]
            return False
        return True

    async def delete(self, key: str) -> bool:
        present = await self.exists(key)
        self._values.pop(key, None)
        return present

    async def ping(self) -> bool:
        return True

    async def pop_into_leases(
        self,
        queue_key: str,
        count: int,
        lease_prefix: str,
        lease_value: str,
        ttl_seconds: int,
    ) -> list[str]:
        # Same lock as pop_n so a batch is leased before the next caller pops
        if count <= 0:
            return []
        async with self._lock:
            items = self._lists.get(queue_key)
            if not items:
                return []
            popped = [items.popleft() for _ in range(min(count, len(items)))]
            if not items:
                del self._lists[queue_key]
            expires_at = self._clock() + ttl_seconds
            for value in popped:
                self._values[f"{lease_prefix}{value}"] = (lease_value, expires_at)
            return popped
