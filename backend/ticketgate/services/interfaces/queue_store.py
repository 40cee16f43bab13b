"""
Queue store interface.
The waiting room and the active-lease table only need an ordered list and
expiring keys, so the admission layer depends on this and nothing else.
"""

from abc import ABC, abstractmethod
from typing import Optional


class QueueStore(ABC):
    """
    Interface for the waiting-room backing store.

    Implementations:
    - RedisQueueStore: production, shared by every API and worker process
    - InMemoryQueueStore: single process only (development, tests)
    """

    @abstractmethod
    async def push(self, key: str, value: str) -> int:
        """
        Append value to the tail of the list at key.

        Returns:
            Length of the list after the push
        """

    @abstractmethod
    async def pop_n(self, key: str, count: int) -> list[str]:
        """
        Atomically remove up to count values from the head of the list.

        Each value is returned to exactly one caller, however many race.
        """

    @abstractmethod
    async def position_of(self, key: str, value: str) -> Optional[int]:
        """Zero-based index of the first occurrence of value, or None."""

    @abstractmethod
    async def length(self, key: str) -> int:
        """Number of values in the list at key (0 if missing)."""

    @abstractmethod
    async def set_with_ttl(self, key: str, value: str, ttl_seconds: int) -> None:
        """Write value at key, expiring after ttl_seconds."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Whether key is present and not expired."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete key. Returns True if something was removed."""

    @abstractmethod
    async def ping(self) -> bool:
        """Liveness check used by /health."""

    async def close(self) -> None:
        """Release connections. No-op by default."""

    async def pop_into_leases(
        self,
        queue_key: str,
        count: int,
        lease_prefix: str,
        lease_value: str,
        ttl_seconds: int,
    ) -> list[str]:
        """
        Pop up to count values and write a lease key `lease_prefix + value`
        for each one.

        The default composes pop_n and set_with_ttl. A user popped here but
        not leased (process crash in between) has to join again; stores that
        can do both in one round trip should override this.
        """
        popped = await self.pop_n(queue_key, count)
        for value in popped:
            await self.set_with_ttl(f"{lease_prefix}{value}", lease_value, ttl_seconds)
        return popped
