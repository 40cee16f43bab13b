"""
Queue store factory.
Configures which backing store the waiting room uses.
"""

from typing import Optional

from ticketgate.services.interfaces.queue_store import QueueStore
from ticketgate.services.interfaces.memory_queue_store import InMemoryQueueStore
from ticketgate.infrastructure.redis_client import get_redis
from ticketgate.infrastructure.redis_queue_store import RedisQueueStore
from ticketgate.core.config import settings


def build_queue_store() -> QueueStore:
    """
    Build the configured queue store.

    Store selection (QUEUE_BACKEND env var):
    - redis: RedisQueueStore, required when more than one process serves traffic
    - memory: InMemoryQueueStore, single process only
    """
    backend = getattr(settings, 'QUEUE_BACKEND', 'redis')

    if backend == 'memory':
        return InMemoryQueueStore()
    if backend == 'redis':
        return RedisQueueStore(get_redis())
    raise ValueError(f"Unknown QUEUE_BACKEND: {backend!r}")


# Singleton instance
_store: Optional[QueueStore] = None

def get_queue_store() -> QueueStore:
    """Get queue store singleton. Also used as a FastAPI dependency."""
    global _store
    if _store is None:
        _store = build_queue_store()
    return _store


async def close_queue_store() -> None:
    global _store
    if _store is not None:
        await _store.close()
        _store = None
