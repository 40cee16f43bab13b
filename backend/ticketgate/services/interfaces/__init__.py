"""
Service interfaces for dependency inversion.
Allows swapping the queue store without changing admission logic.
"""

from .queue_store import QueueStore
from .memory_queue_store import InMemoryQueueStore

__all__ = ['QueueStore', 'InMemoryQueueStore']
