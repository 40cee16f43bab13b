"""
Infrastructure layer - external system integrations.
Keeps business logic clean from implementation details.
"""

from .redis_client import get_redis, RedisClient
from .redis_queue_store import RedisQueueStore

__all__ = ['get_redis', 'RedisClient', 'RedisQueueStore']
