"""
Redis caching for the active event listing.

CACHING STRATEGY
================

What we cache:
  - The GET /api/events response (active events + available seat counts)
  - Single key: "events:list:active"

Why:
  - During an on-sale burst every waiting client polls the listing
  - Counting Available seats per event is a GROUP BY over the seat table;
    serving it from Redis keeps that load off the inventory store

Invalidation strategy:
  - Successful reservation, successful purchase, and released reservations
    delete the key (seat counts changed)
  - Short TTL (REDIS_CACHE_TTL, seconds) as safety net

What we do NOT cache:
  - The seat map: clients pick seats from it, stale status means more
    AlreadyTaken results
  - Anything the reservation engine reads; it always goes to the database

The cache is advisory. Redis errors are logged and the request falls back
to the database.
"""

import json
from typing import Optional

import redis.asyncio as redis
from ticketgate.core.config import get_settings
from ticketgate.core.logging import get_logger
from ticketgate.infrastructure.redis_client import get_redis as get_redis_client

logger = get_logger(__name__)
settings = get_settings()

EVENT_LIST_KEY = "events:list:active"


def get_redis() -> Optional[redis.Redis]:
    """Redis client for caching, or None when Redis is disabled."""
    if not settings.REDIS_ENABLED:
        return None
    return get_redis_client()


async def get_cached_events() -> Optional[list]:
    """Retrieve the cached active event listing."""
    client = get_redis()
    if not client:
        return None

    try:
        data = await client.get(EVENT_LIST_KEY)
        if data:
            logger.debug("cache_hit", key=EVENT_LIST_KEY)
            return json.loads(data)
        logger.debug("cache_miss", key=EVENT_LIST_KEY)
    except Exception as e:
        logger.error("cache_get_error", key=EVENT_LIST_KEY, error=str(e))

    return None


async def set_cached_events(data: list) -> None:
    """Cache the active event listing with TTL."""
    client = get_redis()
    if not client:
        return

    try:
        await client.setex(EVENT_LIST_KEY, settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        logger.debug("cache_set", key=EVENT_LIST_KEY, ttl=settings.REDIS_CACHE_TTL)
    except Exception as e:
        logger.error("cache_set_error", key=EVENT_LIST_KEY, error=str(e))


async def invalidate_event_cache() -> None:
    """Drop the cached listing after seat counts change."""
    client = get_redis()
    if not client:
        return

    try:
        await client.delete(EVENT_LIST_KEY)
        logger.debug("cache_invalidated", key=EVENT_LIST_KEY)
    except Exception as e:
        logger.error("cache_invalidation_error", error=str(e))
