"""
Tests for queue store selection and Redis failure handling.
"""

import pytest
import redis.asyncio as redis

from ticketgate.core.errors import ErrorCode, StoreUnavailableError
from ticketgate.infrastructure.redis_queue_store import ADMIT_BATCH_SCRIPT, RedisQueueStore
from ticketgate.services import queue_store_factory
from ticketgate.services.interfaces.memory_queue_store import InMemoryQueueStore


@pytest.fixture
def unreachable_redis() -> RedisQueueStore:
    # Nothing listens on port 1
    client = redis.Redis(host="127.0.0.1", port=1, socket_connect_timeout=0.5, decode_responses=True)
    return RedisQueueStore(client)


def test_admit_script_pops_and_leases():
    assert "LPOP" in ADMIT_BATCH_SCRIPT
    assert "EX" in ADMIT_BATCH_SCRIPT
    # Only the waiting room is passed as a key; lease keys are derived inside
    assert "KEYS[2]" not in ADMIT_BATCH_SCRIPT


@pytest.mark.asyncio
async def test_redis_outage_raises_store_unavailable(unreachable_redis):
    with pytest.raises(StoreUnavailableError) as exc_info:
        await unreachable_redis.push("event:queue:waiting:x", "user")

    assert exc_info.value.code is ErrorCode.STORE_UNAVAILABLE
    assert exc_info.value.status_code == 503
    assert exc_info.value.operation == "push"


@pytest.mark.asyncio
async def test_redis_outage_during_admission(unreachable_redis):
    with pytest.raises(StoreUnavailableError):
        await unreachable_redis.pop_into_leases("event:queue:waiting:x", 5, "session:x:", "active", 300)


@pytest.mark.asyncio
async def test_zero_count_skips_redis(unreachable_redis):
    assert await unreachable_redis.pop_n("event:queue:waiting:x", 0) == []
    assert await unreachable_redis.pop_into_leases("event:queue:waiting:x", 0, "session:x:", "active", 300) == []


def test_memory_backend_selected(monkeypatch):
    monkeypatch.setattr(queue_store_factory.settings, "QUEUE_BACKEND", "memory")
    assert isinstance(queue_store_factory.build_queue_store(), InMemoryQueueStore)


def test_unknown_backend_rejected(monkeypatch):
    monkeypatch.setattr(queue_store_factory.settings, "QUEUE_BACKEND", "memcached")
    with pytest.raises(ValueError):
        queue_store_factory.build_queue_store()
