"""
Tests for the waiting room and active-session leases.
"""

import asyncio
import uuid

import pytest

from conftest import LEASE_TTL_SECONDS
from ticketgate.services.admission_service import (
    ACTIVE_MARKER,
    AdmissionController,
    lease_key,
    lease_prefix,
    waiting_room_key,
)
from ticketgate.services.interfaces.memory_queue_store import InMemoryQueueStore
from ticketgate.services.interfaces.queue_store import QueueStore


def new_ids(count: int) -> list[uuid.UUID]:
    return [uuid.uuid4() for _ in range(count)]


@pytest.mark.asyncio
async def test_positions_follow_join_order(controller):
    event_id = uuid.uuid4()
    users = new_ids(3)
    for user_id in users:
        assert await controller.join_waiting_room(user_id, event_id)

    assert [await controller.get_queue_position(u, event_id) for u in users] == [0, 1, 2]
    assert await controller.get_queue_length(event_id) == 3


@pytest.mark.asyncio
async def test_position_of_stranger_is_none(controller):
    event_id = uuid.uuid4()
    await controller.join_waiting_room(uuid.uuid4(), event_id)

    assert await controller.get_queue_position(uuid.uuid4(), event_id) is None


@pytest.mark.asyncio
async def test_waiting_rooms_are_per_event(controller):
    first, second = new_ids(2)
    user_id = uuid.uuid4()
    await controller.join_waiting_room(user_id, first)

    assert await controller.get_queue_position(user_id, second) is None
    assert await controller.get_queue_length(second) == 0


@pytest.mark.asyncio
async def test_duplicate_join_adds_second_entry(controller):
    """Joining twice is allowed; the position reported is the first entry."""
    event_id = uuid.uuid4()
    user_id, other = new_ids(2)
    await controller.join_waiting_room(user_id, event_id)
    await controller.join_waiting_room(other, event_id)
    await controller.join_waiting_room(user_id, event_id)

    assert await controller.get_queue_length(event_id) == 3
    assert await controller.get_queue_position(user_id, event_id) == 0


@pytest.mark.asyncio
async def test_admit_batch_is_bounded_and_fifo(controller):
    event_id = uuid.uuid4()
    users = new_ids(5)
    for user_id in users:
        await controller.join_waiting_room(user_id, event_id)

    assert await controller.admit_batch(event_id, 2) == 2

    assert [await controller.is_active(u, event_id) for u in users] == [True, True, False, False, False]
    assert await controller.get_queue_position(users[0], event_id) is None
    assert await controller.get_queue_position(users[2], event_id) == 0
    assert await controller.get_queue_length(event_id) == 3


@pytest.mark.asyncio
async def test_admit_batch_drains_short_queue(controller):
    event_id = uuid.uuid4()
    users = new_ids(2)
    for user_id in users:
        await controller.join_waiting_room(user_id, event_id)

    assert await controller.admit_batch(event_id, 10) == 2
    assert await controller.get_queue_length(event_id) == 0
    assert await controller.admit_batch(event_id, 10) == 0


@pytest.mark.asyncio
async def test_admit_batch_with_zero_rate(controller):
    event_id = uuid.uuid4()
    await controller.join_waiting_room(uuid.uuid4(), event_id)

    assert await controller.admit_batch(event_id, 0) == 0
    assert await controller.get_queue_length(event_id) == 1


@pytest.mark.asyncio
async def test_lease_expires_after_ttl(controller, clock):
    event_id, user_id = new_ids(2)
    await controller.join_waiting_room(user_id, event_id)
    await controller.admit_batch(event_id, 1)

    clock.advance(LEASE_TTL_SECONDS - 1)
    assert await controller.is_active(user_id, event_id)

    clock.advance(1)
    assert not await controller.is_active(user_id, event_id)


@pytest.mark.asyncio
async def test_lease_is_per_event(controller):
    event_id, other_event, user_id = new_ids(3)
    await controller.join_waiting_room(user_id, event_id)
    await controller.admit_batch(event_id, 1)

    assert await controller.is_active(user_id, event_id)
    assert not await controller.is_active(user_id, other_event)


@pytest.mark.asyncio
async def test_remove_active_session(controller):
    event_id, user_id = new_ids(2)
    await controller.join_waiting_room(user_id, event_id)
    await controller.admit_batch(event_id, 1)

    assert await controller.remove_active_session(user_id, event_id)
    assert not await controller.is_active(user_id, event_id)
    assert not await controller.remove_active_session(user_id, event_id)


@pytest.mark.asyncio
async def test_admitted_user_can_rejoin(controller):
    event_id, user_id = new_ids(2)
    await controller.join_waiting_room(user_id, event_id)
    await controller.admit_batch(event_id, 1)
    await controller.join_waiting_room(user_id, event_id)

    assert await controller.is_active(user_id, event_id)
    assert await controller.get_queue_position(user_id, event_id) == 0


@pytest.mark.asyncio
async def test_concurrent_admission_never_admits_twice(queue_store):
    """Several admitters draining one queue split it without overlap."""
    event_id = uuid.uuid4()
    controllers = [AdmissionController(queue_store, LEASE_TTL_SECONDS) for _ in range(4)]
    users = new_ids(50)
    for user_id in users:
        await controllers[0].join_waiting_room(user_id, event_id)

    counts = await asyncio.gather(*(c.admit_batch(event_id, 15) for c in controllers))

    assert sum(counts) == 50
    assert await controllers[0].get_queue_length(event_id) == 0
    assert all([await controllers[0].is_active(u, event_id) for u in users])


@pytest.mark.asyncio
async def test_default_pop_into_leases_composes_primitives(clock):
    """Stores without an atomic override still pop in order and lease each value."""

    class PlainStore(InMemoryQueueStore):
        pop_into_leases = QueueStore.pop_into_leases

    store = PlainStore(clock=clock)
    event_id = uuid.uuid4()
    users = [str(u) for u in new_ids(3)]
    for user_id in users:
        await store.push(waiting_room_key(event_id), user_id)

    admitted = await store.pop_into_leases(
        waiting_room_key(event_id), 2, lease_prefix(event_id), ACTIVE_MARKER, 10
    )

    assert admitted == users[:2]
    assert await store.exists(lease_key(event_id, users[0]))
    assert not await store.exists(lease_key(event_id, users[2]))
