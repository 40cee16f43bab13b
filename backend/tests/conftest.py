"""
Pytest fixtures for test database, queue store and client.

Runs without PostgreSQL or Redis: every test gets its own SQLite file
(through aiosqlite) and an in-process queue store with a controllable clock.
"""

import os

# Must be set before ticketgate reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("QUEUE_BACKEND", "memory")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("ADMISSION_LOOP_ENABLED", "false")
os.environ.setdefault("SEAT_SWEEPER_ENABLED", "false")

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import select
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from ticketgate.main import app
from ticketgate.db.base import Base
from ticketgate.db.session import get_db
from ticketgate.models import User, Event, Seat, SeatStatus
from ticketgate.services.admission_service import AdmissionController
from ticketgate.services.interfaces.memory_queue_store import InMemoryQueueStore
from ticketgate.services.queue_store_factory import get_queue_store

LEASE_TTL_SECONDS = 300


class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Fresh database file with all tables for each test."""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'ticketgate.db'}")
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def queue_store(clock) -> InMemoryQueueStore:
    return InMemoryQueueStore(clock=clock)


@pytest.fixture
def controller(queue_store) -> AdmissionController:
    return AdmissionController(queue_store, LEASE_TTL_SECONDS)


@pytest_asyncio.fixture
async def client(session_factory, queue_store) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the database and queue store swapped for the test ones."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_queue_store] = lambda: queue_store

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def create_user(db: AsyncSession, email: str) -> User:
    user = User(email=email, password_hash="demo_hash")
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def create_event(db: AsyncSession, name: str, seat_count: int, is_active: bool = True) -> Event:
    """Event with seats laid out as section A, one row per ten seats."""
    event = Event(
        name=name,
        total_seats=seat_count,
        sale_start_time=datetime.now(timezone.utc) + timedelta(days=7),
        is_active=is_active,
    )
    db.add(event)
    await db.flush()
    for index in range(seat_count):
        db.add(
            Seat(
                event_id=event.id,
                section="A",
                row_number=str(index // 10 + 1),
                seat_number=f"{index % 10 + 1:02d}",
                status=SeatStatus.AVAILABLE,
            )
        )
    await db.commit()
    await db.refresh(event)
    return event


async def seat_ids_of(db: AsyncSession, event: Event) -> list[int]:
    result = await db.execute(select(Seat.id).where(Seat.event_id == event.id).order_by(Seat.id))
    return list(result.scalars().all())


# Fixture rows are written in their own sessions and come back detached, so a
# rollback inside the code under test never expires them.

@pytest_asyncio.fixture
async def test_user(session_factory) -> User:
    async with session_factory() as db:
        return await create_user(db, "alice@example.com")


@pytest_asyncio.fixture
async def other_user(session_factory) -> User:
    async with session_factory() as db:
        return await create_user(db, "bob@example.com")


@pytest_asyncio.fixture
async def test_event(session_factory) -> Event:
    """Active event with 20 seats."""
    async with session_factory() as db:
        return await create_event(db, "Test Concert", 20)


@pytest_asyncio.fixture
async def inactive_event(session_factory) -> Event:
    async with session_factory() as db:
        return await create_event(db, "Cancelled Show", 5, is_active=False)


@pytest_asyncio.fixture
async def seat_ids(session_factory, test_event: Event) -> list[int]:
    async with session_factory() as db:
        return await seat_ids_of(db, test_event)
