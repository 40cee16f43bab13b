"""
Async engine and session factory for the inventory store.

Reservation and purchase manage their own commit/rollback; the request
dependency only guarantees the session is closed and rolled back on error.
"""

from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from ticketgate.core.config import get_settings
from ticketgate.db.base import Base

settings = get_settings()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        return {}
    options = {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }
    if url.startswith("postgresql+asyncpg"):
        # Transaction timeout: a slow unit of work is cancelled and rolled back
        options["connect_args"] = {
            "server_settings": {
                "application_name": "ticketgate",
                "statement_timeout": str(settings.DB_STATEMENT_TIMEOUT_MS),
            }
        }
    return options


def create_engine(url: str = settings.DATABASE_URL) -> AsyncEngine:
    return create_async_engine(url, echo=settings.DEBUG, **_engine_options(url))


engine = create_engine()
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def create_tables() -> None:
    """Create all tables directly; production deployments use Alembic instead."""
    import ticketgate.models  # noqa: F401 - registers tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_database(session: AsyncSession) -> None:
    await session.execute(text("SELECT 1"))


async def dispose_engine() -> None:
    await engine.dispose()
