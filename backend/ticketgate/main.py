"""
TicketGate API - Main Application Entry Point

Fair on-sale for a fixed seat inventory:
- Redis-backed FIFO waiting room releasing a bounded batch per interval
- Time-limited active sessions gating the reservation endpoints
- Concurrency-safe seat reservation with row-version optimistic locking
- Structured logging with request correlation and Prometheus metrics
"""

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ticketgate.core.config import get_settings
from ticketgate.core.errors import TicketGateError
from ticketgate.core.logging import setup_logging, get_logger
from ticketgate.core.metrics import metrics_endpoint
from ticketgate.api.router import api_router
from ticketgate.api.middleware import RequestLoggingMiddleware
from ticketgate.db.session import AsyncSessionLocal, create_tables, dispose_engine, get_db, ping_database
from ticketgate.infrastructure.redis_client import RedisClient
from ticketgate.services.admission_service import AdmissionController
from ticketgate.services.interfaces.queue_store import QueueStore
from ticketgate.services.queue_store_factory import get_queue_store, close_queue_store
from ticketgate.workers import AdmissionLoop, SeatReleaseSweeper, constant_rate

settings = get_settings()


def build_workers(store: QueueStore) -> list:
    """Background workers enabled by configuration, each with its own store handles."""
    workers = []
    if settings.ADMISSION_LOOP_ENABLED:
        workers.append(
            AdmissionLoop(
                AdmissionController(store, settings.ACTIVE_SESSION_TTL_SECONDS),
                AsyncSessionLocal,
                interval_seconds=settings.ADMISSION_INTERVAL_SECONDS,
                rate_policy=constant_rate(settings.ADMISSION_RATE),
            )
        )
    if settings.SEAT_SWEEPER_ENABLED:
        workers.append(
            SeatReleaseSweeper(
                AsyncSessionLocal,
                hold_seconds=settings.RESERVATION_HOLD_SECONDS,
                interval_seconds=settings.SEAT_SWEEP_INTERVAL_SECONDS,
            )
        )
    return workers


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger = get_logger(__name__)

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        queue_backend=settings.QUEUE_BACKEND,
    )

    if settings.DB_AUTO_CREATE:
        await create_tables()

    store = get_queue_store()
    try:
        await store.ping()
        logger.info("queue_store_ready", backend=settings.QUEUE_BACKEND)
    except TicketGateError:
        # Workers retry every tick; /health reports the outage
        logger.warning("queue_store_unavailable", backend=settings.QUEUE_BACKEND)

    workers = build_workers(store)
    for worker in workers:
        worker.start()

    yield

    for worker in workers:
        await worker.stop()
    await close_queue_store()
    await RedisClient.close()
    await dispose_engine()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Waiting room and concurrency-safe seat reservations for high-demand on-sales",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Custom middleware
app.add_middleware(RequestLoggingMiddleware)

# Routes
app.include_router(api_router)


@app.exception_handler(TicketGateError)
async def ticketgate_error_handler(request: Request, exc: TicketGateError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code.value},
    )


@app.get("/health", tags=["Health"])
async def health_check(
    db: AsyncSession = Depends(get_db),
    store: QueueStore = Depends(get_queue_store),
):
    """Liveness of both backing stores, for Docker and load balancers."""
    logger = get_logger(__name__)
    checks = {}

    try:
        await ping_database(db)
        checks["inventory_store"] = "ok"
    except Exception as e:
        logger.error("health_inventory_store_failed", error=str(e))
        checks["inventory_store"] = "unavailable"

    try:
        checks["queue_store"] = "ok" if await store.ping() else "unavailable"
    except Exception as e:
        logger.error("health_queue_store_failed", error=str(e))
        checks["queue_store"] = "unavailable"

    healthy = all(value == "ok" for value in checks.values())
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "version": settings.APP_VERSION,
            **checks,
        },
    )


@app.get("/metrics", tags=["Health"], include_in_schema=False)
async def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.APP_VERSION,
        "docs": "/docs",
    }
