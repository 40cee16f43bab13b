"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Reservation engine metrics
reservation_attempts = Counter(
    'reservation_attempts_total',
    'Seat reservation attempts by outcome',
    ['result']  # success, invalid_seats, already_taken, concurrency_conflict, store_unavailable, error
)

reservation_latency = Histogram(
    'reservation_latency_seconds',
    'Seat reservation unit-of-work latency',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

purchase_attempts = Counter(
    'purchase_attempts_total',
    'Purchase attempts by outcome',
    ['result']  # success, invalid_seats, failed
)

seats_released = Counter(
    'seats_released_total',
    'Reserved seats returned to Available by the release sweeper'
)

# Waiting room metrics
queue_joins = Counter(
    'queue_joins_total',
    'Users appended to a waiting room'
)

users_admitted = Counter(
    'users_admitted_total',
    'Users promoted from a waiting room to an active lease'
)

worker_tick_failures = Counter(
    'worker_tick_failures_total',
    'Background worker failures',
    ['worker', 'scope']  # scope: tick, event
)

queue_store_errors = Counter(
    'queue_store_errors_total',
    'Queue store operations that failed'
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_reservation(result: str):
    """Record reservation outcome. ConcurrencyConflict stays distinct from AlreadyTaken here."""
    reservation_attempts.labels(result=result).inc()

def record_purchase(result: str):
    purchase_attempts.labels(result=result).inc()

def record_admitted(count: int):
    if count > 0:
        users_admitted.inc(count)

def record_worker_failure(worker: str, scope: str):
    worker_tick_failures.labels(worker=worker, scope=scope).inc()
