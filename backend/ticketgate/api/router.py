"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from ticketgate.api.routes import auth, events, reservations

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(events.router)
api_router.include_router(reservations.router)
