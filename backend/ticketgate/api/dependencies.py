"""
FastAPI dependencies shared by the route modules.
"""

from fastapi import Depends

from ticketgate.core.config import settings
from ticketgate.services.admission_service import AdmissionController
from ticketgate.services.interfaces.queue_store import QueueStore
from ticketgate.services.queue_store_factory import get_queue_store


def get_admission_controller(store: QueueStore = Depends(get_queue_store)) -> AdmissionController:
    return AdmissionController(store, settings.ACTIVE_SESSION_TTL_SECONDS)
