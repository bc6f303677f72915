# app/dependencies.py
"""FastAPI dependencies, resolved from the objects built at startup."""

from fastapi import Depends, Request

from app.services.booking_service import BookingService
from app.services.lifecycle_service import LifecycleService
from app.services.sync_engine import SyncEngine


def get_engine(request: Request) -> SyncEngine:
    return request.app.state.sync_engine


def get_booking_service(engine: SyncEngine = Depends(get_engine)) -> BookingService:
    return BookingService(engine)


def get_lifecycle_service(engine: SyncEngine = Depends(get_engine)) -> LifecycleService:
    return LifecycleService(engine)
