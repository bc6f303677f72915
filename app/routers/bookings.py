# app/routers/bookings.py
"""
POST /bookings — staff request a vehicle.
VehicleUnavailable, RemoteUnavailable and WriteConflict are mapped to
HTTP responses by the handlers registered in app.main.
"""

from fastapi import APIRouter, Depends, status

from app.dependencies import get_booking_service
from app.schemas.partition import OperationOut
from app.schemas.usage_record import BookingRequest
from app.services.booking_service import BookingService

router = APIRouter()


@router.post("/bookings", response_model=OperationOut, status_code=status.HTTP_201_CREATED,
             summary="Request a vehicle (checked against live remote state)")
async def create_booking(body: BookingRequest, booking: BookingService = Depends(get_booking_service)):
    result = await booking.submit(body)
    return OperationOut(record=result.record, vehicle=result.vehicle, synced=result.synced)
