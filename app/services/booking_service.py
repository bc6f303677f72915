# app/services/booking_service.py
"""
Booking transaction: turn a BookingRequest into a pending usage record.

The availability check runs against a live read of the remote partition,
not the in-memory copy, and the new record is prepended to that fresh record
list. This narrows the double-booking window to the gap between that read
and our write; the revision check on write catches what is left of it.
"""

import uuid
from typing import Optional

from app.schemas.base import utc_now
from app.schemas.usage_record import BookingRequest, RecordStatus, UsageRecord
from app.schemas.vehicle import Vehicle, VehicleStatus
from app.services.errors import VehicleUnavailable
from app.services.sync_engine import Change, OperationResult, SyncEngine
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _find_vehicle(vehicles: list[Vehicle], vehicle_id: str) -> Optional[Vehicle]:
    return next((v for v in vehicles if v.id == vehicle_id), None)


def reserve(vehicles: list[Vehicle], records: list[UsageRecord], request: BookingRequest) -> Change:
    """
    Pure part of the booking: check availability and build the new state.
    Raises VehicleUnavailable when the target is missing, not available, or
    still holds a pending or active record.
    """
    target = _find_vehicle(vehicles, request.vehicle_id)
    if target is None or target.status != VehicleStatus.AVAILABLE:
        raise VehicleUnavailable(request.vehicle_id, target.status.value if target else None)
    # At most one open record per vehicle, whatever its status says
    holder = next((r for r in records if r.vehicle_id == target.id and r.is_open), None)
    if holder is not None:
        raise VehicleUnavailable(request.vehicle_id, target.status.value, held_by=holder.id)

    record = UsageRecord(
        id=str(uuid.uuid4()),
        vehicle_id=target.id,
        vehicle_name=target.display_name,
        driver_name=request.driver_name,
        department=request.department,
        purpose=request.purpose,
        destination=request.destination,
        notes=request.notes,
        departure_time=request.departure_time,
        estimated_arrival_time=request.estimated_arrival_time,
        start_odometer=request.start_odometer,
        start_fuel=request.start_fuel,
        start_condition=request.start_condition,
        status=RecordStatus.PENDING,
        request_date=utc_now(),
    )
    booked = target.model_copy(update={"status": VehicleStatus.REQUESTED})
    new_vehicles = [booked if v.id == target.id else v for v in vehicles]
    return Change(vehicles=new_vehicles, records=[record] + list(records), record=record, vehicle=booked)


class BookingService:
    def __init__(self, engine: SyncEngine):
        self.engine = engine

    async def submit(self, request: BookingRequest) -> OperationResult:
        """
        Raises VehicleUnavailable (after forcing a resync so callers see the
        current fleet), RemoteUnavailable when the fresh read fails (nothing is
        committed), or WriteConflict when another client wrote first.
        """
        try:
            result = await self.engine.apply(lambda v, r: reserve(v, r, request), fresh=True)
        except VehicleUnavailable as e:
            logger.warning(f"[BOOKING] {e}; driver={request.driver_name}")
            await self.engine.sync()
            raise

        logger.info(
            f"[BOOKING] {result.record.driver_name} requested {result.record.vehicle_name} "
            f"record={result.record.id} synced={result.synced}"
        )
        return result
