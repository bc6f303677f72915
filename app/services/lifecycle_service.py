# app/services/lifecycle_service.py
"""
Lifecycle operations on existing records and vehicles.

  approve   pending -> active      vehicle -> on-duty
  reject    pending -> rejected    vehicle -> available
  complete  active  -> completed   vehicle -> available  (+ end-of-trip data)
  extend    active, new ETA        vehicle unchanged
  toggle_maintenance               vehicle available <-> maintenance

Each transition is a pure function from (vehicles, records) to a Change, or
None when the record/vehicle is missing or not in the source status. The
service runs them through SyncEngine.apply, which commits and pushes.
"""

from typing import Optional

from app.schemas.usage_record import CompletionData, ExtensionRequest, RecordStatus, UsageRecord
from app.schemas.vehicle import Vehicle, VehicleStatus
from app.services.errors import InvalidCompletion, InvalidExtension
from app.services.sync_engine import Change, OperationResult, SyncEngine
from app.utils.logger import get_logger

logger = get_logger(__name__)


def _find(items: list, item_id: str):
    return next((i for i in items if i.id == item_id), None)


def _replace(items: list, updated) -> list:
    return [updated if i.id == updated.id else i for i in items]


def _move(
    vehicles: list[Vehicle],
    records: list[UsageRecord],
    record: UsageRecord,
    record_updates: dict,
    vehicle_status: Optional[VehicleStatus],
) -> Change:
    updated_record = record.model_copy(update=record_updates)
    new_records = _replace(records, updated_record)
    new_vehicles, updated_vehicle = vehicles, None

    vehicle = _find(vehicles, record.vehicle_id)
    if vehicle_status is not None and vehicle is not None:
        updated_vehicle = vehicle.model_copy(update={"status": vehicle_status})
        new_vehicles = _replace(vehicles, updated_vehicle)
    elif vehicle is None:
        logger.warning(f"[LIFECYCLE] Record {record.id} points at unknown vehicle {record.vehicle_id}")

    return Change(vehicles=new_vehicles, records=new_records, record=updated_record, vehicle=updated_vehicle)


def _open_record(records: list[UsageRecord], record_id: str, source: RecordStatus) -> Optional[UsageRecord]:
    record = _find(records, record_id)
    if record is None:
        logger.info(f"[LIFECYCLE] Record {record_id} not found, nothing to do")
        return None
    if record.status != source:
        logger.info(f"[LIFECYCLE] Record {record_id} is {record.status.value}, expected {source.value}")
        return None
    return record


# ── Transitions ─────────────────────────────────────────────────────────────

def approve(vehicles, records, record_id: str) -> Optional[Change]:
    record = _open_record(records, record_id, RecordStatus.PENDING)
    if record is None:
        return None
    return _move(vehicles, records, record, {"status": RecordStatus.ACTIVE}, VehicleStatus.ON_DUTY)


def reject(vehicles, records, record_id: str) -> Optional[Change]:
    record = _open_record(records, record_id, RecordStatus.PENDING)
    if record is None:
        return None
    return _move(vehicles, records, record, {"status": RecordStatus.REJECTED}, VehicleStatus.AVAILABLE)


def complete(vehicles, records, record_id: str, data: CompletionData) -> Optional[Change]:
    record = _open_record(records, record_id, RecordStatus.ACTIVE)
    if record is None:
        return None
    if data.end_odometer < record.start_odometer:
        raise InvalidCompletion(
            f"End odometer {data.end_odometer} is below start odometer {record.start_odometer}"
        )
    updates = {
        "status": RecordStatus.COMPLETED,
        "end_odometer": data.end_odometer,
        "end_fuel": data.end_fuel,
        "end_condition": data.end_condition,
        "arrival_time": data.arrival_time,
        "return_photo": data.return_photo,
    }
    return _move(vehicles, records, record, updates, VehicleStatus.AVAILABLE)


def extend(vehicles, records, record_id: str, request: ExtensionRequest) -> Optional[Change]:
    record = _open_record(records, record_id, RecordStatus.ACTIVE)
    if record is None:
        return None
    if request.new_estimated_arrival_time < record.departure_time:
        raise InvalidExtension("New arrival time is before the departure time")
    updates = {
        "estimated_arrival_time": request.new_estimated_arrival_time,
        "extension_reason": request.reason,
    }
    return _move(vehicles, records, record, updates, None)


def toggle_maintenance(vehicles, records, vehicle_id: str) -> Optional[Change]:
    vehicle = _find(vehicles, vehicle_id)
    if vehicle is None:
        logger.info(f"[LIFECYCLE] Vehicle {vehicle_id} not found, nothing to do")
        return None
    flipped = {
        VehicleStatus.AVAILABLE: VehicleStatus.MAINTENANCE,
        VehicleStatus.MAINTENANCE: VehicleStatus.AVAILABLE,
    }.get(vehicle.status)
    if flipped is None:
        logger.info(f"[LIFECYCLE] Vehicle {vehicle_id} is {vehicle.status.value}; maintenance toggle ignored")
        return None
    updated = vehicle.model_copy(update={"status": flipped})
    return Change(vehicles=_replace(vehicles, updated), records=list(records), vehicle=updated)


# ── Service ─────────────────────────────────────────────────────────────────

class LifecycleService:
    def __init__(self, engine: SyncEngine):
        self.engine = engine

    async def approve(self, record_id: str) -> Optional[OperationResult]:
        return await self._run("approve", record_id, lambda v, r: approve(v, r, record_id))

    async def reject(self, record_id: str) -> Optional[OperationResult]:
        return await self._run("reject", record_id, lambda v, r: reject(v, r, record_id))

    async def complete(self, record_id: str, data: CompletionData) -> Optional[OperationResult]:
        return await self._run("complete", record_id, lambda v, r: complete(v, r, record_id, data))

    async def extend(self, record_id: str, request: ExtensionRequest) -> Optional[OperationResult]:
        return await self._run("extend", record_id, lambda v, r: extend(v, r, record_id, request))

    async def toggle_maintenance(self, vehicle_id: str) -> Optional[OperationResult]:
        return await self._run("toggle_maintenance", vehicle_id, lambda v, r: toggle_maintenance(v, r, vehicle_id))

    async def _run(self, action: str, target_id: str, change) -> Optional[OperationResult]:
        result = await self.engine.apply(change)
        if result is not None:
            logger.info(f"[LIFECYCLE] {action} {target_id} synced={result.synced}")
        return result
