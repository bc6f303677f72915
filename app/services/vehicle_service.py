# app/services/vehicle_service.py
"""
Read-only fleet helpers used by the vehicles and records routers.
"""

from typing import Optional

from app.schemas.usage_record import RecordStatus, UsageRecord
from app.schemas.vehicle import FleetStatsOut, Vehicle, VehicleStatus


def fleet_stats(vehicles: list[Vehicle], records: list[UsageRecord]) -> FleetStatsOut:
    """Counts by vehicle status plus the number of requests awaiting approval."""
    def count(status: VehicleStatus) -> int:
        return sum(1 for v in vehicles if v.status == status)

    return FleetStatsOut(
        total=len(vehicles),
        available=count(VehicleStatus.AVAILABLE),
        requested=count(VehicleStatus.REQUESTED),
        on_duty=count(VehicleStatus.ON_DUTY),
        maintenance=count(VehicleStatus.MAINTENANCE),
        pending_requests=sum(1 for r in records if r.status == RecordStatus.PENDING),
    )


def search_records(
    records: list[UsageRecord],
    term: Optional[str] = None,
    status: Optional[RecordStatus] = None,
) -> list[UsageRecord]:
    """
    Case-insensitive match on driver, vehicle or department, optionally
    filtered by status. Newest request first.
    """
    needle = (term or "").strip().lower()
    matches = [
        r for r in records
        if (status is None or r.status == status)
        and (not needle
             or needle in r.driver_name.lower()
             or needle in r.vehicle_name.lower()
             or needle in r.department.lower())
    ]
    return sorted(matches, key=lambda r: r.request_date, reverse=True)
