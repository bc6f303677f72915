# app/routers/vehicles.py
"""Fleet roster: list vehicles, dashboard counts, maintenance toggle."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import get_engine, get_lifecycle_service
from app.schemas.partition import OperationOut
from app.schemas.vehicle import FleetStatsOut, Vehicle, VehicleStatus
from app.services.lifecycle_service import LifecycleService
from app.services.sync_engine import SyncEngine
from app.services.vehicle_service import fleet_stats

router = APIRouter()


@router.get("/vehicles", response_model=list[Vehicle], summary="List vehicles (cached view)")
def list_vehicles(status: Optional[VehicleStatus] = None, engine: SyncEngine = Depends(get_engine)):
    vehicles, _ = engine.snapshot()
    if status:
        vehicles = [v for v in vehicles if v.status == status]
    return vehicles


@router.get("/vehicles/stats", response_model=FleetStatsOut, summary="Fleet counts by status")
def get_fleet_stats(engine: SyncEngine = Depends(get_engine)):
    vehicles, records = engine.snapshot()
    return fleet_stats(vehicles, records)


@router.post("/vehicles/{vehicle_id}/maintenance", response_model=OperationOut,
             summary="Toggle a vehicle between available and maintenance")
async def toggle_maintenance(
    vehicle_id: str,
    engine: SyncEngine = Depends(get_engine),
    lifecycle: LifecycleService = Depends(get_lifecycle_service),
):
    result = await lifecycle.toggle_maintenance(vehicle_id)
    if result is None:
        vehicles, _ = engine.snapshot()
        vehicle = next((v for v in vehicles if v.id == vehicle_id), None)
        if vehicle is None:
            raise HTTPException(status_code=404, detail="Vehicle not found")
        raise HTTPException(status_code=409, detail=f"Vehicle is {vehicle.status.value}")
    return OperationOut(record=None, vehicle=result.vehicle, synced=result.synced)
