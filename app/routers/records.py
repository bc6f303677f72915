# app/routers/records.py
"""Usage history plus the admin actions on a single record."""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from app.dependencies import get_engine, get_lifecycle_service
from app.schemas.partition import OperationOut
from app.schemas.usage_record import CompletionData, ExtensionRequest, RecordStatus, UsageRecord
from app.services.lifecycle_service import LifecycleService
from app.services.sync_engine import OperationResult, SyncEngine
from app.services.vehicle_service import search_records

router = APIRouter()


def _to_response(result: Optional[OperationResult], record_id: str, engine: SyncEngine) -> OperationOut:
    if result is None:
        _, records = engine.snapshot()
        record = next((r for r in records if r.id == record_id), None)
        if record is None:
            raise HTTPException(status_code=404, detail="Record not found")
        raise HTTPException(status_code=409, detail=f"Record is {record.status.value}")
    return OperationOut(record=result.record, vehicle=result.vehicle, synced=result.synced)


@router.get("/records", response_model=list[UsageRecord], summary="Usage history, newest first")
def list_records(
    q: Optional[str] = None,
    status: Optional[RecordStatus] = None,
    limit: int = Query(100, ge=1, le=1000),
    engine: SyncEngine = Depends(get_engine),
):
    """Search matches driver, vehicle or department (case-insensitive)."""
    _, records = engine.snapshot()
    return search_records(records, term=q, status=status)[:limit]


@router.get("/records/{record_id}", response_model=UsageRecord, summary="Single usage record")
def get_record(record_id: str, engine: SyncEngine = Depends(get_engine)):
    _, records = engine.snapshot()
    record = next((r for r in records if r.id == record_id), None)
    if record is None:
        raise HTTPException(status_code=404, detail="Record not found")
    return record


@router.post("/records/{record_id}/approve", response_model=OperationOut, summary="Approve a pending request")
async def approve_record(
    record_id: str,
    engine: SyncEngine = Depends(get_engine),
    lifecycle: LifecycleService = Depends(get_lifecycle_service),
):
    return _to_response(await lifecycle.approve(record_id), record_id, engine)


@router.post("/records/{record_id}/reject", response_model=OperationOut, summary="Reject a pending request")
async def reject_record(
    record_id: str,
    engine: SyncEngine = Depends(get_engine),
    lifecycle: LifecycleService = Depends(get_lifecycle_service),
):
    return _to_response(await lifecycle.reject(record_id), record_id, engine)


@router.post("/records/{record_id}/complete", response_model=OperationOut, summary="Return a vehicle to the pool")
async def complete_record(
    record_id: str,
    body: CompletionData,
    engine: SyncEngine = Depends(get_engine),
    lifecycle: LifecycleService = Depends(get_lifecycle_service),
):
    return _to_response(await lifecycle.complete(record_id, body), record_id, engine)


@router.post("/records/{record_id}/extend", response_model=OperationOut, summary="Extend an active trip")
async def extend_record(
    record_id: str,
    body: ExtensionRequest,
    engine: SyncEngine = Depends(get_engine),
    lifecycle: LifecycleService = Depends(get_lifecycle_service),
):
    return _to_response(await lifecycle.extend(record_id, body), record_id, engine)
