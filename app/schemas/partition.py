# app/schemas/partition.py
from datetime import datetime
from pydantic import BaseModel
from typing import Optional

from app.schemas.base import WireModel
from app.schemas.usage_record import UsageRecord
from app.schemas.vehicle import Vehicle


class Partition(WireModel):
    """One office's slice of the shared document: {vehicles, records, lastUpdate, revision}."""
    vehicles: list[Vehicle] = []
    records: list[UsageRecord] = []
    last_update: Optional[datetime] = None
    revision: int = 0


class SyncStatusOut(BaseModel):
    network_id: str
    is_syncing: bool
    last_synced: Optional[datetime]
    error: Optional[str]
    revision: Optional[int]
    vehicle_count: int
    record_count: int


class OperationOut(WireModel):
    record: Optional[UsageRecord] = None
    vehicle: Optional[Vehicle] = None
    synced: bool
