# app/schemas/usage_record.py
"""
Usage record (one booking from request to return) plus the input payloads
that create and close one.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional
from pydantic import Field, field_validator, model_validator

from app.schemas.base import WireModel, ensure_utc, utc_now


class RecordStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    REJECTED = "rejected"


class FuelLevel(str, Enum):
    EMPTY = "E"
    QUARTER = "1/4"
    HALF = "1/2"
    THREE_QUARTERS = "3/4"
    FULL = "F"


class VehicleCondition(str, Enum):
    GOOD = "BAIK"
    NEEDS_CHECK = "PERLU PENGECEKAN"


class UsageRecord(WireModel):
    id: str
    vehicle_id: str
    vehicle_name: str = ""
    driver_name: str
    department: str
    purpose: str = ""
    destination: str = ""
    notes: Optional[str] = None
    departure_time: datetime
    estimated_arrival_time: datetime
    arrival_time: Optional[datetime] = None
    start_odometer: int
    end_odometer: Optional[int] = None
    start_fuel: FuelLevel = FuelLevel.HALF
    end_fuel: Optional[FuelLevel] = None
    start_condition: VehicleCondition = VehicleCondition.GOOD
    end_condition: Optional[VehicleCondition] = None
    status: RecordStatus = RecordStatus.PENDING
    request_date: datetime
    return_photo: Optional[str] = None      # data URL, stored as-is
    extension_reason: Optional[str] = None

    @field_validator("departure_time", "estimated_arrival_time", "arrival_time", "request_date")
    @classmethod
    def _as_utc(cls, value):
        return ensure_utc(value)

    @property
    def is_open(self) -> bool:
        return self.status in (RecordStatus.PENDING, RecordStatus.ACTIVE)

    @property
    def distance(self) -> Optional[int]:
        if self.end_odometer is None:
            return None
        return self.end_odometer - self.start_odometer


class BookingRequest(WireModel):
    vehicle_id: str
    driver_name: str = Field(min_length=1)
    department: str = Field(min_length=1)
    purpose: str = ""
    destination: str = Field(min_length=1)
    notes: Optional[str] = None
    departure_time: datetime = Field(default_factory=utc_now)
    estimated_arrival_time: Optional[datetime] = None   # defaults to departure + 2h
    start_odometer: int = Field(ge=0)
    start_fuel: FuelLevel = FuelLevel.HALF
    start_condition: VehicleCondition = VehicleCondition.GOOD

    @field_validator("departure_time", "estimated_arrival_time")
    @classmethod
    def _as_utc(cls, value):
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_times(self):
        if self.estimated_arrival_time is None:
            self.estimated_arrival_time = self.departure_time + timedelta(hours=2)
        if self.estimated_arrival_time < self.departure_time:
            raise ValueError("estimatedArrivalTime must not be before departureTime")
        return self


class CompletionData(WireModel):
    """End-of-trip data supplied when a vehicle comes back to the pool."""
    end_odometer: int = Field(ge=0)
    end_fuel: FuelLevel = FuelLevel.HALF
    end_condition: VehicleCondition = VehicleCondition.GOOD
    arrival_time: datetime = Field(default_factory=utc_now)
    return_photo: Optional[str] = None

    @field_validator("arrival_time")
    @classmethod
    def _as_utc(cls, value):
        return ensure_utc(value)


class ExtensionRequest(WireModel):
    new_estimated_arrival_time: datetime
    reason: str = Field(min_length=1)

    @field_validator("new_estimated_arrival_time")
    @classmethod
    def _as_utc(cls, value):
        return ensure_utc(value)
