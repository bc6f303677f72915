# app/schemas/vehicle.py
from enum import Enum
from pydantic import BaseModel

from app.schemas.base import WireModel


class VehicleStatus(str, Enum):
    AVAILABLE = "available"
    REQUESTED = "requested"
    ON_DUTY = "on-duty"
    MAINTENANCE = "maintenance"


class Vehicle(WireModel):
    id: str
    name: str
    plate_number: str
    status: VehicleStatus = VehicleStatus.AVAILABLE

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.plate_number})"


class FleetStatsOut(BaseModel):
    total: int
    available: int
    requested: int
    on_duty: int
    maintenance: int
    pending_requests: int
