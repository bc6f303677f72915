"""Test doubles and builders shared by the test modules."""

import json
from datetime import datetime, timedelta, timezone

import httpx

from app.schemas.usage_record import RecordStatus, UsageRecord
from app.schemas.vehicle import Vehicle, VehicleStatus
from app.services.remote_store import RemoteStoreClient

REMOTE_URL = "https://store.test/document"
NETWORK_ID = "FLEET-TEST1"


class FakeRemote:
    """Stands in for the shared JSON document behind an httpx.MockTransport."""

    def __init__(self, document=None):
        self.document = document if document is not None else {}
        self.fail_reads = False
        self.fail_writes = False
        self.read_status = 200
        self.raw_body = None
        self.requests = []
        self.on_request = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.on_request:
            self.on_request(request)
        if request.method == "GET":
            if self.fail_reads:
                raise httpx.ConnectError("offline", request=request)
            if self.raw_body is not None:
                return httpx.Response(self.read_status, content=self.raw_body)
            return httpx.Response(self.read_status, json=self.document)
        if self.fail_writes:
            raise httpx.ConnectError("offline", request=request)
        self.document = json.loads(request.content)
        return httpx.Response(200, json=self.document)

    @property
    def reads(self) -> int:
        return sum(1 for r in self.requests if r.method == "GET")

    @property
    def writes(self) -> int:
        return sum(1 for r in self.requests if r.method == "POST")

    def client(self, max_retries: int = 1) -> RemoteStoreClient:
        return RemoteStoreClient(
            url=REMOTE_URL,
            timeout=1,
            max_retries=max_retries,
            retry_backoff=0,
            transport=httpx.MockTransport(self.handler),
        )

    def seed(self, network_id, vehicles, records=(), revision=1):
        self.document[network_id] = {
            "vehicles": [v.to_wire() for v in vehicles],
            "records": [r.to_wire() for r in records],
            "lastUpdate": "2026-10-19T08:00:00Z",
            "revision": revision,
        }

    def partition(self, network_id=NETWORK_ID) -> dict:
        return self.document[network_id]


def make_vehicle(vehicle_id="V1", status=VehicleStatus.AVAILABLE, name="Toyota Innova", plate="B 1000 XY"):
    return Vehicle(id=vehicle_id, name=name, plate_number=plate, status=status)


def make_record(record_id="R1", vehicle_id="V1", status=RecordStatus.PENDING,
                start_odometer=1000, driver="Budi", requested_at=None):
    departure = datetime(2026, 10, 19, 8, 0, tzinfo=timezone.utc)
    return UsageRecord(
        id=record_id,
        vehicle_id=vehicle_id,
        vehicle_name="Toyota Innova (B 1000 XY)",
        driver_name=driver,
        department="Finance",
        purpose="Client visit",
        destination="Site A",
        departure_time=departure,
        estimated_arrival_time=departure + timedelta(hours=2),
        start_odometer=start_odometer,
        status=status,
        request_date=requested_at or departure,
    )
