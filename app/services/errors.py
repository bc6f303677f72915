# app/services/errors.py
"""
Domain errors raised by the sync layer.
Routers translate these into HTTP status codes; the scheduled pull swallows
RemoteUnavailable and records it in the sync status instead.
"""


class FleetSyncError(Exception):
    """Base class for every error raised by the sync layer."""


class RemoteUnavailable(FleetSyncError):
    """Shared document unreachable: network error, timeout or non-2xx status."""


class MalformedRemoteDocument(RemoteUnavailable):
    """Shared document could not be parsed or does not have the expected shape."""


class WriteConflict(FleetSyncError):
    """Partition revision changed between our read and our write."""

    def __init__(self, network_id: str, expected: int, actual: int):
        self.network_id = network_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Partition {network_id} moved from revision {expected} to {actual}"
        )


class VehicleUnavailable(FleetSyncError):
    """Booking target is missing or no longer available."""

    def __init__(self, vehicle_id: str, status: str | None = None, held_by: str | None = None):
        self.vehicle_id = vehicle_id
        self.status = status
        self.held_by = held_by
        if held_by:
            reason = f"held by open record {held_by}"
        else:
            reason = f"status is {status}" if status else "not found"
        super().__init__(f"Vehicle {vehicle_id} cannot be booked ({reason})")


class InvalidCompletion(FleetSyncError):
    """End-of-trip data rejected before commit."""


class InvalidExtension(FleetSyncError):
    """Trip extension rejected before commit."""
