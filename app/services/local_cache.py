# app/services/local_cache.py
"""
Local cache: durable mirror of the last known-good partition for this client.

Used as the initial state before the first successful remote read and as the
fallback when the shared document is unreachable. No expiry, no versioning,
last write wins. Storage or decoding errors are logged and treated as
"nothing cached", so callers always get something to display.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError

from app.database import SessionLocal
from app.models.cache_entry import CacheEntry, SESSION_SCOPE
from app.schemas.usage_record import UsageRecord
from app.schemas.vehicle import Vehicle, VehicleStatus
from app.utils.logger import get_logger

logger = get_logger(__name__)

_VEHICLES_KEY = "vehicles"
_RECORDS_KEY = "records"

_vehicle_list = TypeAdapter(list[Vehicle])
_record_list = TypeAdapter(list[UsageRecord])

DEFAULT_VEHICLES = [
    Vehicle(id="1", name="Toyota Innova", plate_number="B 1234 PLA", status=VehicleStatus.AVAILABLE),
    Vehicle(id="2", name="Toyota Avanza", plate_number="B 5678 PLA", status=VehicleStatus.AVAILABLE),
    Vehicle(id="3", name="Mitsubishi Xpander", plate_number="B 9012 PLA", status=VehicleStatus.AVAILABLE),
    Vehicle(id="4", name="BYD Atto 3", plate_number="B 3456 PLA", status=VehicleStatus.AVAILABLE),
]


def default_vehicles() -> list[Vehicle]:
    """Fresh copies of the built-in roster, safe for callers to mutate."""
    return [v.model_copy() for v in DEFAULT_VEHICLES]


class LocalCache:
    def __init__(self, session_factory=SessionLocal):
        self._session_factory = session_factory

    # ── Partition data ────────────────────────────────────────────────────
    def load(self, network_id: str) -> tuple[list[Vehicle], list[UsageRecord]]:
        """Cached (vehicles, records) for a network, or the default roster and no records."""
        vehicles = self._read(network_id, _VEHICLES_KEY, _vehicle_list)
        records = self._read(network_id, _RECORDS_KEY, _record_list)
        if vehicles is None:
            vehicles = default_vehicles()
        if records is None:
            records = []
        return vehicles, records

    def save(self, network_id: str, vehicles: list[Vehicle], records: list[UsageRecord]) -> None:
        self._write(network_id, {
            _VEHICLES_KEY: json.dumps([v.to_wire() for v in vehicles]),
            _RECORDS_KEY: json.dumps([r.to_wire() for r in records]),
        })

    # ── Session metadata ──────────────────────────────────────────────────
    def get_meta(self, key: str) -> Optional[str]:
        try:
            with self._session_factory() as db:
                row = db.query(CacheEntry).filter(
                    CacheEntry.scope == SESSION_SCOPE, CacheEntry.key == key
                ).first()
                return json.loads(row.payload) if row else None
        except (SQLAlchemyError, ValueError) as e:
            logger.warning(f"[CACHE] Could not read session value {key}: {e}")
            return None

    def set_meta(self, key: str, value: str) -> None:
        self._write(SESSION_SCOPE, {key: json.dumps(value)})

    # ── Internals ─────────────────────────────────────────────────────────
    def _read(self, scope: str, key: str, adapter: TypeAdapter):
        try:
            with self._session_factory() as db:
                row = db.query(CacheEntry).filter(
                    CacheEntry.scope == scope, CacheEntry.key == key
                ).first()
                if row is None:
                    return None
                return adapter.validate_json(row.payload)
        except (SQLAlchemyError, ValidationError, ValueError) as e:
            logger.warning(f"[CACHE] Ignoring unreadable {scope}/{key}: {e}")
            return None

    def _write(self, scope: str, payloads: dict[str, str]) -> None:
        now = datetime.now(timezone.utc)
        try:
            with self._session_factory() as db:
                for key, payload in payloads.items():
                    row = db.query(CacheEntry).filter(
                        CacheEntry.scope == scope, CacheEntry.key == key
                    ).first()
                    if row is None:
                        db.add(CacheEntry(scope=scope, key=key, payload=payload, updated_at=now))
                    else:
                        row.payload = payload
                        row.updated_at = now
                db.commit()
        except SQLAlchemyError as e:
            logger.error(f"[CACHE] Failed to persist {scope}: {e}")
