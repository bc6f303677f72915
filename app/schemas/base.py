# app/schemas/base.py
"""
Shared base for every model that travels through the shared JSON document.
Python attributes are snake_case; the wire format is camelCase.
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with parsed ISO timestamps."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class WireModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True

    def to_wire(self) -> dict:
        """Serialise with camelCase keys, ready for json.dumps."""
        return self.model_dump(by_alias=True, mode="json")
