# app/models/cache_entry.py
"""
Local cache table.
One row per (scope, key): scope is a network ID for the vehicle and record
lists, or SESSION_SCOPE for per-client metadata such as the resolved network ID.
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, UniqueConstraint
from app.database import Base

SESSION_SCOPE = "__session__"


class CacheEntry(Base):
    __tablename__ = "local_cache"
    __table_args__ = (UniqueConstraint("scope", "key", name="uq_local_cache_scope_key"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    scope = Column(String(100), nullable=False, index=True)
    key = Column(String(50), nullable=False)          # vehicles | records | network_id
    payload = Column(Text, nullable=False)            # JSON text
    updated_at = Column(DateTime)

    def __repr__(self):
        return f"<CacheEntry {self.scope}/{self.key}>"
