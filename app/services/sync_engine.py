# app/services/sync_engine.py
"""
Sync engine: keeps in-memory state, the local cache and the remote partition
converging. It owns the single read path (sync) and the single write path
(apply / commit) used by bookings and lifecycle operations.

Policy:
  - Pull: remote wins. A present partition overwrites memory and the cache.
  - Push: optimistic. Memory and cache are updated first; a failed remote
    write is reported (synced=False) but not rolled back.
  - Revision check: writes carry the last revision we saw. If someone else
    wrote in between, the engine resyncs and raises WriteConflict. Until a
    first successful pull there is no revision to check against, so nothing
    is pushed; operations pull first and stay local if that pull fails.
  - Errors: RemoteUnavailable never escapes a pull; it becomes the sticky
    `error` flag, cleared by the next successful pull.

Pulls and mutations are serialised on one asyncio.Lock, so a scheduled tick
never lands between an operation's snapshot and its commit.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from app.config import settings
from app.schemas.base import utc_now
from app.schemas.partition import Partition
from app.schemas.usage_record import UsageRecord
from app.schemas.vehicle import Vehicle
from app.services.errors import RemoteUnavailable, WriteConflict
from app.services.local_cache import LocalCache
from app.services.remote_store import RemoteStoreClient
from app.session import SessionConfig
from app.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class Change:
    """New (vehicles, records) pair computed by an operation, plus what it touched."""
    vehicles: list[Vehicle]
    records: list[UsageRecord]
    record: Optional[UsageRecord] = None
    vehicle: Optional[Vehicle] = None


@dataclass
class OperationResult:
    record: Optional[UsageRecord]
    vehicle: Optional[Vehicle]
    synced: bool        # False when the remote write failed and only local state changed


ChangeFn = Callable[[list[Vehicle], list[UsageRecord]], Optional[Change]]


class SyncEngine:
    def __init__(
        self,
        session: SessionConfig,
        remote: RemoteStoreClient,
        cache: LocalCache,
        interval: Optional[float] = None,
        conflict_check: Optional[bool] = None,
    ):
        self.session = session
        self.remote = remote
        self.cache = cache
        self.interval = settings.SYNC_INTERVAL_SECONDS if interval is None else interval
        self.conflict_check = settings.WRITE_CONFLICT_CHECK if conflict_check is None else conflict_check

        self.vehicles, self.records = cache.load(session.network_id)
        self.revision: Optional[int] = None       # unknown until the first successful pull
        self.is_syncing = False
        self.last_synced: Optional[datetime] = None
        self.error: Optional[str] = None

        self._lock = asyncio.Lock()
        self._task: Optional[asyncio.Task] = None

    @property
    def network_id(self) -> str:
        return self.session.network_id

    def snapshot(self) -> tuple[list[Vehicle], list[UsageRecord]]:
        return list(self.vehicles), list(self.records)

    # ── Pull ──────────────────────────────────────────────────────────────
    async def sync(self, silent: bool = False) -> bool:
        """
        Pull the remote partition and make it the local truth.
        Returns True on success. `silent` only skips the is_syncing indicator.
        """
        if not silent:
            self.is_syncing = True
        try:
            async with self._lock:
                return await self._pull()
        finally:
            if not silent:
                self.is_syncing = False

    async def _pull(self) -> bool:
        try:
            partition = await self.remote.fetch_partition(self.network_id)
        except RemoteUnavailable as e:
            self.mark_unavailable(e)
            return False

        if partition is not None:
            self._adopt(partition)
        else:
            # Nobody has written this office yet; keep local data, baseline revision 0
            self.revision = 0
        self.last_synced = utc_now()
        if self.error:
            logger.info(f"✅ Remote reachable again for {self.network_id}")
        self.error = None
        return True

    def _adopt(self, partition: Partition):
        self.vehicles = list(partition.vehicles)
        self.records = list(partition.records)
        self.revision = partition.revision
        self.cache.save(self.network_id, self.vehicles, self.records)
        logger.debug(
            f"[SYNC] {self.network_id} rev={partition.revision}: "
            f"{len(self.vehicles)} vehicles, {len(self.records)} records"
        )

    def mark_unavailable(self, error: Exception):
        self.error = str(error)
        logger.warning(f"📴 Remote unavailable for {self.network_id}: {error}")

    # ── Push ──────────────────────────────────────────────────────────────
    async def commit(
        self,
        vehicles: list[Vehicle],
        records: list[UsageRecord],
        expected_revision: Optional[int] = None,
    ) -> bool:
        """Optimistically adopt a new (vehicles, records) pair and push it."""
        async with self._lock:
            return await self._push(vehicles, records, expected_revision)

    async def apply(self, change: ChangeFn, fresh: bool = False) -> Optional[OperationResult]:
        """
        Compute a change against current state and commit it atomically with
        respect to other local operations and scheduled pulls.

        With fresh=True the base state is read straight from the remote store
        instead of memory, and the write expects that read's revision.
        `change` may raise to abort; returning None means "nothing to do".
        """
        async with self._lock:
            if fresh:
                try:
                    partition = await self.remote.fetch_partition(self.network_id)
                except RemoteUnavailable as e:
                    self.mark_unavailable(e)
                    raise
                if partition is None:
                    vehicles, records = self.snapshot()
                    base_revision = 0
                else:
                    vehicles, records = list(partition.vehicles), list(partition.records)
                    base_revision = partition.revision
            else:
                if self.conflict_check and self.revision is None:
                    # No baseline revision yet; catch up before computing against memory
                    await self._pull()
                vehicles, records = self.snapshot()
                base_revision = self.revision

            outcome = change(vehicles, records)
            if outcome is None:
                return None
            synced = await self._push(outcome.vehicles, outcome.records, base_revision)
            return OperationResult(record=outcome.record, vehicle=outcome.vehicle, synced=synced)

    async def _push(self, vehicles, records, expected_revision: Optional[int]) -> bool:
        self.vehicles = list(vehicles)
        self.records = list(records)
        self.cache.save(self.network_id, self.vehicles, self.records)

        if expected_revision is None:
            expected_revision = self.revision
        if not self.conflict_check:
            expected_revision = None
        elif expected_revision is None:
            # Never post without a baseline revision
            self.error = "Remote revision unknown; change kept locally and not pushed"
            logger.warning(f"⏸  Not pushing {self.network_id}: no successful pull yet")
            return False

        try:
            self.revision = await self.remote.write_partition(
                self.network_id, self.vehicles, self.records,
                expected_revision=expected_revision,
            )
            return True
        except WriteConflict:
            logger.warning(f"🔁 Concurrent write detected on {self.network_id}; resyncing")
            await self._pull()
            raise
        except RemoteUnavailable as e:
            self.mark_unavailable(e)
            return False

    # ── Scheduled pull ────────────────────────────────────────────────────
    def start(self) -> asyncio.Task:
        """Begin pulling now and then every `interval` seconds."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run_schedule(), name=f"sync-{self.network_id}")
        return self._task

    async def _run_schedule(self):
        logger.info(f"📡 Scheduled sync for {self.network_id} every {self.interval}s")
        while True:
            try:
                # Shielded so teardown stops the timer without aborting a pull mid-flight
                await asyncio.shield(self.sync(silent=True))
            except Exception as e:
                logger.error(f"❌ Scheduled sync error: {e}", exc_info=True)
            await asyncio.sleep(self.interval)

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"🛑 Scheduled sync for {self.network_id} stopped")

    def status(self) -> dict:
        return {
            "network_id": self.network_id,
            "is_syncing": self.is_syncing,
            "last_synced": self.last_synced,
            "error": self.error,
            "revision": self.revision,
            "vehicle_count": len(self.vehicles),
            "record_count": len(self.records),
        }
