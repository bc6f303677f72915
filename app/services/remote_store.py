# app/services/remote_store.py
"""
Remote store client: reads and writes the single shared JSON document.

Document shape:
    { "<networkId>": { "vehicles": [...], "records": [...],
                       "lastUpdate": "<ISO-8601>", "revision": <int> }, ... }

Read:  GET with a cache-busting query parameter and no-cache headers.
Write: GET the whole document, replace one network's entry, POST it back.
The read-modify-write is not atomic; the revision counter turns a lost update
on the same partition into a WriteConflict instead of silent data loss.
Partitions belonging to other networks are copied through untouched.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, TypeVar

import httpx
from pydantic import ValidationError

from app.config import settings
from app.schemas.base import utc_now
from app.schemas.partition import Partition
from app.schemas.usage_record import UsageRecord
from app.schemas.vehicle import Vehicle
from app.services.errors import MalformedRemoteDocument, RemoteUnavailable, WriteConflict
from app.utils.json_parser import is_json_object, safe_parse_json
from app.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

_NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store",
    "Pragma": "no-cache",
}


def _revision_of(entry) -> int:
    if isinstance(entry, dict):
        revision = entry.get("revision")
        if isinstance(revision, int) and not isinstance(revision, bool):
            return revision
    return 0


class RemoteStoreClient:
    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        retry_backoff: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or settings.REMOTE_DOCUMENT_URL
        self.timeout = settings.REMOTE_TIMEOUT_SECONDS if timeout is None else timeout
        self.max_retries = settings.REMOTE_MAX_RETRIES if max_retries is None else max_retries
        self.retry_backoff = settings.REMOTE_RETRY_BACKOFF_SECONDS if retry_backoff is None else retry_backoff
        self._transport = transport

    # ── Public API ────────────────────────────────────────────────────────
    async def fetch_partition(self, network_id: str) -> Optional[Partition]:
        """
        Fresh read of one network's partition.
        Returns None when the partition does not exist yet.
        Raises RemoteUnavailable (or MalformedRemoteDocument) once retries are exhausted.
        """
        document = await self._with_retries("read", self._get_document)
        entry = document.get(network_id)
        if entry is None:
            logger.info(f"[REMOTE] No partition yet for {network_id}")
            return None
        return self._parse_partition(network_id, entry)

    async def write_partition(
        self,
        network_id: str,
        vehicles: list[Vehicle],
        records: list[UsageRecord],
        expected_revision: Optional[int] = None,
    ) -> int:
        """
        Replace one partition in the shared document and return its new revision.
        When expected_revision is given and the stored revision differs, nothing
        is written and WriteConflict is raised.
        """
        document = await self._with_retries("read", self._get_document)
        current_revision = _revision_of(document.get(network_id))
        if expected_revision is not None and current_revision != expected_revision:
            logger.warning(
                f"[REMOTE] Write to {network_id} rejected: expected revision "
                f"{expected_revision}, found {current_revision}"
            )
            raise WriteConflict(network_id, expected_revision, current_revision)

        new_revision = current_revision + 1
        document[network_id] = Partition(
            vehicles=vehicles,
            records=records,
            last_update=utc_now(),
            revision=new_revision,
        ).to_wire()

        await self._with_retries("write", lambda: self._post_document(document))
        logger.info(
            f"[REMOTE] Wrote {network_id} rev={new_revision} "
            f"({len(vehicles)} vehicles, {len(records)} records)"
        )
        return new_revision

    # ── HTTP ──────────────────────────────────────────────────────────────
    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def _get_document(self) -> dict:
        async with self._client() as client:
            response = await client.get(
                self.url,
                params={"cb": int(time.time() * 1000)},
                headers=_NO_CACHE_HEADERS,
            )
            response.raise_for_status()
            return self._decode_document(response.content)

    async def _post_document(self, document: dict) -> None:
        async with self._client() as client:
            response = await client.post(self.url, json=document)
            response.raise_for_status()

    async def _with_retries(self, action: str, call: Callable[[], Awaitable[T]]) -> T:
        attempts = self.max_retries + 1
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                return await call()
            except httpx.TimeoutException as e:
                last_error = e
                logger.warning(f"⏱  Remote {action} timed out (attempt {attempt}/{attempts})")
            except httpx.HTTPStatusError as e:
                last_error = e
                logger.warning(
                    f"⚠️  Remote {action} returned HTTP {e.response.status_code} "
                    f"(attempt {attempt}/{attempts})"
                )
            except (httpx.HTTPError, httpx.InvalidURL) as e:
                last_error = e
                logger.warning(f"❌ Remote {action} failed: {e!r} (attempt {attempt}/{attempts})")
            if attempt < attempts:
                await asyncio.sleep(self.retry_backoff)
        raise RemoteUnavailable(f"Remote {action} failed after {attempts} attempts: {last_error!r}")

    # ── Decoding ──────────────────────────────────────────────────────────
    @staticmethod
    def _decode_document(raw_body: bytes) -> dict:
        if not raw_body.strip():
            return {}
        if not is_json_object(raw_body):
            raise MalformedRemoteDocument("Shared document is not a JSON object")
        document = safe_parse_json(raw_body)
        if not isinstance(document, dict):
            raise MalformedRemoteDocument("Shared document could not be decoded")
        return document

    @staticmethod
    def _parse_partition(network_id: str, entry) -> Partition:
        if not isinstance(entry, dict):
            raise MalformedRemoteDocument(f"Partition {network_id} is not an object")
        try:
            return Partition.model_validate(entry)
        except ValidationError as e:
            raise MalformedRemoteDocument(f"Partition {network_id} has unexpected shape: {e}") from e
