"""Unit tests for the shared-document client."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest
from app.schemas.vehicle import VehicleStatus
from app.services.errors import MalformedRemoteDocument, RemoteUnavailable, WriteConflict
from app.services.remote_store import RemoteStoreClient
from tests.factories import NETWORK_ID, FakeRemote, make_record, make_vehicle


class TestFetchPartition:
    @pytest.mark.asyncio
    async def test_missing_partition_returns_none(self, remote):
        remote.document = {"OTHER-NET": {"vehicles": [], "records": [], "revision": 3}}
        assert await remote.client().fetch_partition(NETWORK_ID) is None

    @pytest.mark.asyncio
    async def test_partition_parsed_from_camel_case(self, remote):
        remote.seed(NETWORK_ID, [make_vehicle(status=VehicleStatus.REQUESTED)], [make_record()], revision=7)

        partition = await remote.client().fetch_partition(NETWORK_ID)

        assert partition.revision == 7
        assert partition.vehicles[0].plate_number == "B 1000 XY"
        assert partition.vehicles[0].status == VehicleStatus.REQUESTED
        assert partition.records[0].driver_name == "Budi"
        assert partition.records[0].start_odometer == 1000

    @pytest.mark.asyncio
    async def test_read_bypasses_caches(self, remote):
        await remote.client().fetch_partition(NETWORK_ID)

        request = remote.requests[0]
        assert "cb" in request.url.params
        assert "no-cache" in request.headers["Cache-Control"]
        assert request.headers["Pragma"] == "no-cache"

    @pytest.mark.asyncio
    async def test_empty_body_is_an_empty_document(self, remote):
        remote.raw_body = b""
        assert await remote.client().fetch_partition(NETWORK_ID) is None

    @pytest.mark.asyncio
    async def test_non_object_document_is_malformed(self, remote):
        remote.raw_body = b"[1, 2, 3]"
        with pytest.raises(MalformedRemoteDocument):
            await remote.client().fetch_partition(NETWORK_ID)

    @pytest.mark.asyncio
    async def test_broken_partition_shape_is_malformed(self, remote):
        remote.document = {NETWORK_ID: {"vehicles": "not-a-list"}}
        with pytest.raises(RemoteUnavailable) as exc_info:
            await remote.client().fetch_partition(NETWORK_ID)
        assert isinstance(exc_info.value, MalformedRemoteDocument)


class TestRetries:
    @pytest.mark.asyncio
    async def test_gives_up_after_bounded_retries(self, remote):
        remote.fail_reads = True

        with pytest.raises(RemoteUnavailable):
            await remote.client(max_retries=2).fetch_partition(NETWORK_ID)

        assert remote.reads == 3

    @pytest.mark.asyncio
    async def test_recovers_when_a_retry_succeeds(self):
        remote = FakeRemote()
        remote.seed(NETWORK_ID, [make_vehicle()])
        attempts = {"n": 0}

        def flaky(request):
            attempts["n"] += 1
            if attempts["n"] == 1:
                raise httpx.ReadTimeout("slow", request=request)

        remote.on_request = flaky
        partition = await remote.client(max_retries=2).fetch_partition(NETWORK_ID)

        assert partition is not None
        assert attempts["n"] == 2

    @pytest.mark.asyncio
    async def test_error_status_is_retryable_failure(self, remote):
        remote.read_status = 502
        with pytest.raises(RemoteUnavailable):
            await remote.client(max_retries=1).fetch_partition(NETWORK_ID)
        assert remote.reads == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [httpx.TooManyRedirects, httpx.DecodingError, httpx.RemoteProtocolError])
    async def test_any_http_error_is_remote_unavailable(self, remote, error):
        def fail(request):
            raise error("broken", request=request)

        remote.on_request = fail

        with pytest.raises(RemoteUnavailable):
            await remote.client(max_retries=1).fetch_partition(NETWORK_ID)
        assert remote.reads == 2

    @pytest.mark.asyncio
    async def test_unsupported_url_is_remote_unavailable(self):
        client = RemoteStoreClient(url="ftp://store.test/document", timeout=1, max_retries=0, retry_backoff=0)
        with pytest.raises(RemoteUnavailable):
            await client.fetch_partition(NETWORK_ID)


class TestWritePartition:
    @pytest.mark.asyncio
    async def test_other_partitions_untouched(self, remote):
        other = {"vehicles": [{"id": "X", "name": "Other", "plateNumber": "Z 1", "status": "on-duty"}],
                 "records": [], "lastUpdate": "2026-01-01T00:00:00Z", "revision": 12}
        remote.document = {"OTHER-NET": other}

        await remote.client().write_partition(NETWORK_ID, [make_vehicle()], [make_record()])

        assert remote.document["OTHER-NET"] == other
        assert remote.partition()["vehicles"][0]["id"] == "V1"
        assert remote.partition()["records"][0]["driverName"] == "Budi"

    @pytest.mark.asyncio
    async def test_revision_increments_and_timestamp_set(self, remote):
        remote.seed(NETWORK_ID, [make_vehicle()], revision=4)

        revision = await remote.client().write_partition(NETWORK_ID, [make_vehicle()], [], expected_revision=4)

        assert revision == 5
        assert remote.partition()["revision"] == 5
        assert remote.partition()["lastUpdate"] != "2026-10-19T08:00:00Z"

    @pytest.mark.asyncio
    async def test_stale_revision_rejected_without_posting(self, remote):
        remote.seed(NETWORK_ID, [make_vehicle()], revision=9)

        with pytest.raises(WriteConflict) as exc_info:
            await remote.client().write_partition(NETWORK_ID, [], [], expected_revision=8)

        assert exc_info.value.actual == 9
        assert remote.writes == 0
        assert len(remote.partition()["vehicles"]) == 1

    @pytest.mark.asyncio
    async def test_failed_fresh_read_never_posts(self, remote):
        remote.document = {"OTHER-NET": {"vehicles": [], "records": []}}
        remote.fail_reads = True

        with pytest.raises(RemoteUnavailable):
            await remote.client().write_partition(NETWORK_ID, [make_vehicle()], [])

        assert remote.writes == 0
        assert "OTHER-NET" in remote.document

    @pytest.mark.asyncio
    async def test_failed_post_surfaces_remote_unavailable(self, remote):
        remote.fail_writes = True
        with pytest.raises(RemoteUnavailable):
            await remote.client(max_retries=1).write_partition(NETWORK_ID, [make_vehicle()], [])
        assert remote.writes == 2
