from __future__ import annotations

import asyncio
import json
from typing import Callable, List

import httpx
import pytest

from dataset_controller.clients.dataset_api import DatasetAPIClient
from dataset_controller.clients.http_utils import PreconditionFailed, ServiceClientError
from dataset_controller.clients.topics import TopicsClient
from dataset_controller.clients.zebedee import ZebedeeClient
from dataset_controller.models import Dataset, EditableMetadata, Instance

from .conftest import ACCESS_TOKEN, COLLECTION_ID

AUTH = {"access_token": ACCESS_TOKEN, "collection_id": COLLECTION_ID}


def _http(handler: Callable[[httpx.Request], httpx.Response], base_url: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, transport=httpx.MockTransport(handler))


class TestDatasetAPIPagination:
    async def test_pages_are_stitched_in_offset_order(self):
        seen: List[httpx.Request] = []
        total = 5

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            offset = int(request.url.params["offset"])
            limit = int(request.url.params["limit"])
            items = [
                {"id": f"ds-{i}", "next": {"id": f"ds-{i}", "title": f"title {i}"}}
                for i in range(offset, min(offset + limit, total))
            ]
            return httpx.Response(200, json={"items": items, "count": len(items), "total_count": total})

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        datasets = await client.get_datasets_in_batches(**AUTH, batch_size=2, max_workers=2)

        assert [d.id for d in datasets] == ["ds-0", "ds-1", "ds-2", "ds-3", "ds-4"]
        assert sorted(int(r.url.params["offset"]) for r in seen) == [0, 2, 4]
        assert all(r.url.path == "/datasets" for r in seen)
        assert seen[0].headers["Authorization"] == f"Bearer {ACCESS_TOKEN}"
        assert seen[0].headers["Collection-Id"] == COLLECTION_ID

    async def test_single_page(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"items": [{"id": "v1", "version": 1}], "total_count": 1})

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        versions = await client.get_versions_in_batches("ds", "ed", **AUTH, batch_size=10, max_workers=3)

        assert [v.version for v in versions] == [1]
        assert len(calls) == 1
        assert calls[0].url.path == "/datasets/ds/editions/ed/versions"

    async def test_failing_page_fails_the_listing(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["offset"] == "2":
                return httpx.Response(500, text="boom")
            return httpx.Response(200, json={"items": [{"id": "x"}, {"id": "y"}], "total_count": 6})

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        with pytest.raises(ServiceClientError) as exc:
            await client.get_datasets_in_batches(**AUTH, batch_size=2, max_workers=1)
        assert exc.value.status == 500

    async def test_in_flight_pages_bounded_by_workers(self):
        in_flight = 0
        peak = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal in_flight, peak
            offset = int(request.url.params["offset"])
            in_flight += 1
            peak = max(peak, in_flight)
            try:
                await asyncio.sleep(0.01)
            finally:
                in_flight -= 1
            return httpx.Response(200, json={"items": [{"id": f"ds-{offset}"}], "total_count": 10})

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        datasets = await client.get_datasets_in_batches(**AUTH, batch_size=1, max_workers=3)

        assert [d.id for d in datasets] == [f"ds-{i}" for i in range(10)]
        assert peak == 3

    async def test_failing_page_cancels_pages_in_flight(self):
        started: List[str] = []
        cancelled: List[str] = []
        others_started = asyncio.Event()

        async def handler(request: httpx.Request) -> httpx.Response:
            offset = request.url.params["offset"]
            if offset == "0":
                return httpx.Response(200, json={"items": [{"id": "first"}], "total_count": 4})
            if offset == "1":
                await others_started.wait()
                return httpx.Response(500, text="boom")
            started.append(offset)
            if len(started) == 2:
                others_started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(offset)
                raise
            return httpx.Response(200, json={"items": []})

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        with pytest.raises(ServiceClientError) as exc:
            await asyncio.wait_for(
                client.get_datasets_in_batches(**AUTH, batch_size=1, max_workers=3), timeout=5
            )

        assert exc.value.status == 500
        assert sorted(cancelled) == ["2", "3"]

    async def test_cancelling_the_listing_cancels_page_fetches(self):
        cancelled: List[str] = []
        all_started = asyncio.Event()
        started: List[str] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            offset = request.url.params["offset"]
            if offset == "0":
                return httpx.Response(200, json={"items": [{"id": "first"}], "total_count": 3})
            started.append(offset)
            if len(started) == 2:
                all_started.set()
            try:
                await asyncio.Event().wait()
            except asyncio.CancelledError:
                cancelled.append(offset)
                raise
            return httpx.Response(200, json={"items": []})

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        listing = asyncio.create_task(client.get_datasets_in_batches(**AUTH, batch_size=1, max_workers=5))
        await asyncio.wait_for(all_started.wait(), timeout=5)

        listing.cancel()
        with pytest.raises(asyncio.CancelledError):
            await listing

        assert sorted(cancelled) == ["1", "2"]


class TestDatasetAPIClient:
    async def test_version_with_etag(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/datasets/ds/editions/ed/versions/2"
            return httpx.Response(
                200, json={"id": "v2", "version": 2, "state": "edition-confirmed"}, headers={"ETag": "etag-2"}
            )

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        version, etag = await client.get_version_with_etag("ds", "ed", "2", **AUTH)

        assert version.id == "v2"
        assert version.state == "edition-confirmed"
        assert etag == "etag-2"

    async def test_not_found(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, text="version not found")

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        with pytest.raises(ServiceClientError) as exc:
            await client.get_version("ds", "ed", "9", **AUTH)
        assert exc.value.not_found

    async def test_transport_failure_has_status_zero(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        with pytest.raises(ServiceClientError) as exc:
            await client.get_editions("ds", **AUTH)
        assert exc.value.status == 0

    async def test_put_metadata_sends_if_match(self):
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        await client.put_metadata(
            "ds", "ed", "1", EditableMetadata(title="new title"), **AUTH, version_etag="etag-1"
        )

        (req,) = seen
        assert req.method == "PUT"
        assert req.url.path == "/datasets/ds/editions/ed/versions/1/metadata"
        assert req.headers["If-Match"] == "etag-1"
        assert json.loads(req.content)["title"] == "new title"

    async def test_stale_etag_is_precondition_failed(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(412, text="etag mismatch")

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        with pytest.raises(PreconditionFailed):
            await client.put_metadata("ds", "ed", "1", EditableMetadata(), **AUTH, version_etag="stale")

    async def test_put_dataset_omits_unset_fields(self):
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        await client.put_dataset("ds", Dataset(id="ds", title="title"), **AUTH)

        assert seen[0].url.path == "/datasets/ds"
        assert json.loads(seen[0].content) == {"id": "ds", "title": "title"}

    async def test_put_instance_returns_etag(self):
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, headers={"ETag": "instance-etag"})

        client = DatasetAPIClient("http://dataset-api", http_client=_http(handler, "http://dataset-api"))
        etag = await client.put_instance("inst-1", Instance(state="edition-confirmed"), **AUTH, if_match="*")

        assert etag == "instance-etag"
        assert seen[0].url.path == "/instances/inst-1"
        assert seen[0].headers["If-Match"] == "*"


class TestZebedeeClient:
    async def test_get_collection(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == f"/collectionDetails/{COLLECTION_ID}"
            assert request.headers["X-Florence-Token"] == ACCESS_TOKEN
            return httpx.Response(200, json={
                "id": COLLECTION_ID,
                "datasets": [{"id": "ds", "state": "inProgress", "lastEditedBy": "editor@ons.gov.uk"}],
            })

        client = ZebedeeClient("http://zebedee", http_client=_http(handler, "http://zebedee"))
        collection = await client.get_collection(ACCESS_TOKEN, COLLECTION_ID)

        item = collection.dataset_item("ds")
        assert item is not None
        assert item.last_edited_by == "editor@ons.gov.uk"

    async def test_state_changes(self):
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        client = ZebedeeClient("http://zebedee", http_client=_http(handler, "http://zebedee"))
        await client.put_dataset_in_collection(ACCESS_TOKEN, COLLECTION_ID, "", "ds", "InProgress")
        await client.put_dataset_version_in_collection(
            ACCESS_TOKEN, COLLECTION_ID, "cy", "ds", "ed", "1", "Complete"
        )

        first, second = seen
        assert first.url.path == f"/collections/{COLLECTION_ID}/datasets/ds"
        assert "lang" not in first.url.params
        assert json.loads(first.content) == {"state": "InProgress"}
        assert second.url.path == f"/collections/{COLLECTION_ID}/datasets/ds/editions/ed/versions/1"
        assert second.url.params["lang"] == "cy"
        assert json.loads(second.content) == {"state": "Complete"}
        assert all(r.headers["X-Florence-Token"] == ACCESS_TOKEN for r in seen)


async def test_topics_client():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/topics"
        return httpx.Response(200, json={"topics": {"results": [{"description": {"title": "Economy"}}]}})

    client = TopicsClient("http://babbage", http_client=_http(handler, "http://babbage"))
    result = await client.get_topics(ACCESS_TOKEN)

    assert [r.description.title for r in result.topics.results] == ["Economy"]
