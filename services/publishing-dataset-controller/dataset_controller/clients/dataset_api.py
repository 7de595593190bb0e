# services/publishing-dataset-controller/dataset_controller/clients/dataset_api.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from dataset_controller.config import settings
from dataset_controller.clients.http_utils import _merge_headers, get_http_client, retryable_get, send
from dataset_controller.models import (
    Dataset,
    DatasetUpdate,
    EditableMetadata,
    Edition,
    Instance,
    Version,
)

logger = logging.getLogger("dataset_controller.clients.dataset_api")


def _dump(model) -> Dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


class DatasetAPIClient:
    """
    Thin async client for the dataset API (the dataset registry).
    Implements the DatasetRegistry protocol.
    """

    def __init__(self, base_url: Optional[str] = None, *, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url or settings.dataset_api_url
        self.service_name = "dataset-api"
        self._http_client = http_client

    async def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return await get_http_client(self.base_url)

    # --------- Pagination --------- #

    @retryable_get
    async def _get_page(
        self, url: str, *, offset: int, limit: int, headers: Optional[Dict[str, str]]
    ) -> Dict[str, Any]:
        client = await self._client()
        resp = await send(
            self.service_name, client, "GET", url,
            params={"offset": offset, "limit": limit}, headers=headers,
        )
        return resp.json()

    async def _get_in_batches(
        self, url: str, *, headers: Optional[Dict[str, str]], batch_size: int, max_workers: int
    ) -> List[Dict[str, Any]]:
        """
        Fetch the first page to learn total_count, then the remaining pages with
        at most `max_workers` requests in flight. Pages are stitched back together
        in offset order. A failing page cancels the pages still in flight.
        """
        batch_size = max(1, batch_size)
        first = await self._get_page(url, offset=0, limit=batch_size, headers=headers)
        items: List[Dict[str, Any]] = list(first.get("items") or [])
        total = int(first.get("total_count") or len(items))

        offsets = list(range(batch_size, total, batch_size))
        if not offsets:
            return items

        sem = asyncio.Semaphore(max(1, max_workers))

        async def fetch(offset: int) -> Dict[str, Any]:
            async with sem:
                return await self._get_page(url, offset=offset, limit=batch_size, headers=headers)

        tasks = [asyncio.create_task(fetch(o)) for o in offsets]
        try:
            pages = await asyncio.gather(*tasks)
        except BaseException:
            for t in tasks:
                t.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        for page in pages:
            items.extend(page.get("items") or [])
        logger.debug("fetched %d items from %s in %d batches", len(items), url, len(offsets) + 1)
        return items

    # --------- Datasets --------- #

    async def get_datasets_in_batches(
        self, *, access_token: str, collection_id: str, batch_size: int, max_workers: int
    ) -> List[DatasetUpdate]:
        """
        GET /datasets?offset=&limit=
        """
        headers = _merge_headers(access_token=access_token, collection_id=collection_id)
        items = await self._get_in_batches(
            "/datasets", headers=headers, batch_size=batch_size, max_workers=max_workers
        )
        return [DatasetUpdate.model_validate(i) for i in items]

    @retryable_get
    async def get_dataset_current_and_next(
        self, dataset_id: str, *, access_token: str, collection_id: str
    ) -> DatasetUpdate:
        """
        GET /datasets/{dataset_id}
        """
        client = await self._client()
        headers = _merge_headers(access_token=access_token, collection_id=collection_id)
        resp = await send(self.service_name, client, "GET", f"/datasets/{dataset_id}", headers=headers)
        return DatasetUpdate.model_validate(resp.json())

    async def put_dataset(
        self, dataset_id: str, dataset: Dataset, *, access_token: str, collection_id: str
    ) -> None:
        """
        PUT /datasets/{dataset_id}
        """
        client = await self._client()
        headers = _merge_headers(access_token=access_token, collection_id=collection_id)
        await send(self.service_name, client, "PUT", f"/datasets/{dataset_id}", json=_dump(dataset), headers=headers)

    # --------- Editions --------- #

    @retryable_get
    async def get_editions(
        self, dataset_id: str, *, access_token: str, collection_id: str
    ) -> List[Edition]:
        """
        GET /datasets/{dataset_id}/editions
        """
        client = await self._client()
        headers = _merge_headers(access_token=access_token, collection_id=collection_id)
        resp = await send(self.service_name, client, "GET", f"/datasets/{dataset_id}/editions", headers=headers)
        return [Edition.model_validate(i) for i in (resp.json().get("items") or [])]

    @retryable_get
    async def get_edition(
        self, dataset_id: str, edition: str, *, access_token: str, collection_id: str
    ) -> Edition:
        """
        GET /datasets/{dataset_id}/editions/{edition}
        """
        client = await self._client()
        headers = _merge_headers(access_token=access_token, collection_id=collection_id)
        resp = await send(
            self.service_name, client, "GET", f"/datasets/{dataset_id}/editions/{edition}", headers=headers
        )
        return Edition.model_validate(resp.json())

    # --------- Versions --------- #

    async def get_version(
        self, dataset_id: str, edition: str, version: str, *, access_token: str, collection_id: str
    ) -> Version:
        """
        GET /datasets/{dataset_id}/editions/{edition}/versions/{version}
        """
        v, _ = await self.get_version_with_etag(
            dataset_id, edition, version, access_token=access_token, collection_id=collection_id
        )
        return v

    @retryable_get
    async def get_version_with_etag(
        self, dataset_id: str, edition: str, version: str, *, access_token: str, collection_id: str
    ) -> Tuple[Version, str]:
        """
        GET /datasets/{dataset_id}/editions/{edition}/versions/{version}
        Returns the version and its ETag response header ("" when absent).
        """
        client = await self._client()
        headers = _merge_headers(access_token=access_token, collection_id=collection_id)
        url = f"/datasets/{dataset_id}/editions/{edition}/versions/{version}"
        resp = await send(self.service_name, client, "GET", url, headers=headers)
        return Version.model_validate(resp.json()), resp.headers.get("ETag", "")

    async def get_versions_in_batches(
        self,
        dataset_id: str,
        edition: str,
        *,
        access_token: str,
        collection_id: str,
        batch_size: int,
        max_workers: int,
    ) -> List[Version]:
        """
        GET /datasets/{dataset_id}/editions/{edition}/versions?offset=&limit=
        """
        headers = _merge_headers(access_token=access_token, collection_id=collection_id)
        items = await self._get_in_batches(
            f"/datasets/{dataset_id}/editions/{edition}/versions",
            headers=headers,
            batch_size=batch_size,
            max_workers=max_workers,
        )
        return [Version.model_validate(i) for i in items]

    async def put_version(
        self, dataset_id: str, edition: str, version: str, body: Version, *, access_token: str, collection_id: str
    ) -> Version:
        """
        PUT /datasets/{dataset_id}/editions/{edition}/versions/{version}
        """
        client = await self._client()
        headers = _merge_headers(access_token=access_token, collection_id=collection_id)
        url = f"/datasets/{dataset_id}/editions/{edition}/versions/{version}"
        resp = await send(self.service_name, client, "PUT", url, json=_dump(body), headers=headers)
        if not resp.content:
            return body
        return Version.model_validate(resp.json())

    async def put_metadata(
        self,
        dataset_id: str,
        edition: str,
        version: str,
        metadata: EditableMetadata,
        *,
        access_token: str,
        collection_id: str,
        version_etag: str,
    ) -> None:
        """
        PUT /datasets/{dataset_id}/editions/{edition}/versions/{version}/metadata
        Headers: If-Match <version_etag>; a stale ETag answers 412 (PreconditionFailed).
        """
        client = await self._client()
        headers = _merge_headers(
            access_token=access_token,
            collection_id=collection_id,
            extras={"If-Match": version_etag},
        )
        url = f"/datasets/{dataset_id}/editions/{edition}/versions/{version}/metadata"
        await send(self.service_name, client, "PUT", url, json=_dump(metadata), headers=headers)

    # --------- Instances --------- #

    async def put_instance(
        self, instance_id: str, instance: Instance, *, access_token: str, collection_id: str, if_match: str
    ) -> str:
        """
        PUT /instances/{instance_id}
        Headers: If-Match. Returns the new ETag.
        """
        client = await self._client()
        headers = _merge_headers(
            access_token=access_token,
            collection_id=collection_id,
            extras={"If-Match": if_match or None},
        )
        resp = await send(
            self.service_name, client, "PUT", f"/instances/{instance_id}", json=_dump(instance), headers=headers
        )
        return resp.headers.get("ETag", "")
