# services/publishing-dataset-controller/dataset_controller/clients/zebedee.py
from __future__ import annotations

from typing import Dict, Optional

import httpx

from dataset_controller.config import settings
from dataset_controller.clients.http_utils import get_http_client, retryable_get, send
from dataset_controller.models import Collection



def _florence_headers(access_token: str) -> Dict[str, str]:
    return {"X-Florence-Token": access_token}


class ZebedeeClient:
    """
    Thin async client for zebedee, the collection/workflow store.
    Implements the CollectionStore protocol.
    """

    def __init__(self, base_url: Optional[str] = None, *, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url or settings.zebedee_url
        self.service_name = "zebedee"
        self._http_client = http_client

    async def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return await get_http_client(self.base_url)

    @retryable_get
    async def get_collection(self, access_token: str, collection_id: str) -> Collection:
        """
        GET /collectionDetails/{collection_id}
        """
        client = await self._client()
        resp = await send(
            self.service_name, client, "GET", f"/collectionDetails/{collection_id}",
            headers=_florence_headers(access_token),
        )
        return Collection.model_validate(resp.json())

    async def put_dataset_in_collection(
        self, access_token: str, collection_id: str, lang: str, dataset_id: str, state: str
    ) -> None:
        """
        PUT /collections/{collection_id}/datasets/{dataset_id}?lang=
        """
        client = await self._client()
        await send(
            self.service_name, client, "PUT", f"/collections/{collection_id}/datasets/{dataset_id}",
            params={"lang": lang} if lang else None,
            json={"state": state},
            headers=_florence_headers(access_token),
        )

    async def put_dataset_version_in_collection(
        self,
        access_token: str,
        collection_id: str,
        lang: str,
        dataset_id: str,
        edition: str,
        version: str,
        state: str,
    ) -> None:
        """
        PUT /collections/{collection_id}/datasets/{dataset_id}/editions/{edition}/versions/{version}?lang=
        """
        client = await self._client()
        url = f"/collections/{collection_id}/datasets/{dataset_id}/editions/{edition}/versions/{version}"
        await send(
            self.service_name, client, "PUT", url,
            params={"lang": lang} if lang else None,
            json={"state": state},
            headers=_florence_headers(access_token),
        )
