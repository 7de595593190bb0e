# services/publishing-dataset-controller/dataset_controller/clients/topics.py
from __future__ import annotations

from typing import Optional

import httpx

from dataset_controller.config import settings
from dataset_controller.clients.http_utils import get_http_client, retryable_get, send
from dataset_controller.models import TopicsResult



class TopicsClient:
    """
    Thin async client for the topics taxonomy served by babbage.
    Implements the TopicsTaxonomy protocol.
    """

    def __init__(self, base_url: Optional[str] = None, *, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.base_url = base_url or settings.babbage_url
        self.service_name = "babbage"
        self._http_client = http_client

    async def _client(self) -> httpx.AsyncClient:
        if self._http_client is not None:
            return self._http_client
        return await get_http_client(self.base_url)

    @retryable_get
    async def get_topics(self, access_token: str) -> TopicsResult:
        """
        GET /topics
        """
        client = await self._client()
        resp = await send(
            self.service_name, client, "GET", "/topics",
            headers={"X-Florence-Token": access_token},
        )
        return TopicsResult.model_validate(resp.json())
