# services/publishing-dataset-controller/dataset_controller/api/deps.py
from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Request

from dataset_controller.config import settings
from dataset_controller.clients.base import CollectionStore, DatasetRegistry, TopicsTaxonomy
from dataset_controller.clients.dataset_api import DatasetAPIClient
from dataset_controller.clients.topics import TopicsClient
from dataset_controller.clients.zebedee import ZebedeeClient
from dataset_controller.services import DatasetCatalogueService, MetadataService

COLLECTION_ID_HEADER = "Collection-Id"
COLLECTION_ID_COOKIE = "collection"
ACCESS_TOKEN_HEADER = "X-Florence-Token"
ACCESS_TOKEN_COOKIE = "access_token"
LANG_COOKIE = "lang"


@dataclass
class RequestContext:
    collection_id: str
    access_token: str
    lang: str


def request_context(request: Request) -> RequestContext:
    """
    Identity of the caller as sent by the publishing UI: header first, cookie second.
    Missing values are left empty; the services decide whether that is an error.
    """
    return RequestContext(
        collection_id=request.headers.get(COLLECTION_ID_HEADER) or request.cookies.get(COLLECTION_ID_COOKIE) or "",
        access_token=request.headers.get(ACCESS_TOKEN_HEADER) or request.cookies.get(ACCESS_TOKEN_COOKIE) or "",
        lang=request.cookies.get(LANG_COOKIE) or "",
    )


# ─────────────────────────────────────────────────────────────
# Upstream clients (overridden in tests)
# ─────────────────────────────────────────────────────────────

def get_dataset_api() -> DatasetRegistry:
    return DatasetAPIClient()


def get_zebedee() -> CollectionStore:
    return ZebedeeClient()


def get_topics() -> TopicsTaxonomy:
    return TopicsClient()


# ─────────────────────────────────────────────────────────────
# Services
# ─────────────────────────────────────────────────────────────

def get_catalogue_service(
    registry: DatasetRegistry = Depends(get_dataset_api),
    taxonomy: TopicsTaxonomy = Depends(get_topics),
) -> DatasetCatalogueService:
    return DatasetCatalogueService(
        registry,
        batch_size=settings.datasets_batch_size,
        max_workers=settings.datasets_batch_workers,
        taxonomy=taxonomy,
    )


def get_metadata_service(
    registry: DatasetRegistry = Depends(get_dataset_api),
    collections: CollectionStore = Depends(get_zebedee),
) -> MetadataService:
    return MetadataService(registry, collections)
