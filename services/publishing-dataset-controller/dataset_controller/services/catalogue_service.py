# services/publishing-dataset-controller/dataset_controller/services/catalogue_service.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from dataset_controller.clients.base import DatasetRegistry, TopicsTaxonomy
from dataset_controller.core import mapper
from dataset_controller.core.guard import check_access_token_and_collection_headers
from dataset_controller.core.links import LinkParseError, get_ids_from_url
from dataset_controller.infra.telemetry import timer
from dataset_controller.models import (
    DatasetListItem,
    Edition,
    EditionsPage,
    TopicRow,
    VersionsPage,
)
from dataset_controller.services._errors import upstream_failure

logger = logging.getLogger("dataset_controller.services.catalogue")


class DatasetCatalogueService:
    """
    Read-only browse pages: the dataset list, the editions of a dataset and the
    versions of an edition. Batch size and worker count for the paginated
    listings are fixed at construction.
    """

    def __init__(
        self,
        registry: DatasetRegistry,
        *,
        batch_size: int,
        max_workers: int,
        taxonomy: Optional[TopicsTaxonomy] = None,
    ) -> None:
        self.registry = registry
        self.taxonomy = taxonomy
        self.batch_size = batch_size
        self.max_workers = max_workers

    # ─────────────────────────────────────────────────────────
    # GET /datasets
    # ─────────────────────────────────────────────────────────
    async def list_all(self, *, access_token: str, collection_id: str) -> List[DatasetListItem]:
        check_access_token_and_collection_headers(access_token, collection_id)
        log_info = {"collection_id": collection_id}
        logger.info("calling get all datasets %s", log_info)

        try:
            with timer("get_datasets_in_batches", logger):
                datasets = await self.registry.get_datasets_in_batches(
                    access_token=access_token,
                    collection_id=collection_id,
                    batch_size=self.batch_size,
                    max_workers=self.max_workers,
                )
        except Exception as e:
            logger.error("error getting all datasets from dataset API %s", log_info, exc_info=True)
            raise upstream_failure("error getting all datasets from dataset API", e)

        mapped = mapper.all_datasets(datasets)
        logger.info("get all datasets: request successful (%d listed of %d)", len(mapped), len(datasets))
        return mapped

    # ─────────────────────────────────────────────────────────
    # GET /datasets/{datasetID}/editions
    # ─────────────────────────────────────────────────────────
    async def get_editions(self, dataset_id: str, *, access_token: str, collection_id: str) -> EditionsPage:
        check_access_token_and_collection_headers(access_token, collection_id)
        log_info = {"dataset_id": dataset_id, "collection_id": collection_id}
        logger.info("calling get editions %s", log_info)

        try:
            dataset = await self.registry.get_dataset_current_and_next(
                dataset_id, access_token=access_token, collection_id=collection_id
            )
        except Exception as e:
            logger.error("error getting dataset from dataset API %s", log_info, exc_info=True)
            raise upstream_failure(f"error getting dataset from dataset API: {e}", e)

        try:
            editions = await self.registry.get_editions(
                dataset_id, access_token=access_token, collection_id=collection_id
            )
        except Exception as e:
            logger.error("error getting editions from dataset API %s", log_info, exc_info=True)
            raise upstream_failure(f"error getting editions from dataset API: {e}", e)

        latest_versions: Dict[str, str] = {}
        for edition in editions:
            release_date, problem = await self._latest_release_date(
                dataset_id, edition, access_token=access_token, collection_id=collection_id
            )
            if problem:
                logger.warning("edition %s: %s %s", edition.edition, problem, log_info)
            latest_versions[edition.edition] = release_date or ""

        page = mapper.all_editions(dataset, editions, latest_versions)
        logger.info("get editions: request successful %s", log_info)
        return page

    async def _latest_release_date(
        self, dataset_id: str, edition: Edition, *, access_token: str, collection_id: str
    ) -> Tuple[Optional[str], Optional[str]]:
        """
        Release date of the edition's latest version, or (None, reason).
        Display-only, so this never raises for upstream or link problems.
        """
        try:
            _, _, version_id = get_ids_from_url(edition.latest_version_href())
        except LinkParseError as e:
            return None, f"unusable latest version link: {e}"

        try:
            version = await self.registry.get_version(
                dataset_id, edition.edition, version_id,
                access_token=access_token, collection_id=collection_id,
            )
        except Exception as e:
            return None, f"failed to get latest version {version_id}: {e}"

        return version.release_date, None

    # ─────────────────────────────────────────────────────────
    # GET /datasets/{datasetID}/editions/{editionID}/versions
    # ─────────────────────────────────────────────────────────
    async def get_versions(
        self, dataset_id: str, edition_id: str, *, access_token: str, collection_id: str
    ) -> VersionsPage:
        check_access_token_and_collection_headers(access_token, collection_id)
        log_info = {"dataset_id": dataset_id, "edition": edition_id}
        logger.info("calling get versions %s", log_info)

        try:
            dataset = await self.registry.get_dataset_current_and_next(
                dataset_id, access_token=access_token, collection_id=collection_id
            )
        except Exception as e:
            logger.error("error getting dataset from dataset API %s", log_info, exc_info=True)
            raise upstream_failure(f"error getting dataset from dataset API: {e}", e)

        try:
            edition = await self.registry.get_edition(
                dataset_id, edition_id, access_token=access_token, collection_id=collection_id
            )
        except Exception as e:
            logger.error("error getting edition from dataset API %s", log_info, exc_info=True)
            raise upstream_failure(f"error getting edition from dataset API: {e}", e)

        try:
            with timer("get_versions_in_batches", logger):
                versions = await self.registry.get_versions_in_batches(
                    dataset_id,
                    edition_id,
                    access_token=access_token,
                    collection_id=collection_id,
                    batch_size=self.batch_size,
                    max_workers=self.max_workers,
                )
        except Exception as e:
            logger.error("error getting all versions from dataset API %s", log_info, exc_info=True)
            raise upstream_failure(f"error getting all versions from dataset API: {e}", e)

        page = mapper.all_versions(dataset, edition, versions)
        logger.info("get versions: request successful %s", log_info)
        return page

    # ─────────────────────────────────────────────────────────
    # GET /datasets/{datasetID}/create
    # ─────────────────────────────────────────────────────────
    async def get_topics(self, *, access_token: str, collection_id: str) -> List[TopicRow]:
        check_access_token_and_collection_headers(access_token, collection_id)
        if self.taxonomy is None:
            raise RuntimeError("topics taxonomy client not configured")

        logger.info("calling get topics")
        try:
            result = await self.taxonomy.get_topics(access_token)
        except Exception as e:
            logger.error("error getting topics from babbage", exc_info=True)
            raise upstream_failure(f"error getting topics from babbage: {e}", e)

        return mapper.topics(result)
