# services/publishing-dataset-controller/dataset_controller/services/metadata_service.py
from __future__ import annotations

import logging
from typing import List

from dataset_controller.clients.base import CollectionStore, DatasetRegistry
from dataset_controller.clients.http_utils import PreconditionFailed
from dataset_controller.core import mapper
from dataset_controller.core.errors import BadRequest, CollectionStateUpdateFailed, MetadataUpdateFailed
from dataset_controller.core.guard import check_access_token_and_collection_headers
from dataset_controller.core.links import LinkParseError, get_ids_from_url
from dataset_controller.models import (
    Collection,
    Dimension,
    EditMetadata,
    PutMetadataRequest,
    WriteResult,
)
from dataset_controller.services._errors import upstream_failure

logger = logging.getLogger("dataset_controller.services.metadata")

EDITION_CONFIRMED_STATE = "edition-confirmed"

# instance writes on a full save are unconditional
_ANY_ETAG = "*"


class MetadataService:
    """
    Reads and writes the edit-metadata view.

    Reading merges the draft dataset, the version (with its ETag), dimensions
    carried over from the last published version and the collection workflow
    entry. Writing goes to the dataset API first and only then to the
    collection store; the dataset API write is never rolled back, so a
    collection failure is raised as CollectionStateUpdateFailed.
    """

    def __init__(self, registry: DatasetRegistry, collections: CollectionStore) -> None:
        self.registry = registry
        self.collections = collections

    # ─────────────────────────────────────────────────────────
    # GET .../versions/{versionID}
    # ─────────────────────────────────────────────────────────
    async def get_edit_metadata(
        self, dataset_id: str, edition: str, version: str, *, access_token: str, collection_id: str
    ) -> EditMetadata:
        check_access_token_and_collection_headers(access_token, collection_id)
        log_info = {"dataset_id": dataset_id, "edition": edition, "version": version}

        try:
            v, etag = await self.registry.get_version_with_etag(
                dataset_id, edition, version, access_token=access_token, collection_id=collection_id
            )
        except Exception as e:
            logger.error("failed to get version details %s", log_info, exc_info=True)
            raise upstream_failure("error getting version from dataset API", e, propagate_not_found=True)

        # current holds the link to the latest published version
        try:
            d = await self.registry.get_dataset_current_and_next(
                dataset_id, access_token=access_token, collection_id=collection_id
            )
        except Exception as e:
            logger.error("failed to get dataset details %s", log_info, exc_info=True)
            raise upstream_failure("error getting dataset from dataset API", e, propagate_not_found=True)

        # An edition-confirmed version has not been edited yet: pre-fill its
        # dimensions from the last published version of the dataset.
        dims: List[Dimension] = []
        if v.state == EDITION_CONFIRMED_STATE and v.version > 1:
            latest_href = d.current.latest_version_href() if d.current else ""
            dims = await self._latest_published_dimensions(
                latest_href, access_token=access_token, collection_id=collection_id
            )

        next_collection_id = (d.next.collection_id or "") if d.next else ""
        try:
            c = await self._collection_details(access_token, next_collection_id)
        except Exception as e:
            logger.error("failed to get collection details %s", log_info, exc_info=True)
            raise upstream_failure("error getting collection from zebedee", e, propagate_not_found=True)

        view = mapper.edit_metadata(d.next, v, dims, c)
        view.version_etag = etag
        logger.info("get edit metadata: request successful %s", log_info)
        return view

    async def _collection_details(self, access_token: str, collection_id: str) -> Collection:
        if not collection_id:
            # not in a collection yet
            return Collection()
        return await self.collections.get_collection(access_token, collection_id)

    async def _latest_published_dimensions(
        self, latest_version_url: str, *, access_token: str, collection_id: str
    ) -> List[Dimension]:
        try:
            dataset_id, edition_id, version_id = get_ids_from_url(latest_version_url)
        except LinkParseError:
            logger.warning("failed to parse latest version url %r", latest_version_url, exc_info=True)
            return []

        try:
            latest = await self.registry.get_version(
                dataset_id, edition_id, version_id, access_token=access_token, collection_id=collection_id
            )
        except Exception:
            logger.warning(
                "failed to get latest published version %s/%s/%s", dataset_id, edition_id, version_id,
                exc_info=True,
            )
            return []

        return list(latest.dimensions)

    # ─────────────────────────────────────────────────────────
    # PUT .../versions/{versionID}
    # ─────────────────────────────────────────────────────────
    async def put_metadata(
        self,
        dataset_id: str,
        edition: str,
        version: str,
        body: PutMetadataRequest,
        *,
        access_token: str,
        collection_id: str,
        lang: str = "",
    ) -> WriteResult:
        """
        Full-object save: dataset, then version, then instance, then the
        collection entries. Earlier writes stay in place if a later one fails.
        """
        check_access_token_and_collection_headers(access_token, collection_id)
        log_info = {"dataset_id": dataset_id, "edition": edition, "version": version}
        logger.info("calling put metadata %s", log_info)

        try:
            await self.registry.put_dataset(
                dataset_id, body.dataset, access_token=access_token, collection_id=collection_id
            )
        except Exception as e:
            logger.error("error updating dataset %s", log_info, exc_info=True)
            raise MetadataUpdateFailed("error updating dataset", cause=e)

        try:
            await self.registry.put_version(
                dataset_id, edition, version, body.version,
                access_token=access_token, collection_id=collection_id,
            )
        except Exception as e:
            logger.error("error updating version %s", log_info, exc_info=True)
            raise MetadataUpdateFailed("error updating version", cause=e)

        instance_id = body.version.id or body.instance.id or ""
        try:
            instance_etag = await self.registry.put_instance(
                instance_id, body.instance,
                access_token=access_token, collection_id=collection_id, if_match=_ANY_ETAG,
            )
        except Exception as e:
            logger.error("error updating instance %s", {**log_info, "instance_id": instance_id}, exc_info=True)
            raise MetadataUpdateFailed("error updating instance", cause=e)

        target_collection = body.collection_id or collection_id
        await self._propagate_collection_state(
            access_token, target_collection, lang, dataset_id, edition, version, body.collection_state,
        )

        logger.info("put metadata: request successful %s", log_info)
        return WriteResult(
            dataset_id=dataset_id,
            edition=edition,
            version=version,
            collection_id=target_collection,
            collection_state=body.collection_state,
            instance_etag=instance_etag or None,
        )

    # ─────────────────────────────────────────────────────────
    # PUT .../versions/{versionID}/metadata
    # ─────────────────────────────────────────────────────────
    async def put_editable_metadata(
        self,
        dataset_id: str,
        edition: str,
        version: str,
        view: EditMetadata,
        *,
        access_token: str,
        collection_id: str,
        lang: str = "",
    ) -> WriteResult:
        """
        Save the editable fields conditioned on the ETag the editor read, then
        move the dataset and dataset version to the requested collection state.
        Nothing reaches the collection store if the dataset API rejects the write.
        """
        check_access_token_and_collection_headers(access_token, collection_id)
        if not view.version_etag:
            raise BadRequest("no version etag set")

        log_info = {"dataset_id": dataset_id, "edition": edition, "version": version}
        logger.info("calling put editable metadata %s", log_info)

        patch = mapper.editable_metadata(view)
        try:
            await self.registry.put_metadata(
                dataset_id, edition, version, patch,
                access_token=access_token,
                collection_id=collection_id,
                version_etag=view.version_etag,
            )
        except PreconditionFailed as e:
            logger.warning("version etag is stale, metadata not updated %s", log_info)
            raise MetadataUpdateFailed("error updating metadata", cause=e)
        except Exception as e:
            logger.error("error updating metadata %s", log_info, exc_info=True)
            raise MetadataUpdateFailed("error updating metadata", cause=e)

        await self._propagate_collection_state(
            access_token, collection_id, lang, dataset_id, edition, version, view.collection_state,
        )

        logger.info("put editable metadata: request successful %s", log_info)
        return WriteResult(
            dataset_id=dataset_id,
            edition=edition,
            version=version,
            collection_id=collection_id,
            collection_state=view.collection_state,
        )

    async def _propagate_collection_state(
        self,
        access_token: str,
        collection_id: str,
        lang: str,
        dataset_id: str,
        edition: str,
        version: str,
        state: str,
    ) -> None:
        log_info = {"collection_id": collection_id, "dataset_id": dataset_id, "state": state}
        try:
            await self.collections.put_dataset_in_collection(
                access_token, collection_id, lang, dataset_id, state
            )
            await self.collections.put_dataset_version_in_collection(
                access_token, collection_id, lang, dataset_id, edition, version, state
            )
        except Exception as e:
            logger.error(
                "dataset API updated but collection state was not; retry the state change only %s",
                log_info, exc_info=True,
            )
            raise CollectionStateUpdateFailed("error updating collection state", cause=e)


__all__ = ["MetadataService", "EDITION_CONFIRMED_STATE"]
