# services/publishing-dataset-controller/dataset_controller/clients/base.py
from __future__ import annotations

from typing import List, Protocol, Tuple

from dataset_controller.models import (
    Collection,
    Dataset,
    DatasetUpdate,
    EditableMetadata,
    Edition,
    Instance,
    TopicsResult,
    Version,
)


class DatasetRegistry(Protocol):
    """
    Interface over the dataset API, which owns canonical dataset, edition and
    version state. Every call is made on behalf of the editing user, inside
    their collection.
    """

    async def get_datasets_in_batches(
        self, *, access_token: str, collection_id: str, batch_size: int, max_workers: int
    ) -> List[DatasetUpdate]:
        """
        Every dataset, fetched page by page with at most `max_workers` pages in flight.
        """

    async def get_dataset_current_and_next(
        self, dataset_id: str, *, access_token: str, collection_id: str
    ) -> DatasetUpdate: ...

    async def get_editions(
        self, dataset_id: str, *, access_token: str, collection_id: str
    ) -> List[Edition]: ...

    async def get_edition(
        self, dataset_id: str, edition: str, *, access_token: str, collection_id: str
    ) -> Edition: ...

    async def get_version(
        self, dataset_id: str, edition: str, version: str, *, access_token: str, collection_id: str
    ) -> Version: ...

    async def get_version_with_etag(
        self, dataset_id: str, edition: str, version: str, *, access_token: str, collection_id: str
    ) -> Tuple[Version, str]:
        """
        The version plus the ETag the API answered with.
        """

    async def get_versions_in_batches(
        self,
        dataset_id: str,
        edition: str,
        *,
        access_token: str,
        collection_id: str,
        batch_size: int,
        max_workers: int,
    ) -> List[Version]: ...

    async def put_dataset(
        self, dataset_id: str, dataset: Dataset, *, access_token: str, collection_id: str
    ) -> None: ...

    async def put_version(
        self, dataset_id: str, edition: str, version: str, body: Version, *, access_token: str, collection_id: str
    ) -> Version: ...

    async def put_instance(
        self, instance_id: str, instance: Instance, *, access_token: str, collection_id: str, if_match: str
    ) -> str:
        """
        Returns the instance's new ETag.
        """

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
        Conditional write of the editable fields. Must raise PreconditionFailed
        when `version_etag` no longer matches the stored version.
        """


class CollectionStore(Protocol):
    """
    Interface over zebedee, which tracks publishing workflow state per collection.
    """

    async def get_collection(self, access_token: str, collection_id: str) -> Collection: ...

    async def put_dataset_in_collection(
        self, access_token: str, collection_id: str, lang: str, dataset_id: str, state: str
    ) -> None: ...

    async def put_dataset_version_in_collection(
        self,
        access_token: str,
        collection_id: str,
        lang: str,
        dataset_id: str,
        edition: str,
        version: str,
        state: str,
    ) -> None: ...


class TopicsTaxonomy(Protocol):
    """
    Interface over the topics taxonomy used when creating a dataset.
    """

    async def get_topics(self, access_token: str) -> TopicsResult: ...


__all__ = ["DatasetRegistry", "CollectionStore", "TopicsTaxonomy"]
