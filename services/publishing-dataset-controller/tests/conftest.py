"""Shared fixtures: in-memory stand-ins for the dataset API, zebedee and the
topics service, plus a TestClient wired to them through dependency overrides.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from dataset_controller.api import deps
from dataset_controller.clients.http_utils import PreconditionFailed, ServiceClientError
from dataset_controller.main import app
from dataset_controller.models import (
    Collection,
    DatasetUpdate,
    EditableMetadata,
    Edition,
    Instance,
    TopicsResult,
    Version,
)

COLLECTION_ID = "testcollection"
ACCESS_TOKEN = "testuser"


class _Recorder:
    def __init__(self) -> None:
        self.calls: Dict[str, List[Dict[str, Any]]] = defaultdict(list)
        self.errors: Dict[str, Exception] = {}

    def _record(self, name: str, **kwargs: Any) -> None:
        self.calls[name].append(kwargs)
        if name in self.errors:
            raise self.errors[name]

    def fail(self, name: str, err: Exception) -> None:
        self.errors[name] = err


class FakeRegistry(_Recorder):
    def __init__(self) -> None:
        super().__init__()
        self.datasets: List[DatasetUpdate] = []
        self.dataset = DatasetUpdate()
        self.editions: List[Edition] = []
        self.edition = Edition()
        self.versions: Dict[Tuple[str, str, str], Version] = {}
        self.version_list: List[Version] = []
        self.etag = "versionEtag"
        self.instance_etag = "instanceEtag"

    async def get_datasets_in_batches(self, *, access_token, collection_id, batch_size, max_workers):
        self._record("get_datasets_in_batches", access_token=access_token, collection_id=collection_id,
                     batch_size=batch_size, max_workers=max_workers)
        return list(self.datasets)

    async def get_dataset_current_and_next(self, dataset_id, *, access_token, collection_id):
        self._record("get_dataset_current_and_next", dataset_id=dataset_id)
        return self.dataset

    async def get_editions(self, dataset_id, *, access_token, collection_id):
        self._record("get_editions", dataset_id=dataset_id)
        return list(self.editions)

    async def get_edition(self, dataset_id, edition, *, access_token, collection_id):
        self._record("get_edition", dataset_id=dataset_id, edition=edition)
        return self.edition

    async def get_version(self, dataset_id, edition, version, *, access_token, collection_id):
        self._record("get_version", dataset_id=dataset_id, edition=edition, version=version)
        try:
            return self.versions[(dataset_id, edition, version)]
        except KeyError:
            raise ServiceClientError(service="dataset-api", status=404, url="/", body="version not found")

    async def get_version_with_etag(self, dataset_id, edition, version, *, access_token, collection_id):
        self._record("get_version_with_etag", dataset_id=dataset_id, edition=edition, version=version)
        try:
            return self.versions[(dataset_id, edition, version)], self.etag
        except KeyError:
            raise ServiceClientError(service="dataset-api", status=404, url="/", body="version not found")

    async def get_versions_in_batches(self, dataset_id, edition, *, access_token, collection_id,
                                      batch_size, max_workers):
        self._record("get_versions_in_batches", dataset_id=dataset_id, edition=edition,
                     batch_size=batch_size, max_workers=max_workers)
        return list(self.version_list)

    async def put_dataset(self, dataset_id, dataset, *, access_token, collection_id):
        self._record("put_dataset", dataset_id=dataset_id, dataset=dataset)

    async def put_version(self, dataset_id, edition, version, body, *, access_token, collection_id):
        self._record("put_version", dataset_id=dataset_id, edition=edition, version=version, body=body)
        return body

    async def put_instance(self, instance_id, instance: Instance, *, access_token, collection_id, if_match):
        self._record("put_instance", instance_id=instance_id, instance=instance, if_match=if_match)
        return self.instance_etag

    async def put_metadata(self, dataset_id, edition, version, metadata: EditableMetadata, *,
                           access_token, collection_id, version_etag):
        self._record("put_metadata", dataset_id=dataset_id, edition=edition, version=version,
                     metadata=metadata, access_token=access_token, collection_id=collection_id,
                     version_etag=version_etag)
        if version_etag != self.etag:
            raise PreconditionFailed(service="dataset-api", status=412, url="/", body="etag mismatch")


class FakeCollectionStore(_Recorder):
    def __init__(self) -> None:
        super().__init__()
        self.collection = Collection()

    async def get_collection(self, access_token, collection_id):
        self._record("get_collection", access_token=access_token, collection_id=collection_id)
        return self.collection

    async def put_dataset_in_collection(self, access_token, collection_id, lang, dataset_id, state):
        self._record("put_dataset_in_collection", access_token=access_token, collection_id=collection_id,
                     lang=lang, dataset_id=dataset_id, state=state)

    async def put_dataset_version_in_collection(self, access_token, collection_id, lang, dataset_id,
                                                edition, version, state):
        self._record("put_dataset_version_in_collection", access_token=access_token,
                     collection_id=collection_id, lang=lang, dataset_id=dataset_id,
                     edition=edition, version=version, state=state)


class FakeTaxonomy(_Recorder):
    def __init__(self, result: Optional[TopicsResult] = None) -> None:
        super().__init__()
        self.result = result or TopicsResult()

    async def get_topics(self, access_token):
        self._record("get_topics", access_token=access_token)
        return self.result


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def collections() -> FakeCollectionStore:
    return FakeCollectionStore()


@pytest.fixture
def taxonomy() -> FakeTaxonomy:
    return FakeTaxonomy()


@pytest.fixture
def client(registry, collections, taxonomy):
    app.dependency_overrides[deps.get_dataset_api] = lambda: registry
    app.dependency_overrides[deps.get_zebedee] = lambda: collections
    app.dependency_overrides[deps.get_topics] = lambda: taxonomy
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Dict[str, str]:
    return {"Collection-Id": COLLECTION_ID, "X-Florence-Token": ACCESS_TOKEN}
