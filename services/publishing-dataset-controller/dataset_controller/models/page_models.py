# services/publishing-dataset-controller/dataset_controller/models/page_models.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from dataset_controller.models.dataset_models import Dataset, Dimension, Instance, Version


# ─────────────────────────────────────────────────────────────
# Browse views
# ─────────────────────────────────────────────────────────────

class DatasetListItem(BaseModel):
    id: str
    title: str = ""


class EditionRow(BaseModel):
    id: str
    title: str
    release_date: str = ""


class EditionsPage(BaseModel):
    dataset_name: str = ""
    editions: List[EditionRow] = Field(default_factory=list)


class VersionRow(BaseModel):
    id: str
    title: str
    version: int
    release_date: str = ""
    state: str = ""


class VersionsPage(BaseModel):
    dataset_name: str = ""
    edition_name: str = ""
    versions: List[VersionRow] = Field(default_factory=list)


class TopicRow(BaseModel):
    title: str


# ─────────────────────────────────────────────────────────────
# Edit views
# ─────────────────────────────────────────────────────────────

class EditMetadata(BaseModel):
    """
    What the edit-metadata screens read and send back: the draft dataset, the
    version being edited, any dimensions carried over from the last published
    version, the collection workflow state and the version ETag observed on read.
    """
    dataset: Dataset = Field(default_factory=Dataset)
    version: Version = Field(default_factory=Version)
    dimensions: List[Dimension] = Field(default_factory=list)
    collection_id: str = ""
    collection_state: str = ""
    collection_last_edited_by: str = ""
    version_etag: str = ""


class PutMetadataRequest(BaseModel):
    dataset: Dataset = Field(default_factory=Dataset)
    version: Version = Field(default_factory=Version)
    instance: Instance = Field(default_factory=Instance)
    collection_id: str = ""
    collection_state: str = ""


class WriteResult(BaseModel):
    dataset_id: str
    edition: str
    version: str
    collection_id: str
    collection_state: str
    instance_etag: Optional[str] = None
