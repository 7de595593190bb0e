# services/publishing-dataset-controller/dataset_controller/models/dataset_models.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Upstream(BaseModel):
    """
    Base for documents owned by the dataset API. Unknown fields are kept so a
    full-object PUT sends back everything that was read.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)


# ─────────────────────────────────────────────────────────────
# Shared pieces
# ─────────────────────────────────────────────────────────────

class Link(_Upstream):
    href: str = ""
    id: Optional[str] = None


class ContactDetails(_Upstream):
    name: Optional[str] = None
    email: Optional[str] = None
    telephone: Optional[str] = None


class GeneralDetails(_Upstream):
    description: Optional[str] = None
    href: Optional[str] = None
    title: Optional[str] = None


# ─────────────────────────────────────────────────────────────
# Dataset
# ─────────────────────────────────────────────────────────────

class DatasetLinks(_Upstream):
    editions: Optional[Link] = None
    latest_version: Optional[Link] = None
    self_: Optional[Link] = Field(default=None, alias="self")


class Dataset(_Upstream):
    id: str = ""
    collection_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    contacts: Optional[List[ContactDetails]] = None
    keywords: Optional[List[str]] = None
    license: Optional[str] = None
    links: Optional[DatasetLinks] = None
    methodologies: Optional[List[GeneralDetails]] = None
    national_statistic: Optional[bool] = None
    next_release: Optional[str] = None
    publications: Optional[List[GeneralDetails]] = None
    qmi: Optional[GeneralDetails] = None
    related_datasets: Optional[List[GeneralDetails]] = None
    related_content: Optional[List[GeneralDetails]] = None
    release_frequency: Optional[str] = None
    state: Optional[str] = None
    unit_of_measure: Optional[str] = None
    canonical_topic: Optional[str] = None
    subtopics: Optional[List[str]] = None
    survey: Optional[str] = None

    def latest_version_href(self) -> str:
        if self.links and self.links.latest_version:
            return self.links.latest_version.href
        return ""


class DatasetUpdate(_Upstream):
    """A dataset as the publishing API returns it: last published plus pending draft."""
    id: str = ""
    current: Optional[Dataset] = None
    next: Optional[Dataset] = None


# ─────────────────────────────────────────────────────────────
# Edition
# ─────────────────────────────────────────────────────────────

class EditionLinks(_Upstream):
    dataset: Optional[Link] = None
    latest_version: Optional[Link] = None
    self_: Optional[Link] = Field(default=None, alias="self")
    versions: Optional[Link] = None


class Edition(_Upstream):
    edition: str = ""
    id: Optional[str] = None
    state: Optional[str] = None
    links: Optional[EditionLinks] = None

    def latest_version_href(self) -> str:
        if self.links and self.links.latest_version:
            return self.links.latest_version.href
        return ""


# ─────────────────────────────────────────────────────────────
# Version
# ─────────────────────────────────────────────────────────────

class Dimension(_Upstream):
    id: Optional[str] = None
    name: Optional[str] = None
    label: Optional[str] = None
    description: Optional[str] = None
    href: Optional[str] = None
    links: Optional[Dict[str, Any]] = None


class Alert(_Upstream):
    date: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None


class LatestChange(_Upstream):
    description: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None


class UsageNote(_Upstream):
    title: Optional[str] = None
    note: Optional[str] = None


class VersionLinks(_Upstream):
    dataset: Optional[Link] = None
    edition: Optional[Link] = None
    self_: Optional[Link] = Field(default=None, alias="self")


class Version(_Upstream):
    id: str = ""
    collection_id: Optional[str] = None
    dataset_id: Optional[str] = None
    edition: Optional[str] = None
    version: int = 0
    state: str = ""
    release_date: str = ""
    dimensions: List[Dimension] = Field(default_factory=list)
    alerts: Optional[List[Alert]] = None
    latest_changes: Optional[List[LatestChange]] = None
    usage_notes: Optional[List[UsageNote]] = None
    links: Optional[VersionLinks] = None


class Instance(_Upstream):
    """Instance document written alongside a version on a full metadata save."""
    id: Optional[str] = None
    state: Optional[str] = None


class EditableMetadata(BaseModel):
    """
    The subset of dataset and version fields an editor may change. Sent as one
    conditional write against the version's ETag.
    """
    # dataset fields
    description: Optional[str] = None
    keywords: Optional[List[str]] = None
    title: Optional[str] = None
    unit_of_measure: Optional[str] = None
    contacts: Optional[List[ContactDetails]] = None
    qmi: Optional[GeneralDetails] = None
    related_content: Optional[List[GeneralDetails]] = None
    canonical_topic: Optional[str] = None
    subtopics: Optional[List[str]] = None
    license: Optional[str] = None
    methodologies: Optional[List[GeneralDetails]] = None
    national_statistic: Optional[bool] = None
    next_release: Optional[str] = None
    publications: Optional[List[GeneralDetails]] = None
    related_datasets: Optional[List[GeneralDetails]] = None
    release_frequency: Optional[str] = None
    survey: Optional[str] = None

    # version fields
    dimensions: List[Dimension] = Field(default_factory=list)
    release_date: str = ""
    alerts: Optional[List[Alert]] = None
    latest_changes: Optional[List[LatestChange]] = None
    usage_notes: Optional[List[UsageNote]] = None
