# services/publishing-dataset-controller/dataset_controller/core/mapper.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from dataset_controller.core.links import format_release_date, resolve_release_date
from dataset_controller.models import (
    Collection,
    Dataset,
    DatasetListItem,
    DatasetUpdate,
    Dimension,
    EditableMetadata,
    Edition,
    EditionRow,
    EditionsPage,
    EditMetadata,
    TopicRow,
    TopicsResult,
    Version,
    VersionRow,
    VersionsPage,
)

logger = logging.getLogger("dataset_controller.core.mapper")

PUBLISHED_STATE = "published"


def _next_title(dataset: DatasetUpdate) -> str:
    return (dataset.next.title or "") if dataset.next else ""


# ─────────────────────────────────────────────────────────────
# Browse pages
# ─────────────────────────────────────────────────────────────

def all_datasets(datasets: List[DatasetUpdate]) -> List[DatasetListItem]:
    """
    Datasets with a pending draft, ordered by title then id, both case-insensitive.
    Untitled datasets go after every titled one.
    """
    mapped = [
        DatasetListItem(id=d.id, title=d.next.title or "")
        for d in datasets
        if d.next is not None
    ]
    return sorted(mapped, key=lambda d: (d.title == "", d.title.lower(), d.id.lower()))


def all_editions(
    dataset: DatasetUpdate,
    editions: List[Edition],
    latest_versions: Dict[str, str],
) -> EditionsPage:
    """
    Editions in upstream order. `latest_versions` maps edition label to the raw
    release date of its latest version; unknown or unparsable dates become "".
    """
    rows: List[EditionRow] = []
    for e in editions:
        release_date, problem = resolve_release_date(latest_versions.get(e.edition))
        if problem and latest_versions.get(e.edition):
            logger.warning("edition %s: %s", e.edition, problem)
        rows.append(EditionRow(id=e.edition, title=e.edition, release_date=release_date or ""))

    return EditionsPage(dataset_name=_next_title(dataset), editions=rows)


def version_title(v: Version) -> str:
    if v.state == PUBLISHED_STATE:
        return f"Version: {v.version} (published)"
    return f"Version: {v.version}"


def all_versions(dataset: DatasetUpdate, edition: Edition, versions: List[Version]) -> VersionsPage:
    """
    Newest version first.
    """
    rows = [
        VersionRow(
            id=v.id,
            title=version_title(v),
            version=v.version,
            release_date=format_release_date(v.release_date) or v.release_date,
            state=v.state,
        )
        for v in versions
    ]
    rows.sort(key=lambda r: r.version, reverse=True)

    return VersionsPage(dataset_name=_next_title(dataset), edition_name=edition.edition, versions=rows)


def topics(result: TopicsResult) -> List[TopicRow]:
    return [TopicRow(title=r.description.title) for r in result.topics.results]


# ─────────────────────────────────────────────────────────────
# Edit metadata
# ─────────────────────────────────────────────────────────────

def edit_metadata(
    dataset: Optional[Dataset],
    version: Version,
    dimensions: List[Dimension],
    collection: Collection,
) -> EditMetadata:
    """
    Combine the draft dataset, the version and the collection entry for the
    dataset into the edit view. The ETag is attached by the caller.
    """
    dataset = dataset or Dataset()
    view = EditMetadata(
        dataset=dataset,
        version=version,
        dimensions=list(dimensions),
        collection_id=collection.id,
    )

    item = collection.dataset_item(dataset.id)
    if item is not None:
        view.collection_state = item.state
        view.collection_last_edited_by = item.last_edited_by

    return view


def editable_metadata(view: EditMetadata) -> EditableMetadata:
    """
    Inverse of edit_metadata for the fields an editor can change.
    """
    d, v = view.dataset, view.version
    return EditableMetadata(
        description=d.description,
        keywords=d.keywords,
        title=d.title,
        unit_of_measure=d.unit_of_measure,
        contacts=d.contacts,
        qmi=d.qmi,
        related_content=d.related_content,
        canonical_topic=d.canonical_topic,
        subtopics=d.subtopics,
        license=d.license,
        methodologies=d.methodologies,
        national_statistic=d.national_statistic,
        next_release=d.next_release,
        publications=d.publications,
        related_datasets=d.related_datasets,
        release_frequency=d.release_frequency,
        survey=d.survey,
        dimensions=list(v.dimensions),
        release_date=v.release_date,
        alerts=v.alerts,
        latest_changes=v.latest_changes,
        usage_notes=v.usage_notes,
    )
