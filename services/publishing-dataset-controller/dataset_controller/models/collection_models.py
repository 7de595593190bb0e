# services/publishing-dataset-controller/dataset_controller/models/collection_models.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CollectionItem(BaseModel):
    """Workflow entry for one dataset (or dataset version) inside a collection."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = ""
    state: str = ""
    last_edited_by: str = Field(default="", alias="lastEditedBy")


class Collection(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = ""
    name: str = ""
    datasets: List[CollectionItem] = Field(default_factory=list)
    dataset_versions: List[CollectionItem] = Field(default_factory=list, alias="datasetVersions")

    def dataset_item(self, dataset_id: str) -> Optional[CollectionItem]:
        for item in self.datasets:
            if item.id == dataset_id:
                return item
        return None
