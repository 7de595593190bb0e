# services/publishing-dataset-controller/dataset_controller/models/topic_models.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TopicDescription(BaseModel):
    model_config = ConfigDict(extra="allow")
    title: str = ""


class TopicResult(BaseModel):
    model_config = ConfigDict(extra="allow")
    description: TopicDescription = Field(default_factory=TopicDescription)
    uri: Optional[str] = None
    type: Optional[str] = None


class Topics(BaseModel):
    results: List[TopicResult] = Field(default_factory=list)


class TopicsResult(BaseModel):
    topics: Topics = Field(default_factory=Topics)
