# services/publishing-dataset-controller/dataset_controller/core/guard.py
from __future__ import annotations

from dataset_controller.core.errors import MissingAccessToken, MissingCollectionID


def check_access_token_and_collection_headers(access_token: str, collection_id: str) -> None:
    """
    Runs before any upstream call. The collection id is checked first.
    """
    if not collection_id:
        raise MissingCollectionID()
    if not access_token:
        raise MissingAccessToken()
