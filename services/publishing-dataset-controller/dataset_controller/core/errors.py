# services/publishing-dataset-controller/dataset_controller/core/errors.py
from __future__ import annotations

from typing import Optional


class ControllerError(Exception):
    """
    Base for every failure the controller reports to its caller.
    `message` is the plaintext body sent back; `status_code` the HTTP status.
    """
    status_code: int = 500

    def __init__(self, message: str, *, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


# ─────────────────────────────────────────────────────────────
# Client errors
# ─────────────────────────────────────────────────────────────

class BadRequest(ControllerError):
    status_code = 400


class MissingCollectionID(BadRequest):
    def __init__(self) -> None:
        super().__init__("no collection ID header set")


class MissingAccessToken(BadRequest):
    def __init__(self) -> None:
        super().__init__("no user access token header set")


# ─────────────────────────────────────────────────────────────
# Upstream errors
# ─────────────────────────────────────────────────────────────

class UpstreamFetchFailed(ControllerError):
    status_code = 500


class UpstreamNotFound(UpstreamFetchFailed):
    status_code = 404


class MetadataUpdateFailed(ControllerError):
    """
    A write did not complete. `stage` says which backend rejected it:
    "registry" means nothing was propagated to the collection store,
    "collection" means the registry write already persisted.
    """
    status_code = 500
    stage = "registry"


class CollectionStateUpdateFailed(MetadataUpdateFailed):
    stage = "collection"
