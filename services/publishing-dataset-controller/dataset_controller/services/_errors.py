# services/publishing-dataset-controller/dataset_controller/services/_errors.py
from __future__ import annotations

from dataset_controller.clients.http_utils import ServiceClientError
from dataset_controller.core.errors import UpstreamFetchFailed, UpstreamNotFound


def upstream_failure(message: str, err: Exception, *, propagate_not_found: bool = False) -> UpstreamFetchFailed:
    """
    Wrap an upstream exception. With `propagate_not_found`, an upstream 404
    becomes UpstreamNotFound so the caller sees 404 instead of 500.
    """
    if propagate_not_found and isinstance(err, ServiceClientError) and err.not_found:
        return UpstreamNotFound(message, cause=err)
    return UpstreamFetchFailed(message, cause=err)
