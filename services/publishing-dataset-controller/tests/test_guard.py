from __future__ import annotations

import pytest

from dataset_controller.core.errors import BadRequest, MissingAccessToken, MissingCollectionID
from dataset_controller.core.guard import check_access_token_and_collection_headers


def test_passes_when_both_present():
    check_access_token_and_collection_headers("token", "collection")


def test_missing_collection_id():
    with pytest.raises(MissingCollectionID) as exc:
        check_access_token_and_collection_headers("token", "")
    assert exc.value.message == "no collection ID header set"
    assert exc.value.status_code == 400


def test_missing_access_token():
    with pytest.raises(MissingAccessToken) as exc:
        check_access_token_and_collection_headers("", "collection")
    assert exc.value.message == "no user access token header set"


def test_collection_id_checked_first():
    with pytest.raises(MissingCollectionID):
        check_access_token_and_collection_headers("", "")


def test_both_are_bad_requests():
    assert issubclass(MissingCollectionID, BadRequest)
    assert issubclass(MissingAccessToken, BadRequest)
