# services/publishing-dataset-controller/dataset_controller/core/links.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple
from urllib.parse import urlsplit


_RELEASE_DATE_FORMATS = ("%Y-%m-%dT%H:%M:%S.%fZ", "%Y-%m-%dT%H:%M:%SZ")
_LONG_DATE_FORMAT = "%d %B %Y"


class LinkParseError(ValueError):
    pass


def get_ids_from_url(url: str) -> Tuple[str, str, str]:
    """
    Recover (dataset_id, edition, version) from a latest-version link such as
    http://host/v1/datasets/cpih01/editions/time-series/versions/3

    The path must split into at least 8 segments; the ids are read from
    segments 3, 5 and 7.
    """
    try:
        path = urlsplit(url).path
    except ValueError as e:
        raise LinkParseError(f"invalid url {url!r}: {e}") from e

    s = path.split("/")
    if len(s) < 8:
        raise LinkParseError("not enough arguments in path")
    return s[3], s[5], s[7]


def _fractional_seconds_to_micro(value: str) -> str:
    # %f takes at most 6 digits; the API can send nanoseconds
    head, dot, tail = value.partition(".")
    if not dot:
        return value
    digits = tail.rstrip("Z")
    return f"{head}.{digits[:6]}Z" if tail.endswith("Z") else value


def format_release_date(value: Optional[str]) -> Optional[str]:
    """
    "2020-11-07T00:00:00.000Z" -> "07 November 2020". None when unparsable.
    """
    if not value:
        return None
    candidate = _fractional_seconds_to_micro(value)
    for fmt in _RELEASE_DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).strftime(_LONG_DATE_FORMAT)
        except ValueError:
            continue
    return None


def resolve_release_date(
    release_date: Optional[str],
) -> Tuple[Optional[str], Optional[str]]:
    """
    Best-effort formatting for display-only dates.
    Returns (formatted, None) on success or (None, diagnostic) when the value
    cannot be formatted. Never raises.
    """
    if not release_date:
        return None, "no release date"
    formatted = format_release_date(release_date)
    if formatted is None:
        return None, f"failed to parse release date {release_date!r}"
    return formatted, None
