"""Deterministic blob names and index timestamp encoding.

A stored blob's name is a pure function of its logical key
``(site, sounding type, init_time)``::

    2017-04-01T1800Z_GFS_KMSO.gz

so retrieval needs only one index lookup, and adding a file for an
occupied key overwrites the previous blob under the same name.
"""

from __future__ import annotations

import datetime

from sounding_archive.models.entities import Site, SoundingType

COMPRESSED_SUFFIX = ".gz"

_NAME_TIME_FORMAT = "%Y-%m-%dT%H%MZ"
_INDEX_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

def normalize_init_time(init_time: datetime.datetime) -> datetime.datetime:
    """Return *init_time* as a naive UTC datetime truncated to the minute.

    Timezone-aware values are converted to UTC first; naive values are
    assumed to already be UTC.  Blob names carry minute precision, so index
    keys do too.
    """
    if init_time.tzinfo is not None:
        init_time = init_time.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return init_time.replace(second=0, microsecond=0)


def format_index_time(init_time: datetime.datetime) -> str:
    """Encode an init time for the index.  Lexical order equals time order."""
    return normalize_init_time(init_time).strftime(_INDEX_TIME_FORMAT)


def parse_index_time(value: str) -> datetime.datetime:
    """Decode an init time stored by :func:`format_index_time`."""
    return datetime.datetime.strptime(value, _INDEX_TIME_FORMAT)


# ---------------------------------------------------------------------------
# File names
# ---------------------------------------------------------------------------

def _stem(site: Site, sounding_type: SoundingType, init_time: datetime.datetime) -> str:
    time_token = normalize_init_time(init_time).strftime(_NAME_TIME_FORMAT)
    return f"{time_token}_{sounding_type.source}_{site.short_name}"


def compressed_file_name(
    site: Site,
    sounding_type: SoundingType,
    init_time: datetime.datetime,
) -> str:
    """Name of the blob holding the payload for this logical key."""
    return _stem(site, sounding_type, init_time) + COMPRESSED_SUFFIX


def file_name(
    site: Site,
    sounding_type: SoundingType,
    init_time: datetime.datetime,
) -> str:
    """Name the payload would have uncompressed, with its encoding's extension."""
    return f"{_stem(site, sounding_type, init_time)}.{sounding_type.file_type.extension}"


def parse_compressed_file_name(name: str) -> tuple[datetime.datetime, str, str] | None:
    """Invert :func:`compressed_file_name`.

    Returns ``(init_time, source, short_name)`` or ``None`` if *name* does
    not follow the naming scheme.  Sources may contain underscores; site
    short names may not.
    """
    if not name.endswith(COMPRESSED_SUFFIX):
        return None
    stem = name[: -len(COMPRESSED_SUFFIX)]

    time_token, sep, rest = stem.partition("_")
    if not sep:
        return None
    source, sep, short_name = rest.rpartition("_")
    if not sep or not source or not short_name:
        return None

    try:
        init_time = datetime.datetime.strptime(time_token, _NAME_TIME_FORMAT)
    except ValueError:
        return None

    return init_time, source, short_name
