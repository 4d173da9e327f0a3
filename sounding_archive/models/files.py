"""Index row binding a (site, type, init_time) key to a stored blob."""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict


class FileRecord(BaseModel):
    """One row of the ``files`` table.

    ``file_name`` is derived from the logical key by
    :func:`sounding_archive.utils.naming.compressed_file_name`, never supplied
    by callers.
    """

    model_config = ConfigDict(frozen=True)

    type_id: int
    site_id: int
    location_id: int
    init_time: datetime.datetime
    file_name: str
