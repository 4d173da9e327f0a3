"""Decoded sounding records returned by ``Archive.retrieve``.

The archive never interprets payloads itself; decoders implementing
:class:`sounding_archive.interfaces.decoder.ISoundingDecoder` produce
these records from raw bytes.
"""

from __future__ import annotations

import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Analysis(BaseModel):
    """One decoded sounding (a single valid time) from a payload."""

    model_config = ConfigDict(frozen=True)

    valid_time: datetime.datetime       # Valid time embedded in the payload (naive UTC)
    description: str                    # Where it came from, usually the uncompressed file name
    station: str | None = None          # Station id embedded in the payload, if any
    fields: dict[str, Any] = Field(default_factory=dict)   # Decoder-specific values
