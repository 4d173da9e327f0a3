"""Sounding archive domain models -- re-exports all public model classes.

The models are organized across four submodules:
    - entities.py   -- Site, SoundingType, Location and their update payloads
    - files.py      -- FileRecord rows of the ``files`` table
    - inventory.py  -- per-site coverage summary
    - analysis.py   -- decoded sounding records
"""

from __future__ import annotations

from sounding_archive.models.analysis import Analysis
from sounding_archive.models.entities import (
    COORDINATE_SCALE,
    FileType,
    Location,
    LocationSettings,
    Site,
    SiteInfo,
    SoundingType,
    SoundingTypeSettings,
    StateProv,
    dequantize_degrees,
    quantize_degrees,
)
from sounding_archive.models.files import FileRecord
from sounding_archive.models.inventory import Inventory, TimeRange

__all__ = [
    "COORDINATE_SCALE",
    "Analysis",
    "FileRecord",
    "FileType",
    "Inventory",
    "Location",
    "LocationSettings",
    "Site",
    "SiteInfo",
    "SoundingType",
    "SoundingTypeSettings",
    "StateProv",
    "TimeRange",
    "dequantize_degrees",
    "quantize_degrees",
]
