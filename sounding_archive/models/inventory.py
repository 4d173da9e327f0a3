"""Coverage summary of one site's files, per sounding type.

Built by :class:`sounding_archive.services.inventory_service.InventoryService`.
Lookups accept either a :class:`SoundingType` or its source name.
"""

from __future__ import annotations

import datetime

from pydantic import BaseModel, ConfigDict, Field

from sounding_archive.models.entities import Location, Site, SoundingType

TimeRange = tuple[datetime.datetime, datetime.datetime]


def _source_key(sounding_type: SoundingType | str) -> str:
    if isinstance(sounding_type, SoundingType):
        return sounding_type.source
    return sounding_type.strip().upper()


class Inventory(BaseModel):
    """First/last init times, missing runs, and locations for a site.

    ``missing_ranges`` only has entries for types that declare a cadence;
    every other lookup falls back to an empty result.
    """

    model_config = ConfigDict(frozen=True)

    site: Site
    sounding_types: list[SoundingType] = Field(default_factory=list)
    ranges: dict[str, TimeRange] = Field(default_factory=dict)
    missing_ranges: dict[str, list[TimeRange]] = Field(default_factory=dict)
    locations_by_type: dict[str, list[Location]] = Field(default_factory=dict)

    def range(self, sounding_type: SoundingType | str) -> TimeRange | None:
        """Earliest and latest init time stored for *sounding_type*."""
        return self.ranges.get(_source_key(sounding_type))

    def missing(self, sounding_type: SoundingType | str) -> list[TimeRange]:
        """Inclusive (first, last) init times of each run of missing files."""
        return list(self.missing_ranges.get(_source_key(sounding_type), []))

    def locations(self, sounding_type: SoundingType | str) -> list[Location]:
        """Distinct locations recorded for *sounding_type* at this site."""
        return list(self.locations_by_type.get(_source_key(sounding_type), []))

    def sounding_type(self, source: str) -> SoundingType | None:
        key = _source_key(source)
        for sounding_type in self.sounding_types:
            if sounding_type.source == key:
                return sounding_type
        return None
