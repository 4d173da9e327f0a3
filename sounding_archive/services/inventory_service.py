"""Inventory engine: per-type coverage, missing runs, and locations for a site.

Read-only.  Every query goes through the :class:`Archive` facade, so the
engine never touches SQL directly.
"""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from sounding_archive.models.entities import Location, Site
from sounding_archive.models.inventory import Inventory, TimeRange

if TYPE_CHECKING:
    from sounding_archive.services.archive import Archive

logger = structlog.get_logger(logger_name=__name__)


def find_missing_ranges(
    init_times: Sequence[datetime.datetime],
    delta: datetime.timedelta,
) -> list[TimeRange]:
    """Return the inclusive runs of expected init times absent from *init_times*.

    *init_times* must be sorted ascending.  The expectation cursor starts at
    the first time and advances by *delta*.  When an actual time is ahead of
    the cursor, every expected slot before it is one missing run.  A file
    that lands exactly on the cursor advances it; an off-cadence file
    re-anchors nothing and is simply skipped over.

    An off-cadence file inside a gap splits it: with 00Z, 09Z and 18Z at a
    6 hour cadence the result is 06Z and 12Z as two runs.  Walks that always
    advance the cursor after catching up report only 06Z for that input.

    >>> from datetime import datetime, timedelta
    >>> times = [datetime(2017, 4, 1, h) for h in (0, 6, 18)]
    >>> find_missing_ranges(times, timedelta(hours=6))
    [(datetime.datetime(2017, 4, 1, 12, 0), datetime.datetime(2017, 4, 1, 12, 0))]
    """
    if delta <= datetime.timedelta(0):
        raise ValueError(f"Cadence must be positive, got {delta}")
    if not init_times:
        return []

    missing: list[TimeRange] = []
    expected = init_times[0]
    for actual in init_times:
        if expected < actual:
            start = end = expected
            while expected < actual:
                end = expected
                expected += delta
            missing.append((start, end))
        if expected == actual:
            expected += delta
    return missing


class InventoryService:
    """Builds an :class:`Inventory` for one site from an open archive."""

    def __init__(self, archive: Archive) -> None:
        self._archive = archive

    def compute(self, site: Site) -> Inventory:
        """Aggregate coverage for every sounding type stored at *site*.

        Raises
        ------
        NotFoundError
            If *site* is not registered in the archive.
        """
        site = self._archive.sites.validate(site)
        sounding_types = self._archive.sounding_types_for_site(site)

        ranges: dict[str, TimeRange] = {}
        missing_ranges: dict[str, list[TimeRange]] = {}
        locations_by_type: dict[str, list[Location]] = {}

        for sounding_type in sounding_types:
            key = sounding_type.source
            time_range = self._archive.time_range(site, sounding_type)
            if time_range is not None:
                ranges[key] = time_range

            # Types without a cadence have no notion of "missing".
            if sounding_type.hours_between is not None:
                init_times = self._archive.init_times(site, sounding_type)
                missing_ranges[key] = find_missing_ranges(
                    init_times,
                    datetime.timedelta(hours=sounding_type.hours_between),
                )

            locations_by_type[key] = self._archive.locations_for(site, sounding_type)

        logger.debug(
            "inventory_computed",
            site=site.short_name,
            sounding_types=len(sounding_types),
            missing_runs=sum(len(runs) for runs in missing_ranges.values()),
        )
        return Inventory(
            site=site,
            sounding_types=sounding_types,
            ranges=ranges,
            missing_ranges=missing_ranges,
            locations_by_type=locations_by_type,
        )
