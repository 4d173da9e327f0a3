"""Unit tests for the inventory engine.

``find_missing_ranges`` is exercised directly; ``InventoryService.compute``
runs against a temporary archive built with the shared fixtures.
"""

from __future__ import annotations

import datetime

import pytest

from sounding_archive.models.entities import Location, Site, SoundingType
from sounding_archive.services.archive import Archive
from sounding_archive.services.inventory_service import InventoryService, find_missing_ranges
from sounding_archive.utils.errors import NotFoundError
from tests.conftest import make_bufkit

SIX_HOURS = datetime.timedelta(hours=6)
DAY = datetime.datetime(2017, 4, 1)


def _at(*hours: int) -> list[datetime.datetime]:
    return [DAY + datetime.timedelta(hours=h) for h in hours]


def _add(
    archive: Archive,
    site: Site,
    sounding_type: SoundingType,
    location: Location,
    times: list[datetime.datetime],
) -> None:
    for t in times:
        archive.add_file(site, sounding_type, location, t, make_bufkit(t))


# ======================================================================
# find_missing_ranges
# ======================================================================


class TestFindMissingRanges:
    def test_no_times(self) -> None:
        assert find_missing_ranges([], SIX_HOURS) == []

    def test_single_time(self) -> None:
        assert find_missing_ranges(_at(0), SIX_HOURS) == []

    def test_exact_cadence_has_no_gaps(self) -> None:
        assert find_missing_ranges(_at(0, 6, 12, 18, 24), SIX_HOURS) == []

    def test_single_missing_slot(self) -> None:
        t12 = DAY + datetime.timedelta(hours=12)
        assert find_missing_ranges(_at(0, 6, 18), SIX_HOURS) == [(t12, t12)]

    def test_multi_slot_gap_is_one_range(self) -> None:
        start, end = _at(6, 18)
        assert find_missing_ranges(_at(0, 24), SIX_HOURS) == [(start, end)]

    def test_several_gaps(self) -> None:
        assert find_missing_ranges(_at(0, 12, 36, 42), SIX_HOURS) == [
            tuple(_at(6, 6)),
            tuple(_at(18, 30)),
        ]

    def test_off_cadence_time_does_not_shift_expectations(self) -> None:
        # 03Z is present but not expected; 06Z is still expected next.
        assert find_missing_ranges(_at(0, 3, 6, 12), SIX_HOURS) == []

    def test_off_cadence_time_splits_gap(self) -> None:
        # 06Z and 12Z are both missing; the 09Z file between them splits the run.
        assert find_missing_ranges(_at(0, 9, 18), SIX_HOURS) == [
            tuple(_at(6, 6)),
            tuple(_at(12, 12)),
        ]

    def test_non_positive_cadence_rejected(self) -> None:
        with pytest.raises(ValueError):
            find_missing_ranges(_at(0, 6), datetime.timedelta(0))


# ======================================================================
# InventoryService.compute
# ======================================================================


class TestComputeInventory:
    def test_kmso_gfs_scenario(
        self, archive: Archive, kmso: Site, gfs: SoundingType, msla_location: Location
    ) -> None:
        _add(archive, kmso, gfs, msla_location, _at(0, 6, 18))

        inventory = InventoryService(archive).compute(Site(short_name="KMSO"))

        t0, t12, t18 = _at(0, 12, 18)
        assert inventory.missing("GFS") == [(t12, t12)]
        assert inventory.range("GFS") == (t0, t18)
        assert inventory.locations("GFS") == [msla_location]
        assert [t.source for t in inventory.sounding_types] == ["GFS"]

    def test_filling_gaps_empties_missing(
        self, archive: Archive, kmso: Site, gfs: SoundingType, msla_location: Location
    ) -> None:
        _add(archive, kmso, gfs, msla_location, _at(0, 24))
        for start, end in archive.inventory(kmso).missing(gfs):
            t = start
            while t <= end:
                _add(archive, kmso, gfs, msla_location, [t])
                t += SIX_HOURS

        assert archive.inventory(kmso).missing(gfs) == []
        assert archive.count() == 5

    def test_zero_files(self, archive: Archive, kmso: Site, gfs: SoundingType) -> None:
        inventory = archive.inventory(kmso)
        assert inventory.sounding_types == []
        assert inventory.range(gfs) is None
        assert inventory.missing(gfs) == []
        assert inventory.locations(gfs) == []

    def test_single_file(
        self, archive: Archive, kmso: Site, gfs: SoundingType, msla_location: Location
    ) -> None:
        (t0,) = _at(0)
        _add(archive, kmso, gfs, msla_location, [t0])
        inventory = archive.inventory(kmso)
        assert inventory.range(gfs) == (t0, t0)
        assert inventory.missing(gfs) == []

    def test_type_without_cadence_reports_no_missing(
        self, archive: Archive, kmso: Site, msla_location: Location
    ) -> None:
        wrf = archive.sounding_types.validate_or_add(SoundingType.new_model("LOCALWRF"))
        _add(archive, kmso, wrf, msla_location, _at(0, 5, 40))

        inventory = archive.inventory(kmso)
        assert inventory.missing(wrf) == []
        assert "LOCALWRF" not in inventory.missing_ranges
        assert inventory.range(wrf) == tuple(_at(0, 40))

    def test_types_are_separate(
        self, archive: Archive, kmso: Site, gfs: SoundingType, msla_location: Location
    ) -> None:
        nam = archive.sounding_types.validate_or_add(SoundingType.new_model("NAM", hours_between=6))
        _add(archive, kmso, gfs, msla_location, _at(0, 6, 12))
        _add(archive, kmso, nam, msla_location, _at(0, 12))

        inventory = archive.inventory(kmso)
        assert [t.source for t in inventory.sounding_types] == ["GFS", "NAM"]
        assert inventory.missing(gfs) == []
        assert inventory.missing(nam) == [tuple(_at(6, 6))]

    def test_other_sites_ignored(
        self, archive: Archive, kmso: Site, gfs: SoundingType, msla_location: Location
    ) -> None:
        kboi = archive.sites.validate_or_add(Site(short_name="KBOI"))
        _add(archive, kmso, gfs, msla_location, _at(0, 12))
        _add(archive, kboi, gfs, msla_location, _at(6))

        assert archive.inventory(kmso).missing(gfs) == [tuple(_at(6, 6))]

    def test_distinct_locations(
        self, archive: Archive, kmso: Site, gfs: SoundingType, msla_location: Location
    ) -> None:
        moved = archive.locations.validate_or_add(
            Location(latitude=46.93, longitude=-114.09, elevation_m=980)
        )
        _add(archive, kmso, gfs, msla_location, _at(0, 6))
        _add(archive, kmso, gfs, moved, _at(12))

        assert archive.inventory(kmso).locations(gfs) == [msla_location, moved]

    def test_unknown_site_raises(self, archive: Archive) -> None:
        with pytest.raises(NotFoundError):
            archive.inventory(Site(short_name="KXXX"))
