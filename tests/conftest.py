"""Shared pytest fixtures for the sounding-archive test suite."""

from __future__ import annotations

import datetime
from collections.abc import Iterator
from pathlib import Path

import pytest

from sounding_archive.interfaces.decoder import ISoundingDecoder
from sounding_archive.models.analysis import Analysis
from sounding_archive.models.entities import FileType, Location, Site, SoundingType
from sounding_archive.services.archive import Archive
from sounding_archive.utils.errors import DecodeError

# ---------------------------------------------------------------------------
# Fake payloads
# ---------------------------------------------------------------------------

_BUFKIT_TIME_FORMAT = "%y%m%d/%H%M"


def make_bufkit(init_time: datetime.datetime, station: str = "KMSO", hours: int = 1) -> bytes:
    """A minimal BUFKIT-like text payload with one TIME header per hour."""
    blocks = []
    for hour in range(hours):
        valid = init_time + datetime.timedelta(hours=hour)
        blocks.append(
            f"STID = {station}  STNM = 727730  TIME = {valid.strftime(_BUFKIT_TIME_FORMAT)}\n"
            "PRES TMPC DWPC\n"
            "1000.0 12.5 3.1\n"
        )
    return ("SNPARM = PRES;TMPC;DWPC\n\n" + "\n".join(blocks)).encode("ascii")


class FakeBufkitDecoder(ISoundingDecoder):
    """Reads only the STID / TIME header lines of :func:`make_bufkit` payloads."""

    @property
    def file_type(self) -> FileType:
        return FileType.BUFKIT

    def decode(self, data: bytes, description: str) -> list[Analysis]:
        analyses = []
        for line in data.decode("ascii", errors="replace").splitlines():
            if "TIME = " not in line:
                continue
            fields = dict(
                part.split(" = ", 1) for part in line.split("  ") if " = " in part
            )
            try:
                valid_time = datetime.datetime.strptime(fields["TIME"], _BUFKIT_TIME_FORMAT)
            except (KeyError, ValueError) as exc:
                raise DecodeError(f"Bad TIME line in {description}", component="decoder") from exc
            analyses.append(
                Analysis(
                    valid_time=valid_time,
                    description=description,
                    station=fields.get("STID"),
                )
            )
        if not analyses:
            raise DecodeError(f"No soundings in {description}", component="decoder")
        return analyses


# ---------------------------------------------------------------------------
# Archive fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def archive_root(tmp_path: Path) -> Path:
    return tmp_path / "archive"


@pytest.fixture
def archive(archive_root: Path) -> Iterator[Archive]:
    """A freshly created archive with the fake BUFKIT decoder registered."""
    arch = Archive.create(archive_root, decoders=[FakeBufkitDecoder()])
    yield arch
    arch.close()


@pytest.fixture
def kmso(archive: Archive) -> Site:
    return archive.sites.validate_or_add(Site(short_name="KMSO", long_name="Missoula"))


@pytest.fixture
def gfs(archive: Archive) -> SoundingType:
    return archive.sounding_types.validate_or_add(SoundingType.new_model("GFS", hours_between=6))


@pytest.fixture
def msla_location(archive: Archive) -> Location:
    return archive.locations.validate_or_add(
        Location(latitude=46.92, longitude=-114.08, elevation_m=972)
    )


@pytest.fixture
def init_time() -> datetime.datetime:
    return datetime.datetime(2017, 4, 1, 12, 0)
