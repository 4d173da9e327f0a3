"""sounding-archive: a local, indexed archive of compressed atmospheric soundings.

Typical use::

    from sounding_archive import Archive, Location, Site, SoundingType

    with Archive.connect("/data/soundings") as arch:
        site = arch.sites.validate_or_add(Site(short_name="KMSO"))
        gfs = arch.sounding_types.validate(SoundingType(source="GFS"))
        loc = arch.locations.validate_or_add(
            Location(latitude=46.92, longitude=-114.08, elevation_m=972)
        )
        arch.add_file(site, gfs, loc, init_time, "gfs_kmso.buf")
        print(arch.inventory(site).missing(gfs))
"""

from sounding_archive.models import (
    Analysis,
    FileRecord,
    FileType,
    Inventory,
    Location,
    Site,
    SoundingType,
    StateProv,
)
from sounding_archive.services import Archive, InventoryService
from sounding_archive.utils.errors import SoundingArchiveError

__version__ = "0.1.0"

__all__ = [
    "Analysis",
    "Archive",
    "FileRecord",
    "FileType",
    "Inventory",
    "InventoryService",
    "Location",
    "Site",
    "SoundingArchiveError",
    "SoundingType",
    "StateProv",
    "__version__",
]
