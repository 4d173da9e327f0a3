"""SQLite registry for locations.

The natural key is (latitude, longitude, elevation).  Coordinates are
stored as integer microdegrees, and every lookup quantizes its arguments
the same way inserts do, so a float that round-trips through the index
still matches exactly.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from sounding_archive.models.entities import Location, dequantize_degrees, quantize_degrees
from sounding_archive.providers.registry.sqlite_registry import SQLiteRegistry

LocationKey = tuple[float, float, int]


class SQLiteLocationRegistry(SQLiteRegistry[Location, LocationKey]):
    """Locations table registry.  Only the UTC offset is settable."""

    table = "locations"
    entity_name = "location"
    columns = ("latitude", "longitude", "elevation_meters", "tz_offset_seconds")
    key_columns = ("latitude", "longitude", "elevation_meters")
    settable_columns = ("tz_offset_seconds",)

    def natural_key(self, record: Location) -> LocationKey:
        return (record.latitude, record.longitude, record.elevation_m)

    def _key_params(self, key: LocationKey) -> tuple[Any, ...]:
        latitude, longitude, elevation_m = key
        return (quantize_degrees(latitude), quantize_degrees(longitude), int(elevation_m))

    def _describe(self, key: LocationKey) -> str:
        latitude, longitude, elevation_m = key
        return f"lat: {latitude}, lon: {longitude}, elev: {elevation_m}"

    def _to_row(self, record: Location) -> dict[str, Any]:
        latitude, longitude, elevation_m = self._key_params(self.natural_key(record))
        return {
            "latitude": latitude,
            "longitude": longitude,
            "elevation_meters": elevation_m,
            "tz_offset_seconds": record.tz_offset_seconds,
        }

    def _from_row(self, row: sqlite3.Row) -> Location:
        return Location(
            id=row["id"],
            latitude=dequantize_degrees(row["latitude"]),
            longitude=dequantize_degrees(row["longitude"]),
            elevation_m=row["elevation_meters"],
            tz_offset_seconds=row["tz_offset_seconds"],
        )

    def for_site_and_type(self, site_id: int, type_id: int) -> list[Location]:
        """Distinct locations referenced by the site's files of one type."""
        rows = self._conn.execute(
            f"""
            SELECT {self._select_list("l")}
            FROM locations l
            WHERE l.id IN (
                SELECT DISTINCT location_id FROM files WHERE site_id = ? AND type_id = ?
            )
            ORDER BY l.id
            """,
            (site_id, type_id),
        ).fetchall()
        return [self._from_row(row) for row in rows]
