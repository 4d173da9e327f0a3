"""SQLite registry for sounding types, keyed by upper-cased source name."""

from __future__ import annotations

import sqlite3
from typing import Any

from sounding_archive.models.entities import FileType, SoundingType
from sounding_archive.providers.registry.sqlite_registry import SQLiteRegistry


class SQLiteSoundingTypeRegistry(SQLiteRegistry[SoundingType, str]):
    """Types table registry.

    The file encoding is fixed at registration; only the cadence and the
    observed flag are settable afterwards.
    """

    table = "types"
    entity_name = "sounding_type"
    columns = ("type", "file_type", "interval", "observed")
    key_columns = ("type",)
    settable_columns = ("interval", "observed")

    def natural_key(self, record: SoundingType) -> str:
        return record.source

    def _key_params(self, key: str) -> tuple[Any, ...]:
        return (key.strip().upper(),)

    def _to_row(self, record: SoundingType) -> dict[str, Any]:
        return {
            "type": record.source,
            "file_type": record.file_type.value,
            "interval": record.hours_between,
            "observed": int(record.observed),
        }

    def _from_row(self, row: sqlite3.Row) -> SoundingType:
        return SoundingType(
            id=row["id"],
            source=row["type"],
            file_type=FileType(row["file_type"]),
            hours_between=row["interval"],
            observed=bool(row["observed"]),
        )

    def for_site(self, site_id: int) -> list[SoundingType]:
        """Every sounding type with at least one file at the site."""
        rows = self._conn.execute(
            f"""
            SELECT {self._select_list("t")}
            FROM types t
            WHERE t.id IN (SELECT DISTINCT type_id FROM files WHERE site_id = ?)
            ORDER BY t.type
            """,
            (site_id,),
        ).fetchall()
        return [self._from_row(row) for row in rows]
