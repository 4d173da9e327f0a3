"""SQLite registry for sites, keyed by upper-cased short name."""

from __future__ import annotations

import sqlite3
from typing import Any

from sounding_archive.models.entities import Site, StateProv
from sounding_archive.providers.registry.sqlite_registry import SQLiteRegistry


def _parse_state(value: str | None) -> StateProv | None:
    # Unknown abbreviations in old indexes read back as "no state".
    if value is None:
        return None
    try:
        return StateProv(value)
    except ValueError:
        return None


class SQLiteSiteRegistry(SQLiteRegistry[Site, str]):
    """Sites table registry."""

    table = "sites"
    entity_name = "site"
    columns = ("short_name", "long_name", "state", "notes", "mobile_sounding_site")
    key_columns = ("short_name",)
    settable_columns = ("long_name", "state", "notes", "mobile_sounding_site")

    def natural_key(self, record: Site) -> str:
        return record.short_name

    def _key_params(self, key: str) -> tuple[Any, ...]:
        return (key.strip().upper(),)

    def _to_row(self, record: Site) -> dict[str, Any]:
        return {
            "short_name": record.short_name,
            "long_name": record.long_name,
            "state": record.state.value if record.state is not None else None,
            "notes": record.notes,
            "mobile_sounding_site": int(record.is_mobile),
        }

    def _from_row(self, row: sqlite3.Row) -> Site:
        return Site(
            id=row["id"],
            short_name=row["short_name"],
            long_name=row["long_name"],
            state=_parse_state(row["state"]),
            notes=row["notes"],
            is_mobile=bool(row["mobile_sounding_site"]),
        )
