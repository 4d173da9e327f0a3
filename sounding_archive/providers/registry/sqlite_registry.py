"""Generic SQLite implementation of the validate-or-add protocol.

Subclasses describe one table -- its columns, which of them form the
natural key, which are settable after creation -- and how rows map to
records.  The lookup, insert, and update SQL is written once here.

Table and column names come from class attributes, never from callers, so
building statements with f-strings is safe.
"""

from __future__ import annotations

import sqlite3
from abc import abstractmethod
from typing import Any, ClassVar

import structlog

from sounding_archive.interfaces.registry import IEntityRegistry, KeyT, RecordT
from sounding_archive.utils.errors import NotFoundError

logger = structlog.get_logger(logger_name=__name__)


class SQLiteRegistry(IEntityRegistry[RecordT, KeyT]):
    """Natural-key registry over one SQLite table.

    Parameters
    ----------
    conn:
        An open index connection.  The registry does not own it and never
        closes it.
    """

    # Filled in by subclasses.
    table: ClassVar[str]
    entity_name: ClassVar[str]
    columns: ClassVar[tuple[str, ...]]
    key_columns: ClassVar[tuple[str, ...]]
    settable_columns: ClassVar[tuple[str, ...]]

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    # ------------------------------------------------------------------
    # Mapping hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def natural_key(self, record: RecordT) -> KeyT:
        """Extract the natural key from *record*."""

    @abstractmethod
    def _key_params(self, key: KeyT) -> tuple[Any, ...]:
        """SQL parameters matching :attr:`key_columns` for *key*."""

    @abstractmethod
    def _to_row(self, record: RecordT) -> dict[str, Any]:
        """Column values for every entry in :attr:`columns`."""

    @abstractmethod
    def _from_row(self, row: sqlite3.Row) -> RecordT:
        """Build a valid record from a row selected with ``id`` + :attr:`columns`."""

    def _describe(self, key: KeyT) -> str:
        return str(key)

    # ------------------------------------------------------------------
    # IEntityRegistry implementation
    # ------------------------------------------------------------------

    def validate(self, record: RecordT) -> RecordT:
        if record.is_known:  # type: ignore[attr-defined]
            return record

        key = self.natural_key(record)
        stored = self.by_natural_key(key)
        if stored is None:
            raise NotFoundError(
                f"No such {self.entity_name} in the index: {self._describe(key)}",
                component=self.table,
            )
        return stored

    def validate_or_add(self, record: RecordT) -> RecordT:
        if record.is_known:  # type: ignore[attr-defined]
            return record

        key = self.natural_key(record)
        stored = self.by_natural_key(key)
        if stored is not None:
            return stored

        row = self._to_row(record)
        column_list = ", ".join(self.columns)
        placeholders = ", ".join("?" for _ in self.columns)
        with self._conn:
            cursor = self._conn.execute(
                f"INSERT INTO {self.table} ({column_list}) VALUES ({placeholders})",
                tuple(row[column] for column in self.columns),
            )
        row_id = cursor.lastrowid

        logger.info(
            f"{self.entity_name}_registered",
            key=self._describe(key),
            id=row_id,
        )
        inserted = self.by_id(row_id)
        if inserted is None:
            raise NotFoundError(
                f"Inserted {self.entity_name} vanished from the index: {self._describe(key)}",
                component=self.table,
            )
        return inserted

    def update(self, record: RecordT) -> RecordT:
        key = self.natural_key(record)
        row = self._to_row(record)
        assignments = ", ".join(f"{column} = ?" for column in self.settable_columns)
        with self._conn:
            cursor = self._conn.execute(
                f"UPDATE {self.table} SET {assignments} WHERE {self._key_clause()}",
                tuple(row[column] for column in self.settable_columns) + self._key_params(key),
            )
        if cursor.rowcount == 0:
            raise NotFoundError(
                f"Cannot update {self.entity_name} not in the index: {self._describe(key)}",
                component=self.table,
            )

        logger.info(f"{self.entity_name}_updated", key=self._describe(key))
        stored = self.by_natural_key(key)
        if stored is None:
            raise NotFoundError(
                f"Updated {self.entity_name} vanished from the index: {self._describe(key)}",
                component=self.table,
            )
        return stored

    def all(self) -> list[RecordT]:
        rows = self._conn.execute(
            f"SELECT {self._select_list()} FROM {self.table} ORDER BY id"
        ).fetchall()
        return [self._from_row(row) for row in rows]

    def by_natural_key(self, key: KeyT) -> RecordT | None:
        row = self._conn.execute(
            f"SELECT {self._select_list()} FROM {self.table} WHERE {self._key_clause()}",
            self._key_params(key),
        ).fetchone()
        return self._from_row(row) if row is not None else None

    def by_id(self, row_id: int) -> RecordT | None:
        row = self._conn.execute(
            f"SELECT {self._select_list()} FROM {self.table} WHERE id = ?",
            (row_id,),
        ).fetchone()
        return self._from_row(row) if row is not None else None

    def count(self) -> int:
        row = self._conn.execute(f"SELECT COUNT(*) FROM {self.table}").fetchone()
        return row[0] if row else 0

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _select_list(self, alias: str | None = None) -> str:
        prefix = f"{alias}." if alias else ""
        return ", ".join(f"{prefix}{column}" for column in ("id", *self.columns))

    def _key_clause(self) -> str:
        return " AND ".join(f"{column} = ?" for column in self.key_columns)

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
        return f"sqlite_registry:{self.table}"
