"""Abstract base class for entity registries.

A registry normalizes records against their natural key and assigns them
stable identifiers.  The same contract covers sites (keyed by short name),
sounding types (keyed by source name), and locations (keyed by quantized
latitude, longitude, and elevation).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Hashable
from typing import Generic, TypeVar

RecordT = TypeVar("RecordT")
KeyT = TypeVar("KeyT", bound=Hashable)


# Concrete implementations: SQLiteSiteRegistry, SQLiteSoundingTypeRegistry,
# SQLiteLocationRegistry (sounding_archive/providers/registry/).
class IEntityRegistry(ABC, Generic[RecordT, KeyT]):
    """Contract for natural-key normalization of one entity kind."""

    @abstractmethod
    def validate(self, record: RecordT) -> RecordT:
        """Return the index's version of *record*.

        A record that already carries an identifier is returned unchanged.
        Otherwise the natural key is looked up and the stored record is
        returned, so values from the index win over the caller's.

        Raises
        ------
        NotFoundError
            If no row matches the natural key.
        """

    @abstractmethod
    def validate_or_add(self, record: RecordT) -> RecordT:
        """Like :meth:`validate`, but insert a new row on a miss.

        Returns the record carrying its newly assigned identifier.  A
        concurrent insert of the same natural key surfaces as
        ``sqlite3.IntegrityError`` rather than a duplicate row.
        """

    @abstractmethod
    def update(self, record: RecordT) -> RecordT:
        """Overwrite the mutable fields of the row matching *record*'s natural key.

        Returns the refreshed, valid record.

        Raises
        ------
        NotFoundError
            If no row matches the natural key.
        """

    @abstractmethod
    def all(self) -> list[RecordT]:
        """Return every record in the registry, ordered by identifier."""

    @abstractmethod
    def by_natural_key(self, key: KeyT) -> RecordT | None:
        """Look up a record by its natural key, or ``None`` if absent."""

    @abstractmethod
    def by_id(self, row_id: int) -> RecordT | None:
        """Look up a record by identifier, or ``None`` if absent."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of rows in the registry."""
