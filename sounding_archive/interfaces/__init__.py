"""Public interface definitions for the archive's pluggable parts.

Concrete adapters implement these interfaces and are injected into the
:class:`~sounding_archive.services.archive.Archive` at construction.

CONCRETE PROVIDER MAP:
    Interface          ->  Concrete implementations
    ---------------------------------------------------------------
    IEntityRegistry    ->  SQLiteSiteRegistry, SQLiteSoundingTypeRegistry,
                           SQLiteLocationRegistry
    IBlobStore         ->  GzipBlobStore
    ISoundingDecoder   ->  supplied by callers (payload grammars are external)
"""

from sounding_archive.interfaces.blob_store import BlobSource, IBlobStore
from sounding_archive.interfaces.decoder import ISoundingDecoder
from sounding_archive.interfaces.registry import IEntityRegistry

__all__ = [
    "BlobSource",
    "IBlobStore",
    "IEntityRegistry",
    "ISoundingDecoder",
]
