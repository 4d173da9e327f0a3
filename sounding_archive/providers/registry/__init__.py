from sounding_archive.providers.registry.sqlite_location_registry import SQLiteLocationRegistry
from sounding_archive.providers.registry.sqlite_registry import SQLiteRegistry
from sounding_archive.providers.registry.sqlite_site_registry import SQLiteSiteRegistry
from sounding_archive.providers.registry.sqlite_sounding_type_registry import (
    SQLiteSoundingTypeRegistry,
)

__all__ = [
    "SQLiteLocationRegistry",
    "SQLiteRegistry",
    "SQLiteSiteRegistry",
    "SQLiteSoundingTypeRegistry",
]
