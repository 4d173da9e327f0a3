"""Archive services: the Archive facade and the inventory engine."""

from sounding_archive.services.archive import Archive
from sounding_archive.services.inventory_service import InventoryService, find_missing_ranges

__all__ = ["Archive", "InventoryService", "find_missing_ranges"]
