"""Concrete adapters for the archive interfaces.

- ``index``       -- SQLite schema bootstrap and connection helper
- ``registry``    -- SQLite natural-key registries (sites, types, locations)
- ``blob_store``  -- gzip blob directory
"""
