from sounding_archive.providers.index.sqlite_index import SCHEMA_VERSION, connect_index, create_index

__all__ = ["SCHEMA_VERSION", "connect_index", "create_index"]
