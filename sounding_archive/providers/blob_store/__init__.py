from sounding_archive.providers.blob_store.gzip_blob_store import GzipBlobStore

__all__ = ["GzipBlobStore"]
