"""Abstract base class for compressed blob storage.

A blob store owns no metadata.  Blobs are addressed only by the file name
the Archive computes, and names are opaque to the store.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import BinaryIO, Union

BlobSource = Union[bytes, BinaryIO, str, os.PathLike]


# Concrete implementation: GzipBlobStore (sounding_archive/providers/blob_store/).
class IBlobStore(ABC):
    """Contract for compressing payloads into named blobs and reading them back."""

    @abstractmethod
    def store(self, source: BlobSource, name: str) -> None:
        """Compress *source* into the blob *name*, replacing any existing blob.

        *source* may be raw bytes, a readable binary stream, or a path to a
        file.  A failure must not leave a partially written blob under *name*.
        """

    @abstractmethod
    def load(self, name: str) -> bytes:
        """Decompress the whole blob *name* into memory."""

    @abstractmethod
    def open_stream(self, name: str) -> BinaryIO:
        """Open blob *name* as a decompressing binary reader.

        The caller is responsible for closing the returned stream.
        """

    @abstractmethod
    def delete(self, name: str, missing_ok: bool = False) -> None:
        """Remove blob *name*.

        Raises ``FileNotFoundError`` if the blob does not exist, unless
        *missing_ok* is set.
        """

    @abstractmethod
    def exists(self, name: str) -> bool:
        """Return ``True`` if blob *name* is present."""

    @abstractmethod
    def list_names(self) -> set[str]:
        """Return the names of every blob physically present in the store."""
