"""Gzip-compressed blob store in one flat directory.

Writes go to a hidden temporary file in the same directory and are moved
into place with ``os.replace``, so a crash or compression error never
leaves a truncated blob under its final name.  A leftover temporary file
is just an unindexed file that ``Archive.check`` reports.
"""

from __future__ import annotations

import gzip
import io
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

import structlog

from sounding_archive.interfaces.blob_store import BlobSource, IBlobStore

logger = structlog.get_logger(logger_name=__name__)

_COPY_BUFFER_SIZE = 1024 * 1024


def _validate_name(name: str) -> str:
    if not name or name in {".", ".."}:
        raise ValueError(f"Invalid blob name: {name!r}")
    if "/" in name or "\\" in name or os.sep in name:
        raise ValueError(f"Blob name must be a file name, not a path: {name!r}")
    return name


class GzipBlobStore(IBlobStore):
    """Stores each payload as a gzip member under ``directory/name``.

    Parameters
    ----------
    directory:
        The managed blob directory.  It must already exist.
    compression_level:
        gzip level from 1 (fastest) to 9 (smallest).
    """

    def __init__(self, directory: str | Path, compression_level: int = 6) -> None:
        if not 1 <= compression_level <= 9:
            raise ValueError(f"compression_level must be 1-9, got {compression_level}")
        self._directory = Path(directory)
        self._compression_level = compression_level

    @property
    def directory(self) -> Path:
        return self._directory

    # ------------------------------------------------------------------
    # IBlobStore implementation
    # ------------------------------------------------------------------

    def store(self, source: BlobSource, name: str) -> None:
        """Compress *source* into *name* via a temporary file and atomic rename."""
        destination = self._path(name)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{name}.", suffix=".partial", dir=self._directory)
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as raw:
                # Empty filename and zero mtime keep the blob bytes a pure
                # function of the payload.
                with gzip.GzipFile(
                    filename="",
                    mode="wb",
                    compresslevel=self._compression_level,
                    fileobj=raw,
                    mtime=0,
                ) as compressor:
                    with self._open_source(source) as reader:
                        shutil.copyfileobj(reader, compressor, _COPY_BUFFER_SIZE)
                raw.flush()
                os.fsync(raw.fileno())
            os.replace(tmp_path, destination)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise

        logger.debug("blob_stored", name=name, compressed_bytes=destination.stat().st_size)

    def load(self, name: str) -> bytes:
        with gzip.open(self._path(name), "rb") as reader:
            return reader.read()

    def open_stream(self, name: str) -> BinaryIO:
        return gzip.open(self._path(name), "rb")  # type: ignore[return-value]

    def delete(self, name: str, missing_ok: bool = False) -> None:
        self._path(name).unlink(missing_ok=missing_ok)
        logger.debug("blob_deleted", name=name)

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def list_names(self) -> set[str]:
        return {entry.name for entry in self._directory.iterdir() if entry.is_file()}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path(self, name: str) -> Path:
        return self._directory / _validate_name(name)

    @staticmethod
    def _open_source(source: BlobSource) -> BinaryIO:
        if isinstance(source, (bytes, bytearray, memoryview)):
            return io.BytesIO(bytes(source))
        if isinstance(source, (str, os.PathLike)):
            return open(source, "rb")
        # Caller-owned stream: wrap so leaving the ``with`` block does not close it.
        return _Borrowed(source)

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""
        return "gzip_blob_store"


class _Borrowed(io.RawIOBase):
    """Read-through view of a stream the store must not close."""

    def __init__(self, stream: BinaryIO) -> None:
        super().__init__()
        self._stream = stream

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def readinto(self, buffer) -> int:  # noqa: ANN001
        data = self._stream.read(len(buffer))
        buffer[: len(data)] = data
        return len(data)
