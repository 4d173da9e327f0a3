"""Abstract base class for sounding payload decoders.

Decoding the textual (BUFKIT) or binary (BUFR) grammars lives outside the
archive.  ``Archive.retrieve`` picks a decoder by the sounding type's
declared :class:`~sounding_archive.models.entities.FileType` and hands it
the decompressed bytes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from sounding_archive.models.analysis import Analysis
from sounding_archive.models.entities import FileType


class ISoundingDecoder(ABC):
    """Contract for turning raw payload bytes into analyses."""

    @property
    @abstractmethod
    def file_type(self) -> FileType:
        """The encoding this decoder understands."""

    @abstractmethod
    def decode(self, data: bytes, description: str) -> list[Analysis]:
        """Decode *data* into one analysis per valid time.

        Parameters
        ----------
        data:
            The decompressed payload, byte-for-byte as it was added.
        description:
            A label for error messages, usually the uncompressed file name.

        Raises
        ------
        DecodeError
            If the payload cannot be parsed.
        """

    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this decoder."""
        return f"{type(self).__name__}:{self.file_type.value}"
