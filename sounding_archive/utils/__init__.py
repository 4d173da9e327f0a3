"""Utility modules for the sounding archive.

- **errors** -- exception hierarchy rooted at SoundingArchiveError.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **naming** -- deterministic blob names and index timestamp encoding.
"""

# -- Domain exception hierarchy --------------------------------------------
from sounding_archive.utils.errors import (
    ArchiveLayoutError,
    ConfigurationError,
    DecodeError,
    EncodingMismatchError,
    InvalidEntityError,
    NotFoundError,
    SoundingArchiveError,
)

# -- Structured logging setup ----------------------------------------------
from sounding_archive.utils.logging import configure_logging, get_logger

__all__ = [
    "ArchiveLayoutError",
    "ConfigurationError",
    "DecodeError",
    "EncodingMismatchError",
    "InvalidEntityError",
    "NotFoundError",
    "SoundingArchiveError",
    "configure_logging",
    "get_logger",
]
