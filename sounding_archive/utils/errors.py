"""Custom exception hierarchy for the sounding archive.

All archive exceptions inherit from :class:`SoundingArchiveError`, which
carries an optional ``component`` naming the part of the archive that
raised it (e.g. "sites", "files", "blob_store").

    SoundingArchiveError  (base -- catch-all for any archive error)
    +-- NotFoundError           (natural-key or logical-key lookup miss)
    +-- InvalidEntityError      (entity has not been validated against the index)
    +-- EncodingMismatchError   (no decoder for a sounding type's file encoding)
    +-- DecodeError             (decoder could not parse a payload)
    +-- ArchiveLayoutError      (root directory / index file layout problems)
    +-- ConfigurationError      (invalid settings or YAML config)

Filesystem (``OSError``) and index (``sqlite3.Error``) failures are not
wrapped; they reach the caller unchanged.
"""


class SoundingArchiveError(Exception):
    """Base exception for all sounding archive errors.

    The ``__str__`` method prefixes the component in brackets for log
    output, e.g. ``[sites] No such site in the index: KMSO``.
    """

    def __init__(
        self,
        message: str = "An unexpected archive error occurred",
        component: str | None = None,
    ) -> None:
        self._message = message
        self._component = component
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def component(self) -> str | None:
        return self._component

    def __str__(self) -> str:
        if self._component:
            return f"[{self._component}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Index lookup errors
# ---------------------------------------------------------------------------

class NotFoundError(SoundingArchiveError):
    """Raised when a natural key or a (site, type, init_time) key is not in the index."""

    def __init__(
        self,
        message: str = "Not found in the index",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)


class InvalidEntityError(SoundingArchiveError):
    """Raised when an operation is handed an entity that is not known to the index.

    Callers must run the entity through its registry (``validate`` or
    ``validate_or_add``) before passing it to operations that write files.
    """

    def __init__(
        self,
        message: str = "Entity has not been validated against the index",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)


# ---------------------------------------------------------------------------
# Payload decoding errors
# ---------------------------------------------------------------------------

class EncodingMismatchError(SoundingArchiveError):
    """Raised when no decoder is registered for a sounding type's file encoding."""

    def __init__(
        self,
        message: str = "No decoder available for file encoding",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)


class DecodeError(SoundingArchiveError):
    """Raised by decoders when a payload cannot be parsed into analyses."""

    def __init__(
        self,
        message: str = "Failed to decode sounding payload",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)


# ---------------------------------------------------------------------------
# Layout / configuration errors
# ---------------------------------------------------------------------------

class ArchiveLayoutError(SoundingArchiveError):
    """Raised when the archive root, index file, or blob directory is not as expected."""

    def __init__(
        self,
        message: str = "Invalid archive layout",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)


class ConfigurationError(SoundingArchiveError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        component: str | None = None,
    ) -> None:
        super().__init__(message=message, component=component)
