"""Archive facade -- registries, blob store, and the ``files`` index.

The archive root holds the SQLite index and the blob directory side by
side::

    <root>/
        index.sqlite
        files/
            2017-04-01T0000Z_GFS_KMSO.gz
            ...

Ingestion flows one way: raw bytes -> validated entities -> compressed
blob -> index row.  Queries flow the other way: index row -> decompressed
bytes -> decoded analyses (or an Inventory).

CRASH-RECOVERY CONTRACT:
    Nothing here is atomic across the filesystem and the index.  The two
    steps are always ordered blob first, index second:

        add_file:  write blob  -> write index row
        remove:    delete blob -> delete index row

    An interrupted add leaves an *orphaned blob*; it shows up in the second
    list returned by :meth:`Archive.check` and is safe to delete with
    :meth:`Archive.remove_from_data_store`.  An interrupted remove leaves a
    row whose blob is gone; it shows up in the first list, and running
    :meth:`Archive.remove` again (missing blobs are tolerated) finishes it.

One Archive owns one connection and is meant for a single writer.
Multiple writer processes must serialize access to a root externally.
"""

from __future__ import annotations

import datetime
import shutil
import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import BinaryIO

import structlog

from sounding_archive.interfaces.blob_store import BlobSource, IBlobStore
from sounding_archive.interfaces.decoder import ISoundingDecoder
from sounding_archive.models.analysis import Analysis
from sounding_archive.models.entities import FileType, Location, Site, SoundingType
from sounding_archive.models.files import FileRecord
from sounding_archive.models.inventory import Inventory, TimeRange
from sounding_archive.providers.blob_store.gzip_blob_store import GzipBlobStore
from sounding_archive.providers.index.sqlite_index import connect_index, create_index
from sounding_archive.providers.registry.sqlite_location_registry import SQLiteLocationRegistry
from sounding_archive.providers.registry.sqlite_site_registry import SQLiteSiteRegistry
from sounding_archive.providers.registry.sqlite_sounding_type_registry import (
    SQLiteSoundingTypeRegistry,
)
from sounding_archive.services.inventory_service import InventoryService
from sounding_archive.utils.errors import (
    ArchiveLayoutError,
    EncodingMismatchError,
    InvalidEntityError,
    NotFoundError,
)
from sounding_archive.utils.naming import (
    compressed_file_name,
    file_name,
    format_index_time,
    parse_index_time,
)

logger = structlog.get_logger(logger_name=__name__)

_FILE_COLUMNS = "f.type_id, f.site_id, f.location_id, f.init_time, f.file_name"

_LOOKUP_FILE_SQL = f"""\
SELECT {_FILE_COLUMNS}, t.file_type
FROM files f
    JOIN sites s ON s.id = f.site_id
    JOIN types t ON t.id = f.type_id
WHERE s.short_name = ? AND t.type = ? AND f.init_time = ?;
"""

_INIT_TIMES_SQL = """\
SELECT f.init_time
FROM files f
    JOIN sites s ON s.id = f.site_id
    JOIN types t ON t.id = f.type_id
WHERE s.short_name = ? AND t.type = ?
ORDER BY f.init_time ASC;
"""

_TIME_RANGE_SQL = """\
SELECT MIN(f.init_time), MAX(f.init_time)
FROM files f
    JOIN sites s ON s.id = f.site_id
    JOIN types t ON t.id = f.type_id
WHERE s.short_name = ? AND t.type = ?;
"""

_PREVIOUS_NAME_SQL = """\
SELECT file_name FROM files WHERE type_id = ? AND site_id = ? AND init_time = ?;
"""

# A later add for an occupied (type, site, init_time) replaces the old row.
_UPSERT_FILE_SQL = """\
INSERT OR REPLACE INTO files (type_id, site_id, location_id, init_time, file_name)
VALUES (?, ?, ?, ?, ?);
"""

_DELETE_FILE_SQL = "DELETE FROM files WHERE file_name = ?;"

_ALL_FILE_NAMES_SQL = "SELECT file_name FROM files;"

_COUNT_FILES_SQL = "SELECT COUNT(*) FROM files;"


class Archive:
    """A local archive of compressed sounding files indexed in SQLite.

    Use :meth:`create` for a new archive and :meth:`connect` for an
    existing one.  Registry operations are reached through the
    :attr:`sites`, :attr:`sounding_types` and :attr:`locations` properties::

        with Archive.connect("/data/soundings") as arch:
            kmso = arch.sites.validate_or_add(Site(short_name="kmso"))
            gfs = arch.sounding_types.validate(SoundingType.new_model("gfs"))

    Parameters
    ----------
    root:
        Archive root directory.
    conn:
        Open index connection; the archive owns it and closes it in :meth:`close`.
    blob_store:
        Store for the compressed payloads.
    decoders:
        Payload decoders, at most one per :class:`FileType`.
    """

    FILE_DIR = "files"
    INDEX = "index.sqlite"

    def __init__(
        self,
        root: str | Path,
        conn: sqlite3.Connection,
        blob_store: IBlobStore,
        decoders: Iterable[ISoundingDecoder] = (),
    ) -> None:
        self._root = Path(root)
        self._conn = conn
        self._blobs = blob_store
        self._sites = SQLiteSiteRegistry(conn)
        self._types = SQLiteSoundingTypeRegistry(conn)
        self._locations = SQLiteLocationRegistry(conn)
        self._decoders: dict[FileType, ISoundingDecoder] = {}
        for decoder in decoders:
            self.register_decoder(decoder)

    # ------------------------------------------------------------------
    # Creating, connecting, and closing
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        root: str | Path,
        *,
        compression_level: int = 6,
        decoders: Iterable[ISoundingDecoder] = (),
        sounding_types: Iterable[SoundingType] = (),
    ) -> Archive:
        """Initialize a new archive at *root*.

        *root* must not exist or must be an empty directory.  Any
        *sounding_types* given are registered immediately.

        Raises
        ------
        ArchiveLayoutError
            If *root* is a file or a non-empty directory.
        """
        root = Path(root)
        if root.exists() and (not root.is_dir() or any(root.iterdir())):
            raise ArchiveLayoutError(
                f"Archive root must be missing or empty: {root}",
                component="archive",
            )

        file_dir = root / cls.FILE_DIR
        file_dir.mkdir(parents=True)
        conn = connect_index(root / cls.INDEX, create=True)
        create_index(conn)

        archive = cls(
            root,
            conn,
            GzipBlobStore(file_dir, compression_level=compression_level),
            decoders=decoders,
        )
        for sounding_type in sounding_types:
            archive.sounding_types.validate_or_add(sounding_type)

        logger.info("archive_created", root=str(root))
        return archive

    @classmethod
    def connect(
        cls,
        root: str | Path,
        *,
        compression_level: int = 6,
        decoders: Iterable[ISoundingDecoder] = (),
    ) -> Archive:
        """Open an existing archive.

        Raises
        ------
        ArchiveLayoutError
            If the index file or the blob directory is missing.
        """
        root = Path(root)
        file_dir = root / cls.FILE_DIR
        index_path = root / cls.INDEX
        if not index_path.is_file() or not file_dir.is_dir():
            raise ArchiveLayoutError(
                f"Not an archive (missing {cls.INDEX} or {cls.FILE_DIR}/): {root}",
                component="archive",
            )

        conn = connect_index(index_path)
        logger.debug("archive_connected", root=str(root))
        return cls(
            root,
            conn,
            GzipBlobStore(file_dir, compression_level=compression_level),
            decoders=decoders,
        )

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> Archive:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Registries and decoders
    # ------------------------------------------------------------------

    @property
    def sites(self) -> SQLiteSiteRegistry:
        return self._sites

    @property
    def sounding_types(self) -> SQLiteSoundingTypeRegistry:
        return self._types

    @property
    def locations(self) -> SQLiteLocationRegistry:
        return self._locations

    def register_decoder(self, decoder: ISoundingDecoder) -> None:
        """Use *decoder* for payloads of its file type, replacing any previous one."""
        self._decoders[decoder.file_type] = decoder

    # ------------------------------------------------------------------
    # Adding, retrieving, and removing files
    # ------------------------------------------------------------------

    def add_file(
        self,
        site: Site,
        sounding_type: SoundingType,
        location: Location,
        init_time: datetime.datetime,
        source: BlobSource,
    ) -> FileRecord:
        """Compress *source* into the archive and index it.

        All three entities must already be valid (returned by a registry).
        An existing file for the same (site, type, init_time) is replaced.

        Raises
        ------
        InvalidEntityError
            If an entity has not been validated.
        """
        self._require_known(site, "site")
        self._require_known(sounding_type, "sounding type")
        self._require_known(location, "location")

        stored_name = compressed_file_name(site, sounding_type, init_time)
        time_text = format_index_time(init_time)
        previous = self._conn.execute(
            _PREVIOUS_NAME_SQL, (sounding_type.id, site.id, time_text)
        ).fetchone()

        # Blob first, index second: see the module docstring.
        self._blobs.store(source, stored_name)
        with self._conn:
            self._conn.execute(
                _UPSERT_FILE_SQL,
                (sounding_type.id, site.id, location.id, time_text, stored_name),
            )

        if previous is not None and previous["file_name"] != stored_name:
            self._blobs.delete(previous["file_name"], missing_ok=True)

        logger.info(
            "file_added",
            site=site.short_name,
            sounding_type=sounding_type.source,
            init_time=time_text,
            file_name=stored_name,
            replaced=previous is not None,
        )
        return FileRecord(
            type_id=sounding_type.id,
            site_id=site.id,
            location_id=location.id,
            init_time=parse_index_time(time_text),
            file_name=stored_name,
        )

    def retrieve(
        self,
        site: Site,
        sounding_type: SoundingType,
        init_time: datetime.datetime,
    ) -> list[Analysis]:
        """Load, decompress, and decode the file for this key.

        Raises
        ------
        NotFoundError
            If no file is indexed for the key.
        EncodingMismatchError
            If no decoder is registered for the type's file encoding.
        """
        row = self._require_file(site, sounding_type, init_time)
        file_type = FileType(row["file_type"])
        decoder = self._decoders.get(file_type)
        if decoder is None:
            raise EncodingMismatchError(
                f"No decoder registered for {file_type.value} files "
                f"({sounding_type.source})",
                component="files",
            )

        data = self._blobs.load(row["file_name"])
        description = self._uncompressed_name(row)
        return decoder.decode(data, description)

    def most_recent_file(self, site: Site, sounding_type: SoundingType) -> list[Analysis]:
        """Retrieve the file with the latest init time for (site, type)."""
        init_time = self.most_recent_valid_time(site, sounding_type)
        return self.retrieve(site, sounding_type, init_time)

    def export(
        self,
        site: Site,
        sounding_type: SoundingType,
        init_time: datetime.datetime,
    ) -> BinaryIO:
        """Open the original payload as a decompressing stream.

        The bytes read are identical to those passed to :meth:`add_file`.
        The caller must close the stream.
        """
        row = self._require_file(site, sounding_type, init_time)
        return self._blobs.open_stream(row["file_name"])

    def export_to(
        self,
        site: Site,
        sounding_type: SoundingType,
        init_time: datetime.datetime,
        export_dir: str | Path,
    ) -> Path:
        """Write the uncompressed payload into *export_dir* and return its path."""
        row = self._require_file(site, sounding_type, init_time)
        destination = Path(export_dir) / self._uncompressed_name(row)
        with self._blobs.open_stream(row["file_name"]) as reader, open(destination, "wb") as writer:
            shutil.copyfileobj(reader, writer)

        logger.info("file_exported", file_name=row["file_name"], destination=str(destination))
        return destination

    def remove(
        self,
        site: Site,
        sounding_type: SoundingType,
        init_time: datetime.datetime,
    ) -> None:
        """Delete the blob and then the index row for this key.

        A blob that is already gone (deleted out-of-band) is not an error;
        the index row is still removed.

        Raises
        ------
        NotFoundError
            If no file is indexed for the key.
        """
        row = self._require_file(site, sounding_type, init_time)
        self._remove_file(row["file_name"])
        logger.info(
            "file_removed",
            site=site.short_name,
            sounding_type=sounding_type.source,
            init_time=row["init_time"],
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def file_exists(
        self,
        site: Site,
        sounding_type: SoundingType,
        init_time: datetime.datetime,
    ) -> bool:
        """True if a file is indexed for the key.  Unknown sites/types give False."""
        return self._lookup(site, sounding_type, init_time) is not None

    def file_record(
        self,
        site: Site,
        sounding_type: SoundingType,
        init_time: datetime.datetime,
    ) -> FileRecord:
        """The index row for this key.  Raises NotFoundError if absent."""
        row = self._require_file(site, sounding_type, init_time)
        return FileRecord(
            type_id=row["type_id"],
            site_id=row["site_id"],
            location_id=row["location_id"],
            init_time=parse_index_time(row["init_time"]),
            file_name=row["file_name"],
        )

    def count(self) -> int:
        """Total number of indexed files."""
        row = self._conn.execute(_COUNT_FILES_SQL).fetchone()
        return row[0] if row else 0

    def init_times(self, site: Site, sounding_type: SoundingType) -> list[datetime.datetime]:
        """Every stored init time for (site, type), oldest first."""
        rows = self._conn.execute(
            _INIT_TIMES_SQL, (site.short_name, sounding_type.source)
        ).fetchall()
        return [parse_index_time(row[0]) for row in rows]

    def time_range(self, site: Site, sounding_type: SoundingType) -> TimeRange | None:
        """(earliest, latest) init time for (site, type), or None if there are no files."""
        first, last = self._conn.execute(
            _TIME_RANGE_SQL, (site.short_name, sounding_type.source)
        ).fetchone()
        if first is None:
            return None
        return parse_index_time(first), parse_index_time(last)

    def most_recent_valid_time(
        self,
        site: Site,
        sounding_type: SoundingType,
    ) -> datetime.datetime:
        """Latest init time stored for (site, type).

        Raises
        ------
        NotFoundError
            If there are no files for (site, type).
        """
        time_range = self.time_range(site, sounding_type)
        if time_range is None:
            raise NotFoundError(
                f"No files for {sounding_type.source} at {site.short_name}",
                component="files",
            )
        return time_range[1]

    def sounding_types_for_site(self, site: Site) -> list[SoundingType]:
        """Sounding types with at least one file at *site*, sorted by source."""
        stored = self._resolve_site(site)
        if stored is None:
            return []
        return self._types.for_site(stored.id)

    def locations_for(self, site: Site, sounding_type: SoundingType) -> list[Location]:
        """Distinct locations of the files for (site, type)."""
        stored_site = self._resolve_site(site)
        stored_type = self._resolve_type(sounding_type)
        if stored_site is None or stored_type is None:
            return []
        return self._locations.for_site_and_type(stored_site.id, stored_type.id)

    def inventory(self, site: Site) -> Inventory:
        """Coverage, missing runs, and locations for *site*."""
        return InventoryService(self).compute(site)

    # ------------------------------------------------------------------
    # Consistency check and repair
    # ------------------------------------------------------------------

    def check(self) -> tuple[list[str], list[str]]:
        """Compare the index against the blob directory.

        Returns
        -------
        tuple[list[str], list[str]]
            ``(missing_on_disk, missing_from_index)``: names indexed but
            absent from the directory, and names present in the directory
            but not indexed.  Both sorted.  Nothing is repaired.
        """
        index_names = {row[0] for row in self._conn.execute(_ALL_FILE_NAMES_SQL)}
        disk_names = self._blobs.list_names()

        missing_on_disk = sorted(index_names - disk_names)
        missing_from_index = sorted(disk_names - index_names)

        logger.info(
            "archive_checked",
            indexed=len(index_names),
            on_disk=len(disk_names),
            missing_on_disk=len(missing_on_disk),
            missing_from_index=len(missing_from_index),
        )
        return missing_on_disk, missing_from_index

    def remove_from_index(self, file_names: Iterable[str]) -> int:
        """Drop index rows by stored name, leaving blobs alone.  Returns rows removed."""
        removed = 0
        with self._conn:
            for name in file_names:
                removed += self._conn.execute(_DELETE_FILE_SQL, (name,)).rowcount
        logger.info("index_rows_removed", count=removed)
        return removed

    def remove_from_data_store(self, file_names: Iterable[str]) -> int:
        """Delete unindexed blobs.  Returns blobs removed.

        Raises
        ------
        ValueError
            If any name is still referenced by the index.  Nothing is
            deleted in that case.
        """
        names = list(file_names)
        indexed = {row[0] for row in self._conn.execute(_ALL_FILE_NAMES_SQL)}
        still_indexed = sorted(set(names) & indexed)
        if still_indexed:
            raise ValueError(f"Files still referenced by the index: {still_indexed}")

        removed = 0
        for name in names:
            if self._blobs.exists(name):
                self._blobs.delete(name)
                removed += 1
        logger.info("blobs_removed", count=removed)
        return removed

    def remove_files(self, file_names: Iterable[str]) -> None:
        """Delete blobs and their index rows by stored name."""
        for name in file_names:
            self._remove_file(name)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_known(entity: Site | SoundingType | Location, kind: str) -> None:
        if not entity.is_known:
            raise InvalidEntityError(
                f"{kind} must be validated against the index first: {entity!r}",
                component="files",
            )

    def _resolve_site(self, site: Site) -> Site | None:
        return site if site.is_known else self._sites.by_natural_key(site.short_name)

    def _resolve_type(self, sounding_type: SoundingType) -> SoundingType | None:
        if sounding_type.is_known:
            return sounding_type
        return self._types.by_natural_key(sounding_type.source)

    def _lookup(
        self,
        site: Site,
        sounding_type: SoundingType,
        init_time: datetime.datetime,
    ) -> sqlite3.Row | None:
        return self._conn.execute(
            _LOOKUP_FILE_SQL,
            (site.short_name, sounding_type.source, format_index_time(init_time)),
        ).fetchone()

    def _require_file(
        self,
        site: Site,
        sounding_type: SoundingType,
        init_time: datetime.datetime,
    ) -> sqlite3.Row:
        row = self._lookup(site, sounding_type, init_time)
        if row is None:
            raise NotFoundError(
                f"No {sounding_type.source} file for {site.short_name} "
                f"at {format_index_time(init_time)}",
                component="files",
            )
        return row

    def _uncompressed_name(self, row: sqlite3.Row) -> str:
        site = self._sites.by_id(row["site_id"])
        sounding_type = self._types.by_id(row["type_id"])
        if site is None or sounding_type is None:
            raise NotFoundError(
                f"Index row for {row['file_name']} references a missing site or type",
                component="files",
            )
        return file_name(site, sounding_type, parse_index_time(row["init_time"]))

    def _remove_file(self, name: str) -> None:
        # Blob first, index second: see the module docstring.
        self._blobs.delete(name, missing_ok=True)
        with self._conn:
            self._conn.execute(_DELETE_FILE_SQL, (name,))
