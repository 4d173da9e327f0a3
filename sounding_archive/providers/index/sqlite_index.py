"""SQLite index schema and connection setup.

The index holds four tables -- ``types``, ``sites``, ``locations`` and the
``files`` join table -- plus the unique indexes that enforce each natural
key.  Those unique constraints are what turn a lost insert race into an
``sqlite3.IntegrityError`` instead of a duplicate row.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import structlog

logger = structlog.get_logger(logger_name=__name__)

SCHEMA_VERSION = 1

_CREATE_INDEX_SQL = """\
CREATE TABLE IF NOT EXISTS types (
    id        INTEGER PRIMARY KEY,
    type      TEXT    UNIQUE NOT NULL,  -- GFS, NAM, NAM4KM, RAWINSONDE, ...
    file_type TEXT    NOT NULL,         -- BUFKIT, BUFR
    interval  INTEGER DEFAULT NULL,     -- hours between runs/launches
    observed  INTEGER NOT NULL          -- 0 model, 1 observed
);

CREATE TABLE IF NOT EXISTS sites (
    id                   INTEGER PRIMARY KEY,
    short_name           TEXT    UNIQUE NOT NULL,
    long_name            TEXT    DEFAULT NULL,
    state                TEXT    DEFAULT NULL,
    notes                TEXT    DEFAULT NULL,
    mobile_sounding_site INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS locations (
    id                INTEGER PRIMARY KEY,
    latitude          INTEGER NOT NULL,  -- decimal degrees * 1,000,000
    longitude         INTEGER NOT NULL,  -- decimal degrees * 1,000,000
    elevation_meters  INTEGER NOT NULL,
    tz_offset_seconds INTEGER DEFAULT NULL
);

CREATE TABLE IF NOT EXISTS files (
    type_id     INTEGER NOT NULL REFERENCES types(id),
    site_id     INTEGER NOT NULL REFERENCES sites(id),
    location_id INTEGER NOT NULL REFERENCES locations(id),
    init_time   TEXT    NOT NULL,
    file_name   TEXT    UNIQUE NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS fname ON files(file_name);
CREATE UNIQUE INDEX IF NOT EXISTS no_dups_files ON files(type_id, site_id, init_time);
CREATE UNIQUE INDEX IF NOT EXISTS no_dups_locations
    ON locations(latitude, longitude, elevation_meters);
"""


def connect_index(db_path: str | Path, create: bool = False) -> sqlite3.Connection:
    """Open the index database.

    With ``create=False`` the file must already exist; SQLite's ``mode=rw``
    URI makes the open fail instead of silently creating an empty index.
    Foreign keys are enforced on every connection.
    """
    path = Path(db_path)
    mode = "rwc" if create else "rw"
    conn = sqlite3.connect(f"{path.resolve().as_uri()}?mode={mode}", uri=True)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def create_index(conn: sqlite3.Connection) -> None:
    """Create all tables and uniqueness indexes.  Safe to run twice."""
    with conn:
        conn.executescript(_CREATE_INDEX_SQL)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    logger.debug("index_schema_created", schema_version=SCHEMA_VERSION)
