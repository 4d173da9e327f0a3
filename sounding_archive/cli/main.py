# =============================================================================
# sounding_archive/cli/main.py -- Archive management command line
# =============================================================================
#
# Subcommands:
#
#   create     -- initialize an empty archive, registering YAML sounding types
#   add        -- compress a sounding file into the archive
#   export     -- write a stored file back out uncompressed
#   remove     -- delete one stored file
#   check      -- report index/filesystem mismatches
#   count      -- number of indexed files
#   sites      -- list registered sites
#   types      -- list registered sounding types
#   inventory  -- coverage and missing runs for one site
#
# ROOT defaults to archive.root from the YAML config, which
# SOUNDING_ARCHIVE_ARCHIVE_ROOT overrides when set.
#
# Usage examples:
#   python -m sounding_archive.cli create /data/soundings
#   python -m sounding_archive.cli add /data/soundings gfs_kmso.buf \
#       --site KMSO --type GFS --init-time 2017-04-01T12:00 \
#       --lat 46.92 --lon -114.08 --elev 972
#   python -m sounding_archive.cli inventory /data/soundings KMSO
# =============================================================================
"""Command line front end for a sounding archive.

Usage::

    python -m sounding_archive.cli create /data/soundings
    python -m sounding_archive.cli check /data/soundings
    python -m sounding_archive.cli inventory /data/soundings KMSO
"""

from __future__ import annotations

import argparse
import datetime
import sqlite3
import sys
from collections.abc import Sequence
from typing import Any

from sounding_archive.config.loader import load_config
from sounding_archive.config.settings import Settings
from sounding_archive.models.entities import Location, Site, SoundingType
from sounding_archive.services.archive import Archive
from sounding_archive.utils.errors import SoundingArchiveError
from sounding_archive.utils.logging import configure_logging, get_logger


def _parse_init_time(value: str) -> datetime.datetime:
    """argparse type for init times: ISO 8601, optional trailing ``Z``."""
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.datetime.fromisoformat(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid init time: {value!r}") from exc


def _fmt_time(value: datetime.datetime) -> str:
    return value.strftime("%Y-%m-%d %H%MZ")


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------

def _handle_create(args: argparse.Namespace, config: dict[str, Any]) -> int:
    """Initialize a new archive."""
    with Archive.create(
        args.root,
        compression_level=config["archive"]["compression_level"],
        sounding_types=config["sounding_types"],
    ) as arch:
        types = arch.sounding_types.all()
    print(f"Created archive at {args.root}")
    print(f"  Sounding types: {', '.join(t.source for t in types) or '(none)'}")
    return 0


def _handle_add(args: argparse.Namespace, config: dict[str, Any]) -> int:
    """Add one file."""
    with _connect(args, config) as arch:
        site = arch.sites.validate_or_add(Site(short_name=args.site))
        sounding_type = arch.sounding_types.validate(SoundingType(source=args.type))
        location = arch.locations.validate_or_add(
            Location(latitude=args.lat, longitude=args.lon, elevation_m=args.elev)
        )
        record = arch.add_file(site, sounding_type, location, args.init_time, args.file)
    print(f"Added {record.file_name}")
    return 0


def _handle_export(args: argparse.Namespace, config: dict[str, Any]) -> int:
    """Write a stored file back out uncompressed."""
    with _connect(args, config) as arch:
        path = arch.export_to(
            Site(short_name=args.site),
            SoundingType(source=args.type),
            args.init_time,
            args.out,
        )
    print(f"Exported {path}")
    return 0


def _handle_remove(args: argparse.Namespace, config: dict[str, Any]) -> int:
    """Remove one stored file."""
    with _connect(args, config) as arch:
        arch.remove(Site(short_name=args.site), SoundingType(source=args.type), args.init_time)
    print("Removed")
    return 0


def _handle_check(args: argparse.Namespace, config: dict[str, Any]) -> int:
    """Report index/filesystem mismatches; exit 1 if any are found."""
    with _connect(args, config) as arch:
        missing_on_disk, missing_from_index = arch.check()

    for name in missing_on_disk:
        print(f"missing on disk:    {name}")
    for name in missing_from_index:
        print(f"missing from index: {name}")
    if missing_on_disk or missing_from_index:
        return 1
    print("Archive is consistent")
    return 0


def _handle_count(args: argparse.Namespace, config: dict[str, Any]) -> int:
    with _connect(args, config) as arch:
        print(arch.count())
    return 0


def _handle_sites(args: argparse.Namespace, config: dict[str, Any]) -> int:
    with _connect(args, config) as arch:
        sites = arch.sites.all()
    for site in sites:
        state = site.state.value if site.state else "--"
        mobile = " (mobile)" if site.is_mobile else ""
        print(f"{site.short_name:<8} {state:<3} {site.long_name or ''}{mobile}")
    return 0


def _handle_types(args: argparse.Namespace, config: dict[str, Any]) -> int:
    with _connect(args, config) as arch:
        sounding_types = arch.sounding_types.all()
    for sounding_type in sounding_types:
        kind = "observed" if sounding_type.observed else "model"
        cadence = f"{sounding_type.hours_between}h" if sounding_type.hours_between else "-"
        print(
            f"{sounding_type.source:<12} {sounding_type.file_type.value:<7} "
            f"{kind:<9} {cadence}"
        )
    return 0


def _handle_inventory(args: argparse.Namespace, config: dict[str, Any]) -> int:
    """Print coverage, missing runs, and locations per sounding type."""
    with _connect(args, config) as arch:
        inventory = arch.inventory(Site(short_name=args.site))

    print(f"Inventory for {inventory.site.short_name}")
    for sounding_type in inventory.sounding_types:
        print(f"\n{sounding_type.source}")
        time_range = inventory.range(sounding_type)
        if time_range is not None:
            print(f"  Range:   {_fmt_time(time_range[0])} -> {_fmt_time(time_range[1])}")
        missing = inventory.missing(sounding_type)
        print(f"  Missing: {len(missing)} run(s)")
        for start, end in missing:
            print(f"    {_fmt_time(start)} -> {_fmt_time(end)}")
        for location in inventory.locations(sounding_type):
            print(
                f"  Location: {location.latitude:.4f}, {location.longitude:.4f}, "
                f"{location.elevation_m} m"
            )
    return 0


_HANDLERS = {
    "create": _handle_create,
    "add": _handle_add,
    "export": _handle_export,
    "remove": _handle_remove,
    "check": _handle_check,
    "count": _handle_count,
    "sites": _handle_sites,
    "types": _handle_types,
    "inventory": _handle_inventory,
}


def _connect(args: argparse.Namespace, config: dict[str, Any]) -> Archive:
    return Archive.connect(
        args.root, compression_level=config["archive"]["compression_level"]
    )


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the archive CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m sounding_archive.cli",
        description="Manage a local archive of compressed sounding files.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Archive commands")

    def add_root(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "root",
            nargs="?",
            default=None,
            help="Archive root directory (default: archive.root from the config)",
        )

    def add_key(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--site", required=True, help="Site short name, e.g. KMSO")
        sub.add_argument("--type", required=True, help="Sounding type source, e.g. GFS")
        sub.add_argument(
            "--init-time",
            required=True,
            dest="init_time",
            type=_parse_init_time,
            help="Initialization time, ISO 8601 UTC (2017-04-01T12:00Z)",
        )

    # -- create --
    create_parser = subparsers.add_parser("create", help="Create an empty archive")
    add_root(create_parser)
    create_parser.add_argument(
        "--config", default=None, help="YAML config file (default: config_path setting)"
    )

    # -- add --
    add_parser = subparsers.add_parser("add", help="Add a sounding file")
    add_parser.add_argument("root", help="Archive root directory")
    add_parser.add_argument("file", help="Path to the uncompressed sounding file")
    add_key(add_parser)
    add_parser.add_argument("--lat", required=True, type=float, help="Latitude, degrees")
    add_parser.add_argument("--lon", required=True, type=float, help="Longitude, degrees")
    add_parser.add_argument("--elev", required=True, type=int, help="Elevation, meters")

    # -- export --
    export_parser = subparsers.add_parser("export", help="Export a file uncompressed")
    add_root(export_parser)
    add_key(export_parser)
    export_parser.add_argument("--out", required=True, help="Destination directory")

    # -- remove --
    remove_parser = subparsers.add_parser("remove", help="Remove a stored file")
    add_root(remove_parser)
    add_key(remove_parser)

    # -- check / count / sites / types --
    for name, help_text in (
        ("check", "Compare the index with the files on disk"),
        ("count", "Number of indexed files"),
        ("sites", "List registered sites"),
        ("types", "List registered sounding types"),
    ):
        add_root(subparsers.add_parser(name, help=help_text))

    # -- inventory --
    inventory_parser = subparsers.add_parser("inventory", help="Coverage for one site")
    inventory_parser.add_argument("root", help="Archive root directory")
    inventory_parser.add_argument("site", help="Site short name")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        config = load_config(getattr(args, "config", None), settings=Settings())
    except (SoundingArchiveError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    configure_logging(config["logging"]["level"], json_output=config["logging"]["json"])
    logger = get_logger(__name__)
    if args.root is None:
        args.root = config["archive"]["root"]

    try:
        return _HANDLERS[args.command](args, config)
    except (SoundingArchiveError, ValueError, OSError, sqlite3.Error) as exc:
        logger.error("command_failed", command=args.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1
