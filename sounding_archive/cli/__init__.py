"""Command line tools for sounding archives.

- ``python -m sounding_archive.cli <command>`` -- create, add, export,
  remove, check, count, sites, types, inventory.
"""
