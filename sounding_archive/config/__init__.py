"""Configuration module -- exports Settings and load_config."""

from sounding_archive.config.loader import load_config, parse_sounding_types
from sounding_archive.config.settings import Settings

__all__ = ["Settings", "load_config", "parse_sounding_types"]
