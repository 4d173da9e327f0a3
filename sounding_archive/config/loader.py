"""YAML configuration loader with environment variable overrides.

Layers, later overriding earlier:

    1. Settings defaults   -- the field defaults in settings.py
    2. config/config.yaml  -- static defaults checked into the repo
    3. .env file           -- local overrides (not committed)
    4. Environment vars    -- SOUNDING_ARCHIVE_* at deploy time

Layers 3 and 4 only override keys whose setting was actually supplied.

The YAML file may also declare the sounding types a new archive starts
with::

    sounding_types:
      - source: GFS
        file_type: BUFKIT
        hours_between: 6
      - source: RAWINSONDE
        file_type: BUFR
        observed: true
        hours_between: 12
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from sounding_archive.config.settings import Settings
from sounding_archive.models.entities import SoundingType
from sounding_archive.utils.errors import ConfigurationError


def load_config(path: str | Path | None = None, settings: Settings | None = None) -> dict[str, Any]:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: YAML file to read.  Defaults to ``settings.config_path``; a
              missing file yields an empty base configuration.
        settings: Settings instance to merge; a fresh one is built if omitted.

    Returns:
        Configuration dictionary with ``archive``, ``app``, ``logging`` and
        ``sounding_types`` keys.  ``sounding_types`` holds validated
        :class:`SoundingType` records.

    Raises:
        ConfigurationError: If the YAML is malformed, the compression level
            is out of range, or a sounding type entry is invalid.
    """
    settings = settings or Settings()
    config_path = Path(path if path is not None else settings.config_path)

    if config_path.exists():
        try:
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(
                f"Malformed YAML in {config_path}: {exc}", component="config"
            ) from exc
    else:
        yaml_config = {}

    if not isinstance(yaml_config, dict):
        raise ConfigurationError(
            f"Top level of {config_path} must be a mapping", component="config"
        )

    config = _settings_section(settings, type(settings).model_fields)
    _deep_merge(config, yaml_config)
    for group in ("archive", "app", "logging"):
        if not isinstance(config[group], dict):
            raise ConfigurationError(
                f"{group} in {config_path} must be a mapping", component="config"
            )
    _deep_merge(config, _settings_section(settings, settings.model_fields_set))
    config["logging"]["json"] = config["app"]["env"] == "production"

    config["archive"]["compression_level"] = _compression_level(
        config["archive"]["compression_level"]
    )
    config["sounding_types"] = parse_sounding_types(config.get("sounding_types") or [])
    return config


def parse_sounding_types(entries: list[Any]) -> list[SoundingType]:
    """Build unvalidated SoundingType records from YAML entries."""
    if not isinstance(entries, list):
        raise ConfigurationError("sounding_types must be a list", component="config")

    sounding_types: list[SoundingType] = []
    for entry in entries:
        if not isinstance(entry, dict):
            raise ConfigurationError(
                f"sounding_types entry must be a mapping, got {entry!r}", component="config"
            )
        try:
            sounding_types.append(SoundingType.model_validate(entry))
        except ValidationError as exc:
            raise ConfigurationError(
                f"Invalid sounding type {entry!r}: {exc}", component="config"
            ) from exc
    return sounding_types


# Settings field -> (section, key) in the merged configuration.
_SETTINGS_KEYS = {
    "archive_root": ("archive", "root"),
    "compression_level": ("archive", "compression_level"),
    "app_env": ("app", "env"),
    "log_level": ("logging", "level"),
}


def _settings_section(settings: Settings, fields: Iterable[str]) -> dict[str, dict[str, Any]]:
    """Nested config holding the values of the named *fields* of *settings*."""
    section: dict[str, dict[str, Any]] = {"archive": {}, "app": {}, "logging": {}}
    for field in fields:
        if field in _SETTINGS_KEYS:
            group, key = _SETTINGS_KEYS[field]
            section[group][key] = getattr(settings, field)
    return section


def _compression_level(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 9:
        raise ConfigurationError(
            f"archive.compression_level must be an integer from 1 to 9, got {value!r}",
            component="config",
        )
    return value


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
