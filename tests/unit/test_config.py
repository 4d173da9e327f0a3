"""Unit tests for Settings and the YAML config loader."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from sounding_archive.config.loader import load_config, parse_sounding_types
from sounding_archive.config.settings import Settings
from sounding_archive.models.entities import FileType
from sounding_archive.utils.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in ("ARCHIVE_ROOT", "COMPRESSION_LEVEL", "LOG_LEVEL", "APP_ENV", "CONFIG_PATH"):
        monkeypatch.delenv(f"SOUNDING_ARCHIVE_{name}", raising=False)
    # Keep a developer's .env out of the tests.
    monkeypatch.chdir(tmp_path)


# ======================================================================
# Settings
# ======================================================================


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.archive_root == "./data/archive"
        assert settings.compression_level == 6
        assert settings.log_level == "INFO"
        assert not settings.json_logs

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SOUNDING_ARCHIVE_ARCHIVE_ROOT", "/srv/soundings")
        monkeypatch.setenv("SOUNDING_ARCHIVE_APP_ENV", "production")
        settings = Settings()
        assert settings.archive_root == "/srv/soundings"
        assert settings.json_logs

    def test_compression_level_range(self) -> None:
        with pytest.raises(ValidationError):
            Settings(compression_level=10)


# ======================================================================
# load_config
# ======================================================================


class TestLoadConfig:
    def test_missing_file_gives_env_values(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "absent.yaml")
        assert config["archive"]["root"] == "./data/archive"
        assert config["sounding_types"] == []

    def test_sounding_types_parsed(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "sounding_types:\n"
            "  - source: gfs\n"
            "    hours_between: 6\n"
            "  - source: RAWINSONDE\n"
            "    file_type: BUFR\n"
            "    observed: true\n"
            "    hours_between: 12\n"
        )
        config = load_config(path)
        gfs, raob = config["sounding_types"]
        assert gfs.source == "GFS"
        assert gfs.file_type is FileType.BUFKIT
        assert raob.observed
        assert raob.file_type is FileType.BUFR
        assert not gfs.is_known

    def test_env_overrides_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SOUNDING_ARCHIVE_LOG_LEVEL", "DEBUG")
        path = tmp_path / "config.yaml"
        path.write_text("logging:\n  level: WARNING\n  extra: kept\n")
        config = load_config(path)
        assert config["logging"]["level"] == "DEBUG"
        assert config["logging"]["extra"] == "kept"

    def test_yaml_values_apply_when_env_unset(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "archive:\n  compression_level: 9\n  root: /srv/soundings\n"
            "logging:\n  level: WARNING\n"
        )
        config = load_config(path)
        assert config["archive"]["compression_level"] == 9
        assert config["archive"]["root"] == "/srv/soundings"
        assert config["logging"]["level"] == "WARNING"
        assert config["logging"]["json"] is False

    def test_env_compression_level_overrides_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("SOUNDING_ARCHIVE_COMPRESSION_LEVEL", "2")
        path = tmp_path / "config.yaml"
        path.write_text("archive:\n  compression_level: 9\n")
        assert load_config(path)["archive"]["compression_level"] == 2

    def test_explicit_settings_override_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("app:\n  env: development\nlogging:\n  level: WARNING\n")
        config = load_config(path, settings=Settings(app_env="production"))
        assert config["logging"]["json"] is True
        assert config["logging"]["level"] == "WARNING"

    @pytest.mark.parametrize("level", [0, 10, "fast", True])
    def test_yaml_compression_level_out_of_range(self, tmp_path: Path, level: object) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(f"archive:\n  compression_level: {level}\n")
        with pytest.raises(ConfigurationError, match="compression_level"):
            load_config(path)

    def test_non_mapping_section(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("logging: verbose\n")
        with pytest.raises(ConfigurationError, match="logging"):
            load_config(path)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("sounding_types: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_non_mapping_top_level(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_repo_config_file_is_valid(self) -> None:
        repo_config = Path(__file__).resolve().parents[2] / "config" / "config.yaml"
        config = load_config(repo_config)
        sources = [t.source for t in config["sounding_types"]]
        assert "GFS" in sources
        assert "RAWINSONDE" in sources


class TestParseSoundingTypes:
    def test_invalid_entry(self) -> None:
        with pytest.raises(ConfigurationError, match="hours_between"):
            parse_sounding_types([{"source": "GFS", "hours_between": 0}])

    def test_entry_must_be_mapping(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_sounding_types(["GFS"])

    def test_list_required(self) -> None:
        with pytest.raises(ConfigurationError):
            parse_sounding_types({"source": "GFS"})  # type: ignore[arg-type]
