"""Archive settings loaded from environment variables via pydantic-settings.

Sources, highest priority first:

    1. Environment variables prefixed ``SOUNDING_ARCHIVE_``
       (``SOUNDING_ARCHIVE_ARCHIVE_ROOT=/data/soundings``)
    2. A ``.env`` file in the working directory
    3. The defaults below
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """sounding-archive settings."""

    model_config = SettingsConfigDict(
        env_prefix="SOUNDING_ARCHIVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Archive ===
    archive_root: str = "./data/archive"
    compression_level: int = Field(default=6, ge=1, le=9)  # gzip level for new blobs

    # === YAML defaults (sounding types registered by `create`) ===
    config_path: str = "config/config.yaml"

    # === App Config ===
    app_env: str = "development"  # "production" switches logs to JSON
    log_level: str = "INFO"

    @property
    def json_logs(self) -> bool:
        return self.app_env == "production"
