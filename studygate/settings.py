"""
Configuration settings for StudyGate.

This module provides a settings class for StudyGate, with support for loading
configuration from TOML files and environment variables.
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)


class DataSourceType(str, Enum):
    """Module types a data source can be registered as."""

    WEB_API = "webApi"
    LOCAL_API = "localApi"


class DataSourceConfig(BaseModel):
    """Configuration of a single backend data source."""

    name: str
    type: DataSourceType = DataSourceType.WEB_API
    friendly_name: str | None = None
    qido_root: str | None = None
    fuzzy_matching: bool = False


class Settings(BaseSettings):
    """Main settings class for StudyGate.

    This class handles loading configuration from TOML files and environment variables,
    with support for custom settings sources.
    """

    model_config = SettingsConfigDict(
        toml_file=["settings.toml", "settings.custom.toml"], env_prefix="STUDYGATE_", extra="ignore"
    )

    # Server settings
    port: int = 8000
    host: str = "127.0.0.1"
    root_url: str = "/"
    debug: bool = False

    # Data source settings
    default_data_source_name: str | None = None
    data_sources: list[DataSourceConfig] = []
    local_data_source: str = "dicomlocal"
    # Data source reserved for archive-only browsing; never queried automatically
    archive_only_data_source: str = "dicomweb"
    studies_limit: int = 101
    default_results_per_page: int = 25
    http_timeout: float = 30.0

    # Extensions
    extensions: list[str] = []
    microscopy_extension_id: str = "@ohif/extension-dicom-microscopy"

    # Local ingestion settings
    default_mode_path: str = "viewer"
    specialized_modality: str = "SM"
    specialized_mode: str = "microscopy"
    archive_extension: str = ".zip"
    max_archive_depth: int = 32
    metadata_store_max_studies: int = 500
    fallback_url: str = "https://www.lab.healthray.com/"

    # Logging settings
    log_level: str = "INFO"
    log_to_file: bool = False
    log_dir: str | None = None  # If None, will use ~/studygate/logs
    log_rotation: str = "20 MB"
    log_retention: str = "1 week"
    log_format: str | None = None  # Use default if None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the sources for settings.

        Priority order: explicit init arguments, environment variables, then TOML config files
        """
        return init_settings, env_settings, TomlConfigSettingsSource(settings_cls)

    def get_log_dir(self) -> Path:
        """Get the log directory path.

        Returns:
            Path to the log directory. Uses log_dir if specified,
            otherwise ~/studygate/logs.
        """
        if self.log_dir:
            return Path(self.log_dir)
        return Path.home() / "studygate" / "logs"


@lru_cache
def get_settings() -> Settings:
    """Get the settings instance, with caching.

    Returns:
        Cached Settings instance
    """
    return Settings()


# Create a global settings instance for easy imports
settings = get_settings()
