"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables (or a ``.env`` file)
following 12-factor principles. Command-line flags override these values.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # GeoServer connection — required at use time, validated by the CLI
    geoserver_url: str | None = Field(
        default=None,
        description="GeoServer base URL (e.g. http://localhost:8080/geoserver)",
    )
    geoserver_workspace: str | None = Field(
        default=None,
        description="Target GeoServer workspace",
    )
    geoserver_user: str | None = Field(
        default=None,
        description="GeoServer REST API username",
    )
    geoserver_password: str | None = Field(
        default=None,
        description="GeoServer REST API password",
    )
    geoserver_timeout: float = Field(
        default=300.0,
        description="HTTP timeout in seconds for GeoServer REST calls",
        gt=0,
    )

    @field_validator("geoserver_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.rstrip("/") or None

    # Publishing
    geoserver_shapefile_dir: str = Field(
        default="shpfiles",
        description="Root directory scanned recursively for .shp files",
    )
    geoserver_store_prefix: str = Field(
        default="",
        description="Prefix prepended to every datastore name",
    )
    geoserver_layer_prefix: str = Field(
        default="",
        description="Prefix prepended to every published layer name",
    )
    geoserver_overwrite: bool = Field(
        default=False,
        description="Replace existing datastores and layers instead of skipping them",
    )

    # Layer listing
    wfs_max_features: int = Field(
        default=1000,
        description="maxFeatures value used in generated WFS GetFeature URLs",
        gt=0,
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
