"""
Domain models for platform-autoconfig.

`ServerConfig` and `DataSourceConfig` describe the database server under test
and are written to by platform handlers. `Config` is the immutable value
handed to a handler for one provisioning run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from pydantic import BaseModel, Field

from platform_autoconfig.config import DOCKER_PLATFORM_KEY

DockerProperties = Dict[str, str]


class PlatformConfigError(ValueError):
    """Configuration is missing or invalid for the selected platform."""


class DataSourceConfig(BaseModel):
    """
    Connection settings for a data source, filled in by platform setup.
    """

    url: Optional[str] = Field(None, description="Connection URL.")
    username: Optional[str] = Field(None, description="Login user.")
    password: Optional[str] = Field(None, description="Login password.")
    driver: Optional[str] = Field(None, description="Driver/dialect hint.")


class ServerConfig(BaseModel):
    """
    The database server configuration that owns a provisioning run.
    """

    name: str = Field("db", description="Server (data source) name.")
    properties: Dict[str, str] = Field(default_factory=dict)
    data_source_config: DataSourceConfig = Field(default_factory=DataSourceConfig)


@dataclass(frozen=True)
class Config:
    """
    Per-run platform setup input.

    Attributes
    ----------
    db : str
        Logical database (server) name.
    platform : str
        Platform identifier, e.g. "postgres".
    database_name : str
        Name of the database to create or connect to.
    server_config : ServerConfig
        Owning configuration; receives the data source settings.
    """

    db: str
    platform: str
    database_name: str
    server_config: ServerConfig

    @property
    def properties(self) -> Dict[str, str]:
        return self.server_config.properties

    @property
    def docker_platform(self) -> str:
        """Container kind used to launch this platform."""
        return self.properties.get(DOCKER_PLATFORM_KEY) or self.platform

    def platform_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Read the platform scoped override ``ebean.test.<platform>.<key>``."""
        return self.properties.get(f"ebean.test.{self.platform}.{key}", default)

    def int_property(self, key: str, default: int) -> int:
        value = self.platform_property(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise PlatformConfigError(
                f"ebean.test.{self.platform}.{key} must be an integer, got {value!r}"
            ) from exc

    def datasource(
        self,
        url: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        driver: Optional[str] = None,
    ) -> None:
        """Write connection settings into the owning server configuration."""
        ds = self.server_config.data_source_config
        ds.url = url
        ds.username = username
        ds.password = password
        if driver is not None:
            ds.driver = driver


__all__ = [
    "Config",
    "DataSourceConfig",
    "DockerProperties",
    "PlatformConfigError",
    "ServerConfig",
]
