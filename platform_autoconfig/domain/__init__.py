"""
Domain package: configuration value objects and the configuration error.
"""

from platform_autoconfig.domain.models import (
    Config,
    DataSourceConfig,
    DockerProperties,
    PlatformConfigError,
    ServerConfig,
)

__all__ = [
    "Config",
    "DataSourceConfig",
    "DockerProperties",
    "PlatformConfigError",
    "ServerConfig",
]
