"""
platform-autoconfig - pick and provision the database platform for tests.

Reads ``ebean.test.*`` properties, resolves the target platform (h2, sqlite,
postgres, postgis, mysql, sqlserver, oracle, hana) and prepares it before the
test suite runs:

- local platforms only get a data source configuration;
- container platforms get a data source plus a Docker container, started or
  reused through testcontainers;
- an Elasticsearch container is started alongside when configured.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

from platform_autoconfig.config import Settings, build_properties, get_settings, load_properties
from platform_autoconfig.domain.models import (
    Config,
    DataSourceConfig,
    PlatformConfigError,
    ServerConfig,
)
from platform_autoconfig.orchestrator import (
    KNOWN_PLATFORMS,
    PlatformAutoConfig,
    ProvisioningCoordinator,
    ProvisioningReport,
)
from platform_autoconfig.platforms import PlatformSetup, default_platforms
from platform_autoconfig.resolver import PlatformResolver, Resolution
from platform_autoconfig.utils.logging import configure_logging, get_logger

__all__ = [
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "build_properties",
    "get_settings",
    "load_properties",
    # Domain
    "Config",
    "DataSourceConfig",
    "PlatformConfigError",
    "ServerConfig",
    # Resolution and provisioning
    "KNOWN_PLATFORMS",
    "PlatformAutoConfig",
    "PlatformResolver",
    "PlatformSetup",
    "ProvisioningCoordinator",
    "ProvisioningReport",
    "Resolution",
    "default_platforms",
    # Logging
    "configure_logging",
    "get_logger",
]
