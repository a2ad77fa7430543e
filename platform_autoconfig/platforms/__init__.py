"""
Platform handlers.

Re-exports the setup interfaces and the concrete handlers, and builds the
default read-only registry keyed by platform identifier.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from platform_autoconfig.platforms.abstract import AbstractPlatformSetup, PlatformSetup
from platform_autoconfig.platforms.base import DockerPlatformSetup
from platform_autoconfig.platforms.hana import HanaSetup
from platform_autoconfig.platforms.local import H2Setup, SqliteSetup
from platform_autoconfig.platforms.mysql import MySqlSetup
from platform_autoconfig.platforms.oracle import OracleSetup
from platform_autoconfig.platforms.postgres import PostgisSetup, PostgresSetup
from platform_autoconfig.platforms.sqlserver import SqlServerSetup


def default_platforms() -> Mapping[str, PlatformSetup]:
    """Known platforms we can set up locally or via a docker container."""
    return MappingProxyType(
        {
            "h2": H2Setup(),
            "sqlite": SqliteSetup(),
            "postgres": PostgresSetup(),
            "postgis": PostgisSetup(),
            "mysql": MySqlSetup(),
            "sqlserver": SqlServerSetup(),
            "oracle": OracleSetup(),
            "hana": HanaSetup(),
        }
    )


__all__ = [
    # Abstracts
    "AbstractPlatformSetup",
    "DockerPlatformSetup",
    "PlatformSetup",
    # Concrete handlers
    "H2Setup",
    "HanaSetup",
    "MySqlSetup",
    "OracleSetup",
    "PostgisSetup",
    "PostgresSetup",
    "SqlServerSetup",
    "SqliteSetup",
    "default_platforms",
]
