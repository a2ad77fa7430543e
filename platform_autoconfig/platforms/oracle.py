"""
Oracle XE platform.

The test database is the XE pluggable database; the database name becomes
the application user.
"""

from __future__ import annotations

from platform_autoconfig.platforms.base import DockerPlatformSetup


class OracleSetup(DockerPlatformSetup):
    driver = "oracle"
    url_template = "oracle://{host}:{port}/?service_name=XEPDB1"
    default_version = "21-slim"
    default_port = 1521


__all__ = ["OracleSetup"]
