"""
MySQL platform.
"""

from __future__ import annotations

from platform_autoconfig.platforms.base import DockerPlatformSetup


class MySqlSetup(DockerPlatformSetup):
    driver = "mysql"
    url_template = "mysql://{host}:{port}/{database_name}"
    default_version = "8.0"
    default_port = 4306


__all__ = ["MySqlSetup"]
