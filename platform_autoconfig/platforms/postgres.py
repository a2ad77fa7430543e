"""
Postgres and PostGIS platforms.

Both run the official images on a fixed host port and create the extensions
listed under ``<docker platform>.extensions`` once the server accepts connections.
"""

from __future__ import annotations

from platform_autoconfig.domain.models import Config, DockerProperties
from platform_autoconfig.platforms.base import DockerPlatformSetup

# Default extensions by container kind; the plain postgres image has no postgis.
DEFAULT_EXTENSIONS = {
    "postgres": "hstore,pgcrypto",
    "postgis": "hstore,pgcrypto,postgis",
}


class PostgresSetup(DockerPlatformSetup):
    driver = "postgresql"
    url_template = "postgresql://{host}:{port}/{database_name}"
    default_version = "15"
    default_port = 6432
    default_extensions = DEFAULT_EXTENSIONS["postgres"]

    def extra_properties(self, config: Config) -> DockerProperties:
        default = DEFAULT_EXTENSIONS.get(config.docker_platform, self.default_extensions)
        return {"extensions": config.platform_property("extensions", default)}


class PostgisSetup(PostgresSetup):
    default_version = "15-3.4"
    default_port = 6433
    default_extensions = DEFAULT_EXTENSIONS["postgis"]


__all__ = ["PostgisSetup", "PostgresSetup"]
