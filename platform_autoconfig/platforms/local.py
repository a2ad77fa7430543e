"""
In-process platforms: H2 and SQLite.

Neither needs a container, so `setup` only writes the data source and
returns empty docker properties.
"""

from __future__ import annotations

from platform_autoconfig.domain.models import Config, DockerProperties
from platform_autoconfig.platforms.abstract import AbstractPlatformSetup


class H2Setup(AbstractPlatformSetup):
    """In-memory H2 database named after the test database."""

    def is_local(self) -> bool:
        return True

    def setup(self, config: Config) -> DockerProperties:
        self.setup_extra_db_data_source(config)
        return {}

    def setup_extra_db_data_source(self, config: Config) -> None:
        config.datasource(
            url=f"h2:mem:{config.database_name}",
            username=config.platform_property("username", "sa"),
            password=config.platform_property("password", ""),
            driver="h2",
        )


class SqliteSetup(AbstractPlatformSetup):
    """File based SQLite database in the working directory."""

    def is_local(self) -> bool:
        return True

    def setup(self, config: Config) -> DockerProperties:
        self.setup_extra_db_data_source(config)
        return {}

    def setup_extra_db_data_source(self, config: Config) -> None:
        config.datasource(url=f"sqlite:///{config.database_name}.db", driver="sqlite")


__all__ = ["H2Setup", "SqliteSetup"]
