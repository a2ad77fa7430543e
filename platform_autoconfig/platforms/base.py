"""
Shared behaviour for platforms that run in a Docker container.

Subclasses declare defaults as class attributes. Any default can be
overridden per platform through ``ebean.test.<platform>.<key>`` properties
(version, port, username, password, containerName, image). Returned docker
property keys are prefixed with the docker platform descriptor, which
defaults to the platform identifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple

from platform_autoconfig.domain.models import Config, DockerProperties
from platform_autoconfig.infrastructure.containers import CONTAINER_KINDS
from platform_autoconfig.platforms.abstract import AbstractPlatformSetup


@dataclass(frozen=True)
class ConnectionSettings:
    version: str
    port: int
    username: str
    password: str
    container_name: str
    image: Optional[str]


class DockerPlatformSetup(AbstractPlatformSetup):
    """
    Base class for container backed platforms.

    Attributes
    ----------
    url_template : str
        Formatted with ``host``, ``port`` and ``database_name``.
    default_username : str | None
        None means "use the database name".
    """

    driver: ClassVar[str]
    url_template: ClassVar[str]
    default_version: ClassVar[str]
    default_port: ClassVar[int]
    default_username: ClassVar[Optional[str]] = None
    default_password: ClassVar[str] = "test"

    def image_defaults(self, config: Config) -> Tuple[str, int]:
        """
        Default image version and host port.

        When ``ebean.test.dockerPlatform`` selects another container kind the
        defaults of that kind apply, so the version matches its image.
        """
        if config.docker_platform != config.platform:
            kind = CONTAINER_KINDS.get(config.docker_platform)
            if kind is not None and kind.default_version:
                return kind.default_version, kind.default_port
        return self.default_version, self.default_port

    def connection_settings(self, config: Config) -> ConnectionSettings:
        default_version, default_port = self.image_defaults(config)
        return ConnectionSettings(
            version=config.platform_property("version", default_version),
            port=config.int_property("port", default_port),
            username=config.platform_property(
                "username", self.default_username or config.database_name
            ),
            password=config.platform_property("password", self.default_password),
            container_name=config.platform_property(
                "containerName", f"ut_{config.docker_platform}"
            ),
            image=config.platform_property("image"),
        )

    def url(self, settings: ConnectionSettings, config: Config) -> str:
        return self.url_template.format(
            host="localhost", port=settings.port, database_name=config.database_name
        )

    def extra_properties(self, config: Config) -> DockerProperties:
        """Platform specific docker properties; keys without the docker platform prefix."""
        return {}

    def setup(self, config: Config) -> DockerProperties:
        settings = self.connection_settings(config)
        self._write_datasource(settings, config)

        properties: DockerProperties = {
            "version": settings.version,
            "port": str(settings.port),
            "dbName": config.database_name,
            "username": settings.username,
            "password": settings.password,
            "containerName": settings.container_name,
        }
        if settings.image:
            properties["image"] = settings.image
        properties.update(self.extra_properties(config))
        prefix = config.docker_platform
        return {f"{prefix}.{key}": value for key, value in properties.items()}

    def setup_extra_db_data_source(self, config: Config) -> None:
        self._write_datasource(self.connection_settings(config), config)

    def _write_datasource(self, settings: ConnectionSettings, config: Config) -> None:
        config.datasource(
            url=self.url(settings, config),
            username=settings.username,
            password=settings.password,
            driver=self.driver,
        )


__all__ = ["ConnectionSettings", "DockerPlatformSetup"]
