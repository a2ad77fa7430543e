"""
Provision the resolved test platform.

Usage (from a test bootstrap):
    from platform_autoconfig.domain import ServerConfig
    from platform_autoconfig.orchestrator import PlatformAutoConfig

    server_config = ServerConfig(properties={"ebean.test.platform": "postgres",
                                             "ebean.test.dbName": "orders"})
    PlatformAutoConfig(None, server_config).run()
    print(server_config.data_source_config.url)

Provisioning runs the search index setup and the database setup on two
threads and waits for both. The database setup writes the data source into
the server config and, when the platform needs a container, hands the docker
properties to the container starter.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ALL_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from platform_autoconfig.config import DB_NAME_KEY, is_debug
from platform_autoconfig.domain.models import (
    Config,
    DockerProperties,
    PlatformConfigError,
    ServerConfig,
)
from platform_autoconfig.infrastructure.containers import start_containers
from platform_autoconfig.infrastructure.elastic import run_index_setup
from platform_autoconfig.platforms import default_platforms
from platform_autoconfig.platforms.abstract import PlatformSetup
from platform_autoconfig.resolver import PlatformResolver
from platform_autoconfig.utils.logging import get_logger

log = get_logger(__name__)

LOCAL_DB_NAME = "test_db"

# Read-only after import; pass another mapping to PlatformAutoConfig to override.
KNOWN_PLATFORMS = default_platforms()

ContainerStarter = Callable[[DockerProperties, str], None]
IndexSetup = Callable[[Mapping[str, str]], None]


@dataclass
class ProvisioningReport:
    """Summary of one provisioning run, for logging and the CLI."""

    db: str
    platform: str
    database_name: str
    docker_platform: str
    url: Optional[str] = None
    docker_properties: DockerProperties = field(default_factory=dict)
    containers_requested: bool = False
    timings: Dict[str, float] = field(default_factory=dict)


def mask_secrets(properties: Mapping[str, str]) -> Dict[str, str]:
    """Copy of docker properties with password values hidden."""
    return {
        key: "****" if key.lower().endswith("password") else value
        for key, value in properties.items()
    }


def determine_database_name(
    platform: str, setup: PlatformSetup, properties: Mapping[str, str]
) -> str:
    """
    Return ``ebean.test.dbName``, or ``test_db`` for local platforms.

    Raises
    ------
    PlatformConfigError
        The name is missing and the platform is not local.
    """
    database_name = properties.get(DB_NAME_KEY)
    # an empty value counts as unset
    if database_name:
        return database_name
    if setup.is_local():
        return LOCAL_DB_NAME
    raise PlatformConfigError(
        f"{DB_NAME_KEY} is not set but required for testing configuration with platform {platform}"
    )


def _timed(func: Callable[..., Any], *args: Any) -> Tuple[Any, float]:
    start = time.perf_counter()
    result = func(*args)
    return result, time.perf_counter() - start


class ProvisioningCoordinator:
    """
    Fork-join of the index setup and the database setup.

    Parameters
    ----------
    container_starter : callable
        ``(docker_properties, docker_platform) -> None``; starts or reuses
        containers.
    index_setup : callable
        ``(properties) -> None``; search index setup.
    """

    def __init__(
        self,
        container_starter: ContainerStarter = start_containers,
        index_setup: IndexSetup = run_index_setup,
    ) -> None:
        self.container_starter = container_starter
        self.index_setup = index_setup

    def run(
        self,
        platform: str,
        setup: PlatformSetup,
        server_config: ServerConfig,
        db: str = "db",
    ) -> ProvisioningReport:
        """
        Provision ``platform`` and block until both setup branches finish.

        Both branches always run to completion. If either fails, its error is
        raised after both have finished; when both fail the index setup error
        is raised and the database error is logged.
        """
        properties = server_config.properties
        database_name = determine_database_name(platform, setup, properties)
        config = Config(
            db=db, platform=platform, database_name=database_name, server_config=server_config
        )
        log.info(
            "provisioning platform %s db %s database %s",
            platform,
            db,
            database_name,
            extra={"platform": platform, "db": db, "database_name": database_name},
        )

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="platform-setup") as executor:
            index_future = executor.submit(_timed, self.index_setup, properties)
            database_future = executor.submit(_timed, self.setup_database, setup, config)
            wait([index_future, database_future], return_when=ALL_COMPLETED)

        self._log_secondary_failure(index_future, database_future)
        _, index_seconds = index_future.result()
        docker_properties, database_seconds = database_future.result()

        return ProvisioningReport(
            db=db,
            platform=platform,
            database_name=database_name,
            docker_platform=config.docker_platform,
            url=server_config.data_source_config.url,
            docker_properties=mask_secrets(docker_properties),
            containers_requested=bool(docker_properties),
            timings={"index": index_seconds, "database": database_seconds},
        )

    def setup_database(self, setup: PlatformSetup, config: Config) -> DockerProperties:
        docker_properties = setup.setup(config)
        if docker_properties:
            level = logging.INFO if is_debug(config.properties) else logging.DEBUG
            log.log(
                level,
                "Docker properties: %s",
                mask_secrets(docker_properties),
                extra={"platform": config.platform, "docker_platform": config.docker_platform},
            )
            self.container_starter(docker_properties, config.docker_platform)
        return docker_properties

    @staticmethod
    def _log_secondary_failure(index_future: Future, database_future: Future) -> None:
        index_error = index_future.exception()
        database_error = database_future.exception()
        if index_error is not None and database_error is not None:
            log.error("database setup failed as well as index setup", exc_info=database_error)


class PlatformAutoConfig:
    """
    Entry point: resolve the platform from the server properties and set it up.

    Parameters
    ----------
    db : str | None
        Pinned db name. When given it is used as the platform identifier.
    server_config : ServerConfig
        Supplies the properties and receives the data source settings.
    known_platforms : mapping | None
        Platform handlers by identifier. Defaults to KNOWN_PLATFORMS.
    coordinator : ProvisioningCoordinator | None
        Defaults to one using the Docker and Elasticsearch collaborators.
    """

    def __init__(
        self,
        db: Optional[str],
        server_config: ServerConfig,
        known_platforms: Optional[Mapping[str, PlatformSetup]] = None,
        coordinator: Optional[ProvisioningCoordinator] = None,
    ) -> None:
        self.db = db
        self.server_config = server_config
        self.resolver = PlatformResolver(
            known_platforms if known_platforms is not None else KNOWN_PLATFORMS
        )
        self.coordinator = coordinator or ProvisioningCoordinator()

    def run(self) -> Optional[ProvisioningReport]:
        """
        Set up the platform for testing.

        Returns None when no platform is configured or it is unknown.
        """
        resolution = self.resolver.resolve(self.db, self.server_config.properties)
        if not resolution.is_known:
            return None
        return self.coordinator.run(
            resolution.platform, resolution.setup, self.server_config, db=resolution.db
        )

    def configure_extra_data_source(self) -> Optional[Config]:
        """
        Configure the data source of an extra (non-primary) database.

        Uses the server config name as db and database name. Starts no
        containers and runs no index setup.
        """
        resolution = self.resolver.resolve(self.db, self.server_config.properties)
        if not resolution.is_known:
            return None

        name = self.server_config.name
        config = Config(
            db=name,
            platform=resolution.platform,
            database_name=name,
            server_config=self.server_config,
        )
        resolution.setup.setup_extra_db_data_source(config)
        log.debug(
            "configured dataSource for extraDb name:%s url:%s",
            name,
            self.server_config.data_source_config.url,
            extra={"platform": resolution.platform, "db": name},
        )
        return config


__all__ = [
    "KNOWN_PLATFORMS",
    "LOCAL_DB_NAME",
    "PlatformAutoConfig",
    "ProvisioningCoordinator",
    "ProvisioningReport",
    "determine_database_name",
]
