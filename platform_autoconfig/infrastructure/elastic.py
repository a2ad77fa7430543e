"""
Elasticsearch setup for tests that use a search index.

Runs alongside the database setup. Nothing happens unless
``ebean.test.elastic.version`` is configured.
"""

from __future__ import annotations

from typing import Callable, Mapping

from platform_autoconfig.domain.models import DockerProperties
from platform_autoconfig.infrastructure.containers import start_containers
from platform_autoconfig.utils.logging import get_logger

log = get_logger(__name__)

ELASTIC_VERSION_KEY = "ebean.test.elastic.version"
ELASTIC_PORT_KEY = "ebean.test.elastic.port"
DEFAULT_ELASTIC_PORT = "9201"

ContainerStarter = Callable[[DockerProperties, str], None]


class ElasticSearchSetup:
    def __init__(
        self,
        properties: Mapping[str, str],
        container_starter: ContainerStarter = start_containers,
    ) -> None:
        self.properties = properties
        self.container_starter = container_starter

    def docker_properties(self) -> DockerProperties:
        version = self.properties.get(ELASTIC_VERSION_KEY)
        if not version:
            return {}
        return {
            "elastic.version": version,
            "elastic.port": self.properties.get(ELASTIC_PORT_KEY, DEFAULT_ELASTIC_PORT),
            "elastic.containerName": "ut_elastic",
        }

    def run(self) -> None:
        docker_properties = self.docker_properties()
        if not docker_properties:
            log.debug("%s not set - skipping elastic setup", ELASTIC_VERSION_KEY)
            return
        self.container_starter(docker_properties, "elastic")


def run_index_setup(properties: Mapping[str, str]) -> None:
    """Index setup collaborator used by the provisioning coordinator."""
    ElasticSearchSetup(properties).run()


__all__ = ["ElasticSearchSetup", "run_index_setup"]
