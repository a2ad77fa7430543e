"""
Infrastructure package: Docker containers, Postgres connections and the
search index setup. Keep I/O and resource lifetimes here, away from the
resolver and coordinator logic.
"""

from platform_autoconfig.infrastructure.containers import (
    ContainerFactory,
    ContainerRegistry,
    start_containers,
)
from platform_autoconfig.infrastructure.elastic import ElasticSearchSetup, run_index_setup

__all__ = [
    "ContainerFactory",
    "ContainerRegistry",
    "ElasticSearchSetup",
    "run_index_setup",
    "start_containers",
]
