"""
Platform setup interfaces.

Every supported platform (h2, postgres, ...) implements PlatformSetup. The
resolver selects a handler by its string key; the coordinator then asks it
to configure the data source and describe any container it needs.
"""

from __future__ import annotations

import abc
from typing import Protocol, runtime_checkable

from platform_autoconfig.domain.models import Config, DockerProperties


@runtime_checkable
class PlatformSetup(Protocol):
    """
    Capability set of a platform handler.
    """

    def is_local(self) -> bool:
        """Return True when the platform runs in-process (no container)."""
        ...

    def setup(self, config: Config) -> DockerProperties:
        """
        Configure the primary data source for testing.

        Parameters
        ----------
        config : Config
            Run configuration; the handler writes the data source into
            ``config.server_config``.

        Returns
        -------
        DockerProperties
            Container launch properties. Empty when nothing needs starting.
        """
        ...

    def setup_extra_db_data_source(self, config: Config) -> None:
        """Configure a secondary data source only (no container properties)."""
        ...


class AbstractPlatformSetup(abc.ABC):
    """
    ABC helper for class-based handlers.
    """

    def is_local(self) -> bool:
        return False

    @abc.abstractmethod
    def setup(self, config: Config) -> DockerProperties:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def setup_extra_db_data_source(self, config: Config) -> None:  # pragma: no cover
        raise NotImplementedError


__all__ = ["AbstractPlatformSetup", "PlatformSetup"]
