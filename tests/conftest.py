"""
Pytest configuration for platform-autoconfig.

Provides:
- isolation from ``EBEAN_TEST_*`` environment variables and cached settings
- a recording fake platform handler
- recording container starter and index setup collaborators
"""

from __future__ import annotations

import threading
from typing import Callable, List, Mapping, Optional, Tuple

import pytest

from platform_autoconfig.config import get_settings
from platform_autoconfig.domain.models import Config, DockerProperties
from platform_autoconfig.orchestrator import ProvisioningCoordinator

ENV_VARS = (
    "EBEAN_TEST_PLATFORM",
    "EBEAN_TEST_DBNAME",
    "EBEAN_TEST_DEBUG",
    "EBEAN_TEST_PROPERTIES_FILE",
    "LOG_LEVEL",
    "LOG_JSON",
    "STARTUP_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Run every test without env overrides, outside the repository root."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class RecordingSetup:
    """Fake platform handler recording every call."""

    def __init__(
        self,
        local: bool = False,
        docker_properties: Optional[DockerProperties] = None,
        error: Optional[Exception] = None,
        on_setup: Optional[Callable[[], None]] = None,
    ) -> None:
        self.local = local
        self.docker_properties = docker_properties or {}
        self.error = error
        self.on_setup = on_setup
        self.setup_calls: List[Config] = []
        self.extra_calls: List[Config] = []
        self.completed = threading.Event()

    def is_local(self) -> bool:
        return self.local

    def setup(self, config: Config) -> DockerProperties:
        self.setup_calls.append(config)
        if self.on_setup is not None:
            self.on_setup()
        if self.error is not None:
            raise self.error
        config.datasource(url=f"fake://{config.database_name}", username="u", password="p")
        self.completed.set()
        return dict(self.docker_properties)

    def setup_extra_db_data_source(self, config: Config) -> None:
        self.extra_calls.append(config)
        config.datasource(url=f"fake-extra://{config.database_name}")


class RecordingStarter:
    def __init__(self) -> None:
        self.calls: List[Tuple[DockerProperties, str]] = []

    def __call__(self, properties: DockerProperties, docker_platform: str) -> None:
        self.calls.append((dict(properties), docker_platform))


class RecordingIndexSetup:
    def __init__(
        self,
        error: Optional[Exception] = None,
        on_run: Optional[Callable[[], None]] = None,
    ) -> None:
        self.error = error
        self.on_run = on_run
        self.calls: List[Mapping[str, str]] = []
        self.completed = threading.Event()

    def __call__(self, properties: Mapping[str, str]) -> None:
        self.calls.append(properties)
        if self.on_run is not None:
            self.on_run()
        if self.error is not None:
            raise self.error
        self.completed.set()


@pytest.fixture
def starter() -> RecordingStarter:
    return RecordingStarter()


@pytest.fixture
def index_setup() -> RecordingIndexSetup:
    return RecordingIndexSetup()


@pytest.fixture
def coordinator(
    starter: RecordingStarter, index_setup: RecordingIndexSetup
) -> ProvisioningCoordinator:
    return ProvisioningCoordinator(container_starter=starter, index_setup=index_setup)


@pytest.fixture
def make_setup() -> Callable[..., RecordingSetup]:
    return RecordingSetup


@pytest.fixture
def make_index_setup() -> Callable[..., RecordingIndexSetup]:
    return RecordingIndexSetup
