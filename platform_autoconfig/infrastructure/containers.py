"""
Start (or reuse) Docker containers described by docker properties.

Docker properties are flat string pairs keyed ``<kind>.<attribute>``, e.g.
``postgres.version=15`` and ``postgres.port=6432``. Each kind with a
``version`` entry gets one container, bound to a fixed host port so the data
source URL written by the platform setup stays valid.

Containers are tracked by a process wide ContainerRegistry:
- a container already started in this process is reused;
- a container with the same name already running in Docker is reused;
- containers started here are stopped at interpreter exit unless
  ``<kind>.shutdown=false``.
"""

from __future__ import annotations

import atexit
import socket
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import docker
from tenacity import Retrying, retry_if_exception_type, stop_after_delay, wait_exponential
from testcontainers.core.container import DockerContainer

from platform_autoconfig.config import get_settings
from platform_autoconfig.domain.models import DockerProperties, PlatformConfigError
from platform_autoconfig.infrastructure.db_factory import build_dsn, create_extensions
from platform_autoconfig.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class ContainerSpec:
    """Container settings read from docker properties for one kind."""

    kind: str
    image: str
    port: int
    internal_port: int
    container_name: str
    db_name: str = ""
    username: str = ""
    password: str = ""
    extensions: Tuple[str, ...] = ()
    shutdown: bool = True


@dataclass(frozen=True)
class ContainerKind:
    """
    How to run one kind of container.

    Attributes
    ----------
    image : str
        Image template, formatted with ``version``.
    internal_port : int
        Port the service listens on inside the container.
    env : Callable
        Builds the container environment from a ContainerSpec.
    command : Callable | None
        Builds the container command, when the image needs one.
    default_version : str
        Image version used when a platform runs on this kind through a
        docker platform override. Empty when a version must be configured.
    """

    name: str
    image: str
    internal_port: int
    default_port: int
    env: Callable[[ContainerSpec], Dict[str, str]]
    command: Optional[Callable[[ContainerSpec], str]] = None
    postgres: bool = False
    default_version: str = ""


def _postgres_env(spec: ContainerSpec) -> Dict[str, str]:
    return {
        "POSTGRES_USER": spec.username,
        "POSTGRES_PASSWORD": spec.password,
        "POSTGRES_DB": spec.db_name,
    }


def _mysql_env(spec: ContainerSpec) -> Dict[str, str]:
    env = {"MYSQL_ROOT_PASSWORD": spec.password, "MYSQL_DATABASE": spec.db_name}
    # the image rejects MYSQL_USER=root
    if spec.username and spec.username != "root":
        env["MYSQL_USER"] = spec.username
        env["MYSQL_PASSWORD"] = spec.password
    return env


def _sqlserver_env(spec: ContainerSpec) -> Dict[str, str]:
    return {"ACCEPT_EULA": "Y", "MSSQL_SA_PASSWORD": spec.password}


def _oracle_env(spec: ContainerSpec) -> Dict[str, str]:
    return {
        "ORACLE_PASSWORD": spec.password,
        "APP_USER": spec.username,
        "APP_USER_PASSWORD": spec.password,
    }


def _elastic_env(spec: ContainerSpec) -> Dict[str, str]:
    return {
        "discovery.type": "single-node",
        "xpack.security.enabled": "false",
        "ES_JAVA_OPTS": "-Xms512m -Xmx512m",
    }


CONTAINER_KINDS: Mapping[str, ContainerKind] = {
    kind.name: kind
    for kind in (
        ContainerKind(
            "postgres",
            "postgres:{version}",
            5432,
            6432,
            _postgres_env,
            postgres=True,
            default_version="15",
        ),
        ContainerKind(
            "postgis",
            "postgis/postgis:{version}",
            5432,
            6433,
            _postgres_env,
            postgres=True,
            default_version="15-3.4",
        ),
        ContainerKind("mysql", "mysql:{version}", 3306, 4306, _mysql_env, default_version="8.0"),
        ContainerKind(
            "sqlserver",
            "mcr.microsoft.com/mssql/server:{version}",
            1433,
            1433,
            _sqlserver_env,
            default_version="2019-latest",
        ),
        ContainerKind(
            "oracle",
            "gvenzl/oracle-xe:{version}",
            1521,
            1521,
            _oracle_env,
            default_version="21-slim",
        ),
        ContainerKind(
            "hana",
            "saplabs/hanaexpress:{version}",
            39017,
            39017,
            lambda spec: {},
            command=lambda spec: f"--agree-to-sap-license --master-password {spec.password}",
            default_version="2.00.061.00.20220519.1",
        ),
        ContainerKind(
            "elastic",
            "docker.elastic.co/elasticsearch/elasticsearch:{version}",
            9200,
            9201,
            _elastic_env,
        ),
    )
}


@dataclass(frozen=True)
class StartedContainer:
    kind: str
    name: str
    host: str
    port: int
    reused: bool


def spec_from_properties(kind: ContainerKind, properties: Mapping[str, str]) -> ContainerSpec:
    """Read the ``<kind>.*`` docker properties into a ContainerSpec."""

    def prop(key: str, default: str = "") -> str:
        return properties.get(f"{kind.name}.{key}", default)

    version = prop("version")
    if not version:
        raise PlatformConfigError(f"{kind.name}.version is required to start a container")
    port = prop("port", str(kind.default_port))
    try:
        host_port = int(port)
    except ValueError as exc:
        raise PlatformConfigError(f"{kind.name}.port must be an integer, got {port!r}") from exc

    return ContainerSpec(
        kind=kind.name,
        image=prop("image") or kind.image.format(version=version),
        port=host_port,
        internal_port=kind.internal_port,
        container_name=prop("containerName", f"ut_{kind.name}"),
        db_name=prop("dbName"),
        username=prop("username"),
        password=prop("password"),
        extensions=tuple(e.strip() for e in prop("extensions").split(",") if e.strip()),
        shutdown=prop("shutdown", "true").lower() != "false",
    )


def build_container(kind: ContainerKind, spec: ContainerSpec) -> DockerContainer:
    container = (
        DockerContainer(spec.image)
        .with_name(spec.container_name)
        .with_bind_ports(spec.internal_port, spec.port)
    )
    for key, value in kind.env(spec).items():
        if value:
            container = container.with_env(key, value)
    if kind.command is not None:
        container = container.with_command(kind.command(spec))
    return container


def _probe_port(host: str, port: int) -> None:
    with socket.create_connection((host, port), timeout=2):
        pass


def wait_for_port(host: str, port: int, timeout_seconds: float) -> None:
    """
    Block until ``host:port`` accepts TCP connections.

    Raises
    ------
    OSError
        The last connection error once ``timeout_seconds`` has elapsed.
    """
    retryer = Retrying(
        stop=stop_after_delay(timeout_seconds),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=5),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    retryer(_probe_port, host, port)


def reuse_existing(name: str) -> bool:
    """
    Reuse a container with this name that Docker already knows about.

    A stopped container is started again. Returns False when none exists.
    """
    client = docker.from_env()
    try:
        for container in client.containers.list(all=True, filters={"name": name}):
            # the name filter matches substrings
            if container.name != name:
                continue
            if container.status != "running":
                log.info("restarting existing container %s", name, extra={"container": name})
                container.start()
            return True
        return False
    finally:
        client.close()


class ContainerRegistry:
    """
    Thread-safe singleton tracking containers started by this process.

    Container starts for different names run concurrently; starts for the
    same name are serialized so the second caller reuses the first.
    """

    _instance: Optional["ContainerRegistry"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "ContainerRegistry":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._containers: Dict[str, DockerContainer] = {}
                cls._instance._name_locks: Dict[str, threading.Lock] = {}
                cls._instance._stop_at_exit: List[str] = []
                atexit.register(cls._instance.stop_all)
            return cls._instance

    def _lock_for(self, name: str) -> threading.Lock:
        with self._lock:
            return self._name_locks.setdefault(name, threading.Lock())

    def start(self, kind: ContainerKind, spec: ContainerSpec) -> Tuple[str, bool]:
        """
        Start the container for ``spec`` unless it is already running.

        Returns
        -------
        tuple[str, bool]
            Host to connect to, and whether an existing container was reused.
        """
        with self._lock_for(spec.container_name):
            existing = self._containers.get(spec.container_name)
            if existing is not None:
                return existing.get_container_host_ip(), True
            if reuse_existing(spec.container_name):
                return "localhost", True

            container = build_container(kind, spec)
            log.info(
                "starting %s container %s (%s) on port %s",
                spec.kind,
                spec.container_name,
                spec.image,
                spec.port,
                extra={"container": spec.container_name},
            )
            container.start()
            with self._lock:
                self._containers[spec.container_name] = container
                if spec.shutdown:
                    self._stop_at_exit.append(spec.container_name)
            return container.get_container_host_ip(), False

    def stop_all(self) -> None:
        """Stop containers flagged for shutdown. Registered with atexit."""
        with self._lock:
            names, self._stop_at_exit = self._stop_at_exit, []
            containers = [self._containers.pop(name) for name in names if name in self._containers]
        for container in containers:
            try:
                container.stop()
            except Exception:  # noqa: BLE001 - best-effort cleanup at exit
                log.warning("failed to stop container", exc_info=True)


class ContainerFactory:
    """
    Start the containers described by a set of docker properties.

    Parameters
    ----------
    properties : DockerProperties
        Flat ``<kind>.<attribute>`` pairs.
    docker_platform : str | None
        Kind of the database container; it must be a supported kind and is
        started first.
    startup_timeout_seconds : float | None
        Readiness timeout per container. Defaults to settings.
    """

    def __init__(
        self,
        properties: DockerProperties,
        docker_platform: Optional[str] = None,
        startup_timeout_seconds: Optional[float] = None,
        registry: Optional[ContainerRegistry] = None,
    ) -> None:
        if docker_platform is not None and docker_platform not in CONTAINER_KINDS:
            raise PlatformConfigError(
                f"unsupported docker platform {docker_platform!r}. "
                f"Available: {', '.join(sorted(CONTAINER_KINDS))}"
            )
        self.properties = dict(properties)
        self.docker_platform = docker_platform
        self.startup_timeout_seconds = (
            startup_timeout_seconds or get_settings().startup_timeout_seconds
        )
        self.registry = registry or ContainerRegistry()

    def kinds(self) -> List[str]:
        """Kinds to start, the docker platform first."""
        kinds = [name for name in CONTAINER_KINDS if f"{name}.version" in self.properties]
        if self.docker_platform is None:
            return kinds
        if self.docker_platform not in kinds:
            raise PlatformConfigError(
                f"{self.docker_platform}.version is required to start a container"
            )
        kinds.remove(self.docker_platform)
        return [self.docker_platform] + kinds

    def start_containers(self) -> List[StartedContainer]:
        return [self.start(name) for name in self.kinds()]

    def start(self, kind_name: str) -> StartedContainer:
        kind = CONTAINER_KINDS[kind_name]
        spec = spec_from_properties(kind, self.properties)
        host, reused = self.registry.start(kind, spec)

        wait_for_port(host, spec.port, self.startup_timeout_seconds)
        if kind.postgres and spec.extensions:
            dsn = build_dsn(host, spec.port, spec.username, spec.password, spec.db_name)
            create_extensions(dsn, spec.extensions)

        log.info(
            "%s container %s ready on %s:%s%s",
            spec.kind,
            spec.container_name,
            host,
            spec.port,
            " (reused)" if reused else "",
            extra={"container": spec.container_name},
        )
        return StartedContainer(
            kind=spec.kind, name=spec.container_name, host=host, port=spec.port, reused=reused
        )


def start_containers(properties: DockerProperties, docker_platform: str) -> None:
    """Container starter used by the provisioning coordinator."""
    ContainerFactory(properties, docker_platform).start_containers()


__all__ = [
    "CONTAINER_KINDS",
    "ContainerFactory",
    "ContainerKind",
    "ContainerRegistry",
    "ContainerSpec",
    "StartedContainer",
    "build_container",
    "spec_from_properties",
    "start_containers",
    "wait_for_port",
]
