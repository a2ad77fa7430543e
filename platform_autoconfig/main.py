from __future__ import annotations

import sys
from typing import Optional

import typer

from platform_autoconfig.config import (
    DB_NAME_KEY,
    DEBUG_KEY,
    PLATFORM_KEY,
    build_properties,
    get_settings,
    is_debug,
)
from platform_autoconfig.domain.models import PlatformConfigError, ServerConfig
from platform_autoconfig.orchestrator import (
    KNOWN_PLATFORMS,
    PlatformAutoConfig,
    ProvisioningCoordinator,
)
from platform_autoconfig.reporter import print_platforms, print_report
from platform_autoconfig.resolver import PlatformResolver
from platform_autoconfig.utils.logging import configure_logging

app = typer.Typer(help="Detect and provision the database platform for a test run.")

PLATFORM_OPTION = typer.Option(
    None, "--platform", "-p", help="Override ebean.test.platform (e.g. h2, postgres)."
)
DB_NAME_OPTION = typer.Option(None, "--db-name", "-n", help="Override ebean.test.dbName.")
PROPERTIES_OPTION = typer.Option(
    None, "--properties", help="Properties file (default from EBEAN_TEST_PROPERTIES_FILE)."
)


def _server_config(
    name: str,
    platform: Optional[str],
    db_name: Optional[str],
    debug: bool,
    properties_file: Optional[str],
) -> ServerConfig:
    settings = get_settings()
    if properties_file:
        settings = settings.model_copy(update={"properties_file": properties_file})
    properties = build_properties(settings)
    if platform:
        properties[PLATFORM_KEY] = platform
    if db_name:
        properties[DB_NAME_KEY] = db_name
    if debug:
        properties[DEBUG_KEY] = "true"
    return ServerConfig(name=name, properties=properties)


def _coordinator() -> ProvisioningCoordinator:
    return ProvisioningCoordinator()


def _configure_logging(debug: bool) -> None:
    settings = get_settings()
    configure_logging(level="DEBUG" if debug else settings.log_level, json_logs=settings.log_json)


@app.command()
def platforms() -> None:
    """
    List the known platforms.
    """
    print_platforms(KNOWN_PLATFORMS)


@app.command()
def info(
    db: Optional[str] = typer.Option(None, "--db", help="Pinned db; used as the platform."),
    platform: Optional[str] = PLATFORM_OPTION,
    properties_file: Optional[str] = PROPERTIES_OPTION,
) -> None:
    """
    Show the effective properties and the resolved platform.
    """
    server_config = _server_config("db", platform, None, False, properties_file)
    properties = server_config.properties
    resolution = PlatformResolver(KNOWN_PLATFORMS).determine_platform(db, properties)
    typer.echo(
        f"platform={resolution.platform or '-'} db={resolution.db or '-'} "
        f"known={resolution.platform in KNOWN_PLATFORMS} "
        f"dbName={properties.get(DB_NAME_KEY, '-')} debug={is_debug(properties)}"
    )


@app.command()
def provision(
    db: Optional[str] = typer.Option(None, "--db", help="Pinned db; used as the platform."),
    platform: Optional[str] = PLATFORM_OPTION,
    db_name: Optional[str] = DB_NAME_OPTION,
    debug: bool = typer.Option(False, "--debug", help="Set ebean.test.debug and log at DEBUG."),
    properties_file: Optional[str] = PROPERTIES_OPTION,
) -> None:
    """
    Resolve the platform and provision it (containers included).
    """
    _configure_logging(debug)
    server_config = _server_config("db", platform, db_name, debug, properties_file)
    try:
        report = PlatformAutoConfig(db, server_config, coordinator=_coordinator()).run()
    except PlatformConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    print_report(report)


@app.command("extra-datasource")
def extra_datasource(
    name: str = typer.Argument(..., help="Name of the extra database."),
    db: Optional[str] = typer.Option(None, "--db", help="Pinned db; used as the platform."),
    platform: Optional[str] = PLATFORM_OPTION,
    properties_file: Optional[str] = PROPERTIES_OPTION,
) -> None:
    """
    Configure the data source of an extra database without starting containers.
    """
    _configure_logging(False)
    server_config = _server_config(name, platform, None, False, properties_file)
    try:
        config = PlatformAutoConfig(db, server_config).configure_extra_data_source()
    except PlatformConfigError as exc:
        typer.echo(f"Configuration error: {exc}", err=True)
        raise typer.Exit(code=2) from exc
    if config is None:
        typer.echo("No known platform configured.")
        return
    ds = server_config.data_source_config
    typer.echo(f"{name}: platform={config.platform} url={ds.url} username={ds.username or '-'}")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
