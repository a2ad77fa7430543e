from __future__ import annotations

from typing import Iterable, Mapping, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from platform_autoconfig.orchestrator import ProvisioningReport
from platform_autoconfig.platforms.abstract import PlatformSetup


def print_report(report: Optional[ProvisioningReport], console: Optional[Console] = None) -> None:
    """
    Render a provisioning report as a rich table.

    A None report means no platform was configured or it was unknown.
    """
    console = console or Console()

    if report is None:
        console.print("[yellow]No known platform configured - nothing provisioned.[/yellow]")
        return

    table = Table(title=f"Test platform: {report.platform}", box=box.ROUNDED, show_header=False)
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="magenta")

    table.add_row("db", report.db)
    table.add_row("database name", report.database_name)
    table.add_row("docker platform", report.docker_platform)
    table.add_row("url", report.url or "-")
    table.add_row(
        "containers",
        "[green]requested[/green]" if report.containers_requested else "[dim]none (local)[/dim]",
    )
    for branch, seconds in sorted(report.timings.items()):
        table.add_row(f"{branch} setup (s)", f"{seconds:.2f}")
    for key, value in sorted(report.docker_properties.items()):
        table.add_row(f"[dim]{key}[/dim]", value)

    console.print(table)


def print_platforms(
    platforms: Mapping[str, PlatformSetup],
    console: Optional[Console] = None,
    highlight: Iterable[str] = (),
) -> None:
    """Render the known platforms and whether each runs locally."""
    console = console or Console()
    selected = set(highlight)

    table = Table(title="Known platforms", box=box.ROUNDED)
    table.add_column("Platform", style="cyan", no_wrap=True)
    table.add_column("Runs", justify="left")
    table.add_column("Handler", style="dim")

    for name in sorted(platforms):
        setup = platforms[name]
        label = f"[bold]{name}[/bold] *" if name in selected else name
        table.add_row(label, "local" if setup.is_local() else "docker", type(setup).__name__)

    console.print(table)


__all__ = ["print_platforms", "print_report"]
