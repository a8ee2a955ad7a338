# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Pre-flight diagnostics for an end-to-end run.
"""

import shutil
import sys
from typing import List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...collaborators.client import APIClient
from ...driver.interfaces import resolve_sources
from ...errors import InstallError
from .config import Config

Check = Tuple[str, bool, str]


def run_diagnostics(config: Config, console: Optional[Console] = None) -> bool:
    """
    Run every diagnostic and print a summary table.

    Returns:
        True if all checks pass, False otherwise
    """
    console = console or Console()
    console.print(Panel("[bold cyan]Astarte E2E Diagnostics[/bold cyan]", border_style="blue"))

    checks = [
        _check_configuration(config),
        _check_tool("astartectl", config.astartectl),
        _check_tool("cargo", config.cargo),
        _check_interfaces(config),
        _check_backend(config),
        _check_environment(),
    ]

    _display_results(console, checks)

    return all(status for _, status, _ in checks)


def _check_configuration(config: Config) -> Check:
    errors = config.validate()
    if errors:
        return ("Configuration", False, "; ".join(errors))
    return ("Configuration", True, f"realm {config.realm} at {config.api_url}")


def _check_tool(name: str, executable: str) -> Check:
    path = shutil.which(executable)
    if path:
        return (name, True, path)
    return (name, False, f"{executable} not found on PATH")


def _check_interfaces(config: Config) -> Check:
    try:
        files = resolve_sources(config.interface_paths())
    except InstallError as e:
        return ("Interfaces", False, str(e))
    if not files:
        return ("Interfaces", False, "no interface definitions found")
    return ("Interfaces", True, f"{len(files)} definition(s) found")


def _check_backend(config: Config) -> Check:
    client = APIClient(config.api_url, timeout=config.http_timeout)
    try:
        services = client.service_health()
    finally:
        client.close()

    down = [name for name, healthy in services.items() if not healthy]
    if down:
        return ("Backend", False, f"unhealthy: {', '.join(down)}")
    return ("Backend", True, f"{config.api_url} healthy")


def _check_environment() -> Check:
    python_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    return ("Environment", True, f"Python {python_version} | {sys.platform}")


def _display_results(console: Console, checks: List[Check]):
    """Display diagnostic results in a table."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Check", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Details")

    all_passed = True

    for check_name, passed, details in checks:
        if passed:
            status = "[green]✓ PASS[/green]"
        else:
            status = "[red]✗ FAIL[/red]"
            all_passed = False

        table.add_row(check_name, status, details)

    console.print(table)
    console.print()

    if all_passed:
        console.print("[green]All diagnostics passed![/green]")
    else:
        console.print("[yellow]Some diagnostics failed. Please check the details above.[/yellow]")
