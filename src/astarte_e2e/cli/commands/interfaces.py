# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Interfaces command group.
"""

import sys

import click
from rich.console import Console

from ...collaborators.astartectl import Astartectl
from ...driver.interfaces import InterfaceInstaller
from ...errors import CommandError, InstallError
from ..formatters import get_formatter
from ..utils.config import Config


def _astartectl(config: Config) -> Astartectl:
    return Astartectl(config.astartectl, realm=config.realm, timeout=config.command_timeout)


@click.group()
def interfaces():
    """Manage the realm interfaces used by the scenarios."""


@interfaces.command()
@click.argument("sources", nargs=-1)
@click.pass_obj
def sync(config: Config, sources: tuple):
    """
    Install interface definitions (create or update).

    SOURCES are files, directories or globs; the configured interface
    sources are used when none are given.

    Examples:
        astarte-e2e interfaces sync
        astarte-e2e interfaces sync 'e2e-test/interfaces/**/*.json'
    """
    console = Console(no_color=config.no_color)
    formatter = get_formatter("table", console)

    installer = InterfaceInstaller(_astartectl(config))
    try:
        with console.status("Syncing interfaces..."):
            names = installer.install(list(sources) or config.interface_paths())
    except InstallError as e:
        formatter.format_error(str(e))
        sys.exit(1)

    for name in names:
        console.print(f"  {name}")
    formatter.format_success(f"{len(names)} interface(s) installed")


@interfaces.command(name="ls")
@click.pass_obj
def list_interfaces(config: Config):
    """List the interfaces installed in the realm."""
    console = Console(no_color=config.no_color)
    try:
        names = _astartectl(config).list_interfaces()
    except CommandError as e:
        get_formatter("table", console).format_error(str(e))
        sys.exit(1)

    for name in names:
        console.print(name, markup=False, highlight=False)
