# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Main CLI entry point for the Astarte end-to-end driver.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from . import __version__
from .commands import config, healthy, interfaces, run, scenarios
from .utils.config import Config

# Create console for rich output
console = Console()


def setup_logging(level: str = "WARNING") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit"
)
@click.option(
    "--config", "config_file",
    envvar="E2E_CONFIG",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML configuration file (default: ~/.astarte-e2e/config.yaml)"
)
@click.option(
    "--realm",
    help="Astarte realm [env: E2E_REALM]"
)
@click.option(
    "--base-domain",
    help="Astarte base domain, the API lives at api.<domain> [env: E2E_BASE_DOMAIN]"
)
@click.option(
    "--secure-transport",
    type=click.BOOL,
    help="Use https for the API, true or false [env: E2E_SECURE_TRANSPORT]"
)
@click.option(
    "--debug",
    envvar="E2E_DEBUG",
    is_flag=True,
    help="Enable debug mode"
)
@click.option(
    "--no-color",
    envvar="NO_COLOR",
    is_flag=True,
    help="Disable colored output"
)
@click.pass_context
def cli(
    ctx,
    version: bool,
    config_file: Optional[Path],
    realm: Optional[str],
    base_domain: Optional[str],
    secure_transport: Optional[bool],
    debug: bool,
    no_color: bool
):
    """
    Astarte E2E - end-to-end validation of the device SDK.

    Waits for the cluster, installs interfaces, registers a fresh device per
    scenario and runs the SDK examples against it.

    Examples:
        astarte-e2e healthy --wait
        astarte-e2e run
        astarte-e2e run --scenario retention --time-bound 30
        astarte-e2e doctor
    """
    if version:
        click.echo(f"astarte-e2e version {__version__}")
        ctx.exit()

    config = Config.load(config_file)

    # Command line flags win over file and environment
    if realm:
        config.realm = realm
    if base_domain:
        config.base_domain = base_domain
    if secure_transport is not None:
        config.secure_transport = secure_transport
    if debug:
        config.debug = True
    if no_color:
        config.no_color = True

    setup_logging("DEBUG" if config.debug else "WARNING")

    # Store in context
    ctx.obj = config

    # If no subcommand, show help
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


# Add commands
cli.add_command(healthy.healthy)
cli.add_command(run.run)
cli.add_command(interfaces.interfaces)
cli.add_command(scenarios.scenarios)
cli.add_command(config.config)


@cli.command()
@click.pass_obj
def doctor(config: Config):
    """Check tools, configuration and backend before a run."""
    from .utils.doctor import run_diagnostics
    if not run_diagnostics(config, Console(no_color=config.no_color)):
        sys.exit(1)


def main():
    """Main entry point for the CLI."""
    try:
        # Ctrl-C surfaces here as click.Abort
        exit_code = cli(standalone_mode=False)
    except (KeyboardInterrupt, click.Abort):
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(130)
    except click.ClickException as e:
        e.show()
        sys.exit(e.exit_code)
    except Exception as e:
        if os.environ.get("E2E_DEBUG") or "--debug" in sys.argv:
            console.print_exception()
        else:
            console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    sys.exit(exit_code if isinstance(exit_code, int) else 0)


if __name__ == "__main__":
    main()
