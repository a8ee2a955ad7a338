# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Config command implementation for inspecting the effective configuration.
"""

import sys

import click
from rich.console import Console

from ..formatters import get_formatter
from ..utils.config import Config as AppConfig


@click.command()
@click.option(
    "--list", "list_config",
    is_flag=True,
    help="Show all configuration values"
)
@click.option(
    "--get",
    help="Get specific configuration key"
)
@click.option(
    "--validate",
    is_flag=True,
    help="Validate configuration"
)
@click.option(
    "--format", "-f",
    type=click.Choice(["table", "json"]),
    help="Output format"
)
@click.pass_obj
def config(config: AppConfig, list_config: bool, get: str, validate: bool, format: str):
    """
    Show the effective configuration.

    Values come from the YAML file, then E2E_* environment variables.

    Examples:
        astarte-e2e config --list
        astarte-e2e config --get pairing_url
        astarte-e2e config --validate
    """
    console = Console(no_color=config.no_color)
    formatter = get_formatter(format or config.default_format, console)

    if get:
        data = config.to_dict()
        if get not in data:
            formatter.format_error(f"Configuration key not found: {get}")
            sys.exit(1)
        formatter.format_config({get: data[get]})
        return

    if validate:
        errors = config.validate()
        if errors:
            for error in errors:
                formatter.format_error(error)
            sys.exit(1)
        formatter.format_success("Configuration is valid")
        return

    # --list is the default action
    formatter.format_config(config.to_dict())
