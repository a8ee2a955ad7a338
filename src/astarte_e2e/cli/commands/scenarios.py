# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Scenarios command implementation.
"""

import click
from rich.console import Console

from ...scenarios import default_scenarios
from ..formatters import get_formatter
from ..utils.config import Config


@click.command()
@click.option(
    "--format", "-f",
    type=click.Choice(["table", "json"]),
    help="Output format"
)
@click.pass_obj
def scenarios(config: Config, format: str):
    """List the scenarios in execution order."""
    formatter = get_formatter(format or config.default_format, Console(no_color=config.no_color))
    formatter.format_scenarios(default_scenarios())
