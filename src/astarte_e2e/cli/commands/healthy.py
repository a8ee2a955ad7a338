# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Healthy command implementation.
"""

import sys

import click
from rich.console import Console

from ...collaborators.client import APIClient
from ...driver.readiness import ReadinessWaiter
from ...errors import ReadinessTimeout
from ..formatters import get_formatter
from ..utils.config import Config


@click.command()
@click.option(
    "--wait", "-w",
    is_flag=True,
    help="Poll until the backend is healthy or the deadline expires"
)
@click.option(
    "--timeout", "-t",
    type=float,
    help="Deadline in seconds for --wait (default: health_deadline, 600)"
)
@click.option(
    "--interval", "-i",
    type=float,
    help="Seconds between health checks (default: health_interval, 5)"
)
@click.option(
    "--format", "-f",
    type=click.Choice(["table", "json"]),
    help="Output format"
)
@click.pass_obj
def healthy(config: Config, wait: bool, timeout: float, interval: float, format: str):
    """
    Check that the Astarte API services are healthy.

    Examples:
        astarte-e2e healthy                   # Single check
        astarte-e2e healthy --wait            # Wait up to 10 minutes
        astarte-e2e healthy --wait -t 120     # Wait up to 2 minutes
    """
    console = Console(no_color=config.no_color)
    formatter = get_formatter(format or config.default_format, console)

    client = APIClient(config.api_url, timeout=config.http_timeout, retry=config.http_retry)
    try:
        if wait:
            waiter = ReadinessWaiter(client, interval=interval or config.health_interval)
            deadline = timeout or config.health_deadline
            try:
                with console.status(f"Waiting for {config.api_url} (up to {deadline:.0f}s)..."):
                    attempts = waiter.wait_healthy(deadline)
            except ReadinessTimeout as e:
                formatter.format_error(str(e))
                sys.exit(1)
            formatter.format_success(f"Backend healthy after {attempts} check(s)")
            return

        services = client.service_health()
    finally:
        client.close()

    formatter.format_health(services)
    if not all(services.values()):
        sys.exit(1)
