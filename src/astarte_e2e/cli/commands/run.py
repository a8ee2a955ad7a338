# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Run command implementation.
"""

import dataclasses
import json
import sys
from pathlib import Path
from typing import Callable, List, Optional

import click
from rich.console import Console

from ...collaborators.astartectl import Astartectl
from ...collaborators.client import APIClient
from ...driver.interfaces import InterfaceInstaller
from ...driver.orchestrator import Orchestrator, RunSettings
from ...driver.provisioning import IdentityProvisioner
from ...driver.readiness import ReadinessWaiter
from ...driver.runner import ScenarioRunner
from ...models import RunResult, RunStatus, ScenarioSpec
from ...scenarios import default_scenarios, select
from ..formatters import get_formatter
from ..utils.config import Config


def build_orchestrator(
    config: Config,
    wait: bool = True,
    install_interfaces: bool = True,
    on_result: Optional[Callable[[RunResult], None]] = None,
) -> Orchestrator:
    """Wire the live collaborators into an orchestrator."""
    client = APIClient(config.api_url, timeout=config.http_timeout, retry=config.http_retry)
    astartectl = Astartectl(config.astartectl, realm=config.realm, timeout=config.command_timeout)

    settings = RunSettings(
        environment=config.environment(),
        work_dir=config.work_dir,
        sdk_path=config.sdk_path,
        interface_sources=tuple(config.interface_paths()),
        readiness_deadline=config.health_deadline,
        job_deadline=config.job_deadline,
        wait=wait,
        install_interfaces=install_interfaces,
        jobs=config.jobs,
    )

    return Orchestrator(
        waiter=ReadinessWaiter(client, interval=config.health_interval),
        installer=InterfaceInstaller(astartectl),
        provisioner=IdentityProvisioner(astartectl),
        runner=ScenarioRunner(
            work_dir=config.work_dir,
            sdk_path=config.sdk_path,
            cargo=config.cargo,
            time_bound=config.time_bound,
        ),
        settings=settings,
        on_result=on_result,
    )


def _plan(config: Config, names: List[str]) -> List[ScenarioSpec]:
    scenarios = select(default_scenarios(), names)
    if config.scenario_timeout is not None:
        scenarios = [dataclasses.replace(s, timeout=config.scenario_timeout) for s in scenarios]
    return scenarios


@click.command()
@click.option(
    "--scenario", "-s", "names",
    multiple=True,
    help="Scenario to run (repeatable, default: all)"
)
@click.option(
    "--skip-wait",
    is_flag=True,
    help="Do not wait for the backend to be healthy"
)
@click.option(
    "--skip-interfaces",
    is_flag=True,
    help="Do not install the interfaces"
)
@click.option(
    "--jobs", "-j",
    type=click.IntRange(min=1),
    help="Scenarios to run in parallel (default: 1)"
)
@click.option(
    "--time-bound", "-t",
    type=click.IntRange(min=1),
    help="Seconds each time-bounded scenario streams data (default: 10)"
)
@click.option(
    "--sdk-path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Device SDK checkout holding the examples"
)
@click.option(
    "--work-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory for scenario logs"
)
@click.option(
    "--report",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Also write the JSON report to this file"
)
@click.option(
    "--format", "-f",
    type=click.Choice(["table", "json"]),
    help="Output format"
)
@click.pass_obj
def run(
    config: Config,
    names: tuple,
    skip_wait: bool,
    skip_interfaces: bool,
    jobs: int,
    time_bound: int,
    sdk_path: Path,
    work_dir: Path,
    report: Path,
    format: str
):
    """
    Run the end-to-end scenarios against the backend.

    Waits for the backend, installs the interfaces, then runs every scenario
    with a freshly registered device. A failing scenario does not stop the
    following ones; the exit status is 0 only when all of them passed.

    Examples:
        astarte-e2e run                            # Full run
        astarte-e2e run -s retention -t 30         # One scenario, longer
        astarte-e2e run --skip-wait --report r.json
    """
    if jobs:
        config.jobs = jobs
    if time_bound:
        config.time_bound = time_bound
    if sdk_path:
        config.sdk_path = sdk_path
    if work_dir:
        config.work_dir = work_dir

    output_format = format or config.default_format
    console = Console(no_color=config.no_color)
    formatter = get_formatter(output_format, console)

    errors = config.validate()
    if errors:
        for error in errors:
            formatter.format_error(f"Configuration: {error}")
        sys.exit(1)

    try:
        scenarios = _plan(config, list(names))
    except KeyError as e:
        formatter.format_error(e.args[0])
        sys.exit(1)

    def progress(result: RunResult):
        if output_format != "table":
            return
        if result.status is RunStatus.PASSED:
            formatter.format_success(f"{result.name} ({result.duration:.1f}s)")
        elif result.status is RunStatus.SKIPPED:
            formatter.format_warning(f"{result.name} skipped: {result.error}")
        else:
            console.print(f"[red]✗[/red] {result.name}: {result.error}")

    orchestrator = build_orchestrator(
        config,
        wait=not skip_wait,
        install_interfaces=not skip_interfaces,
        on_result=progress,
    )

    outcome = orchestrator.run(scenarios)

    formatter.format_report(outcome)

    if report:
        report.parent.mkdir(parents=True, exist_ok=True)
        report.write_text(json.dumps(outcome.to_dict(), indent=2) + "\n")

    sys.exit(outcome.exit_code())

