# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Table formatter using Rich for terminal output.
"""

from typing import Any, Dict, List

from rich.panel import Panel
from rich.table import Table

from ...driver.orchestrator import summarize
from ...models import Report, RunStatus, ScenarioSpec
from .base import BaseFormatter

STATUS_STYLE = {
    RunStatus.PASSED: "[green]✓ PASS[/green]",
    RunStatus.FAILED: "[red]✗ FAIL[/red]",
    RunStatus.SKIPPED: "[yellow]- SKIP[/yellow]",
}


class TableFormatter(BaseFormatter):
    """Format output as tables using Rich."""

    def format_report(self, report: Report):
        """Format a run report as a table plus a verdict panel."""
        if report.results:
            table = Table(title="Scenarios", show_header=True, header_style="bold magenta")
            table.add_column("Scenario", style="cyan", no_wrap=True)
            table.add_column("Status", justify="center")
            table.add_column("Exit", justify="right")
            table.add_column("Duration", justify="right")
            table.add_column("Details")

            for result in report.results:
                table.add_row(
                    result.name,
                    STATUS_STYLE[result.status],
                    "-" if result.exit_code is None else str(result.exit_code),
                    self._format_duration(result.duration),
                    result.error or (str(result.output_path) if result.output_path else ""),
                )

            self.console.print(table)

        if report.fatal_phase:
            self.console.print(Panel(
                f"[bold red]Run aborted during {report.fatal_phase}[/bold red]\n\n{report.fatal_error}",
                title="Fatal Error",
                border_style="red"
            ))
        elif report.passed:
            self.console.print(Panel(
                f"[green]{summarize(report.results)}[/green]",
                title="PASSED",
                border_style="green"
            ))
        else:
            self.console.print(Panel(
                f"[red]{summarize(report.results)}[/red]\n\nFailed: {', '.join(report.failed)}",
                title="FAILED",
                border_style="red"
            ))

    def format_scenarios(self, scenarios: List[ScenarioSpec]):
        """Format the scenario catalog."""
        table = Table(title="Scenario Catalog", show_header=True, header_style="bold magenta")
        table.add_column("#", justify="right")
        table.add_column("Scenario", style="cyan", no_wrap=True)
        table.add_column("Target")
        table.add_column("Credential")
        table.add_column("Mode")
        table.add_column("Features")
        table.add_column("Time Bound", justify="center")

        for index, spec in enumerate(scenarios, 1):
            table.add_row(
                str(index),
                spec.name,
                f"-p {spec.package}" if spec.package else "example",
                spec.credential.value,
                spec.mode.value,
                ", ".join(spec.features) or "-",
                "yes" if spec.time_bound else "no",
            )

        self.console.print(table)

    def format_health(self, services: Dict[str, bool]):
        """Format per-service health."""
        table = Table(title="Backend Health", show_header=True, header_style="bold magenta")
        table.add_column("Service", style="cyan", no_wrap=True)
        table.add_column("Status", justify="center")

        for service, healthy in services.items():
            table.add_row(service, "[green]✓ UP[/green]" if healthy else "[red]✗ DOWN[/red]")

        self.console.print(table)

    def format_config(self, data: Dict[str, Any]):
        """Format configuration values."""
        table = Table(title="Configuration", show_header=True, header_style="bold magenta")
        table.add_column("Key", style="cyan", no_wrap=True)
        table.add_column("Value")

        for key, value in data.items():
            if isinstance(value, list):
                value = "\n".join(str(v) for v in value)
            table.add_row(key, "-" if value is None else str(value))

        self.console.print(table)

    def format_error(self, error: str):
        """Format error message."""
        self.console.print(f"[bold red]Error:[/bold red] {error}")
