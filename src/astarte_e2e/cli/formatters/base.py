# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Base formatter class for output formatting.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from rich.console import Console

from ...models import Report, ScenarioSpec


class BaseFormatter(ABC):
    """Abstract base class for output formatters."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    @abstractmethod
    def format_report(self, report: Report):
        """Format the result of a run."""
        pass

    @abstractmethod
    def format_scenarios(self, scenarios: List[ScenarioSpec]):
        """Format the scenario catalog."""
        pass

    @abstractmethod
    def format_health(self, services: Dict[str, bool]):
        """Format per-service health."""
        pass

    @abstractmethod
    def format_config(self, data: Dict[str, Any]):
        """Format configuration values."""
        pass

    @abstractmethod
    def format_error(self, error: str):
        """Format error message for output."""
        pass

    def format_success(self, message: str):
        """Format success message for output."""
        self.console.print(f"[green]✓[/green] {message}")

    def format_warning(self, message: str):
        """Format warning message for output."""
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def _format_duration(self, seconds: float) -> str:
        """Format duration in human-readable format."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            minutes = seconds / 60
            return f"{minutes:.1f}m"
        else:
            hours = seconds / 3600
            return f"{hours:.1f}h"
