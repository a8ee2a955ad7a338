# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
JSON formatter for structured output.
"""

import json
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.syntax import Syntax

from ...models import Report, ScenarioSpec
from .base import BaseFormatter


class JSONFormatter(BaseFormatter):
    """Format output as JSON for scripting and automation."""

    def __init__(self, console: Optional[Console] = None, pretty: bool = True, colored: bool = True):
        """Initialize JSON formatter.

        Args:
            console: Rich console to print to
            pretty: Whether to pretty-print JSON
            colored: Whether to use syntax highlighting
        """
        super().__init__(console)
        self.pretty = pretty
        self.colored = colored

    def format_report(self, report: Report):
        self._print_json(report.to_dict())

    def format_scenarios(self, scenarios: List[ScenarioSpec]):
        output = {
            "scenarios": [
                {
                    "name": s.name,
                    "target": f"package {s.package}" if s.package else f"example {s.name}",
                    "credential": s.credential.value,
                    "configured_by": "environment" if s.config_env else "file",
                    "mode": s.mode.value,
                    "features": list(s.features),
                    "time_bound": s.time_bound,
                }
                for s in scenarios
            ],
            "count": len(scenarios)
        }
        self._print_json(output)

    def format_health(self, services: Dict[str, bool]):
        output = {
            "services": services,
            "healthy": all(services.values())
        }
        self._print_json(output)

    def format_config(self, data: Dict[str, Any]):
        self._print_json(data)

    def format_error(self, error: str):
        output = {
            "error": error,
            "success": False
        }
        self._print_json(output)

    def _print_json(self, data: Any):
        """Print JSON with optional formatting and coloring."""
        if self.pretty:
            json_str = json.dumps(data, indent=2, sort_keys=False, default=str)
        else:
            json_str = json.dumps(data, default=str)

        if self.colored:
            self.console.print(Syntax(json_str, "json", theme="monokai"))
        else:
            self.console.print(json_str, markup=False, highlight=False, soft_wrap=True)
