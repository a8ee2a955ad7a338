# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Output formatters for the CLI."""

from typing import Optional

from rich.console import Console

from .base import BaseFormatter
from .table import TableFormatter
from .json import JSONFormatter

__all__ = ["BaseFormatter", "TableFormatter", "JSONFormatter", "get_formatter"]


def get_formatter(format_type: str, console: Optional[Console] = None) -> BaseFormatter:
    """Get formatter instance by type."""
    console = console or Console()
    if format_type == "json":
        # Plain JSON stays machine readable when piped
        return JSONFormatter(console, colored=console.is_terminal)
    return TableFormatter(console)
