# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Command modules for the CLI."""

from . import healthy
from . import run
from . import interfaces
from . import scenarios
from . import config

__all__ = ["healthy", "run", "interfaces", "scenarios", "config"]
