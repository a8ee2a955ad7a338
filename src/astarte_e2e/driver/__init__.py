# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
End-to-end driver components.

Leaf-first: config_generator, provisioning, readiness, interfaces, runner,
and the orchestrator sequencing them.
"""

from .config_generator import render, render_env, write_config, config_path, make_store_dir
from .provisioning import IdentityProvisioner, random_device_id
from .readiness import ReadinessWaiter
from .interfaces import InterfaceInstaller
from .runner import ScenarioRunner
from .orchestrator import Orchestrator, Phase, RunSettings

__all__ = [
    "render",
    "render_env",
    "write_config",
    "config_path",
    "make_store_dir",
    "IdentityProvisioner",
    "random_device_id",
    "ReadinessWaiter",
    "InterfaceInstaller",
    "ScenarioRunner",
    "Orchestrator",
    "Phase",
    "RunSettings",
]
