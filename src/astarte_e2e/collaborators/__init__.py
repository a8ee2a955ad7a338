# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""Backend collaborators used by the driver."""

from .base import HealthCheck, InterfaceRegistry, RegistrationBackend
from .client import APIClient
from .astartectl import Astartectl

__all__ = [
    "HealthCheck",
    "InterfaceRegistry",
    "RegistrationBackend",
    "APIClient",
    "Astartectl",
]
