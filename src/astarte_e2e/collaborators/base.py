# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Abstract collaborators the driver talks to.

The concrete backend (HTTP health endpoints, astartectl) lives in sibling
modules; tests plug in fakes.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Sequence


class HealthCheck(ABC):
    """Answers whether the backend is ready to serve."""

    @abstractmethod
    def check_healthy(self, timeout: Optional[float] = None) -> bool:
        """Single check; timeout bounds how long it may take."""
        pass


class InterfaceRegistry(ABC):
    """Realm-side store of interface definitions."""

    @abstractmethod
    def sync_interfaces(self, paths: Sequence[Path]) -> None:
        """Create or update the given interface definitions."""
        pass

    @abstractmethod
    def list_interfaces(self) -> List[str]:
        """Names of the interfaces installed in the realm."""
        pass


class RegistrationBackend(ABC):
    """Device identity and credential issuer."""

    @abstractmethod
    def generate_device_id(self) -> str:
        pass

    @abstractmethod
    def register_device(self, device_id: str) -> str:
        """Register a device and return its credentials secret."""
        pass

    @abstractmethod
    def generate_pairing_token(self, scope: str = "pairing") -> str:
        pass
