# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Collaborators backed by the astartectl command line tool.

astartectl must already be configured (context with the cluster url and the
realm private key), which is what the cluster setup action does in CI.
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence

from ..errors import CommandError
from .base import InterfaceRegistry, RegistrationBackend

logger = logging.getLogger(__name__)


class Astartectl(InterfaceRegistry, RegistrationBackend):
    """Thin wrapper around astartectl invocations."""

    def __init__(
        self,
        executable: str = "astartectl",
        realm: Optional[str] = None,
        timeout: float = 60.0,
    ):
        """
        Initialize the wrapper.

        Args:
            executable: astartectl binary name or path
            realm: Realm name passed explicitly to realm-scoped commands
            timeout: Upper bound for a single invocation, in seconds
        """
        self.executable = executable
        self.realm = realm
        self.timeout = timeout

    def _realm_args(self) -> List[str]:
        return ["--realm-name", self.realm] if self.realm else []

    def _run(self, args: Sequence[str]) -> str:
        """Run astartectl and return its stripped stdout."""
        cmd = [self.executable, *args]
        logger.debug(f"Running: {' '.join(shlex.quote(c) for c in cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            raise CommandError(cmd, None, f"timed out after {self.timeout}s")
        except OSError as e:
            raise CommandError(cmd, None, str(e))

        if result.returncode != 0:
            raise CommandError(cmd, result.returncode, result.stderr)
        return result.stdout.strip()

    # Interface registry

    def sync_interfaces(self, paths: Sequence[Path]) -> None:
        if not paths:
            return
        self._run([
            "realm-management", "interfaces", "sync",
            *[str(p) for p in paths],
            "--non-interactive",
            *self._realm_args(),
        ])

    def list_interfaces(self) -> List[str]:
        output = self._run(["realm-management", "interfaces", "ls", *self._realm_args()])
        return [line.strip() for line in output.splitlines() if line.strip()]

    # Registration

    def generate_device_id(self) -> str:
        return self._run(["utils", "device-id", "generate-random"])

    def register_device(self, device_id: str) -> str:
        return self._run([
            "pairing", "agent", "register",
            "--compact-output",
            *self._realm_args(),
            "--", device_id,
        ])

    def generate_pairing_token(self, scope: str = "pairing") -> str:
        return self._run(["utils", "gen-jwt", scope])
