# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Error taxonomy for the end-to-end driver.

Fatal errors (ReadinessTimeout, InstallError) abort the whole run.
Scenario-fatal errors (ProvisionError, ScenarioFailure) only fail the
scenario they belong to.
"""

from typing import Optional, Sequence


class E2EError(Exception):
    """Base class for all driver errors."""

    phase: str = "unknown"
    fatal: bool = False


class CommandError(E2EError):
    """An external collaborator command failed."""

    def __init__(self, command: Sequence[str], returncode: Optional[int], stderr: str = ""):
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        if returncode is None:
            message = f"{self.command[0]} did not complete"
        else:
            message = f"{self.command[0]} exited with status {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ReadinessTimeout(E2EError):
    """The backend never became healthy within the deadline."""

    phase = "waiting"
    fatal = True

    def __init__(self, deadline: float, attempts: int):
        self.deadline = deadline
        self.attempts = attempts
        super().__init__(
            f"backend not healthy after {deadline:.0f}s ({attempts} checks)"
        )


class InstallError(E2EError):
    """Interface definitions could not be installed."""

    phase = "installing_interfaces"
    fatal = True


class ProvisionError(E2EError):
    """Identity or credential acquisition failed for one scenario."""

    phase = "provision"

    def __init__(self, scenario: str, reason: str):
        self.scenario = scenario
        super().__init__(f"{scenario}: {reason}")


class ScenarioFailure(E2EError):
    """A scenario process failed, timed out, or could not be started."""

    phase = "scenario"

    def __init__(self, scenario: str, reason: str, exit_code: Optional[int] = None):
        self.scenario = scenario
        self.exit_code = exit_code
        super().__init__(f"{scenario}: {reason}")
