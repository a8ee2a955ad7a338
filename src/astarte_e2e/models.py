# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Data model shared by the driver components.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


class CredentialKind(str, Enum):
    """Which credential a scenario needs to reach the backend."""

    PAIRING_TOKEN = "pairing_token"
    CREDENTIALS_SECRET = "credentials_secret"


class RunMode(str, Enum):
    """How a scenario program gets compiled before it runs."""

    PREBUILT = "prebuilt"
    BUILD_THEN_RUN = "build_then_run"


class RunStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ScenarioSpec:
    """Static description of one scenario program."""

    name: str
    credential: CredentialKind = CredentialKind.CREDENTIALS_SECRET
    features: Tuple[str, ...] = ()
    args: Tuple[str, ...] = ()
    mode: RunMode = RunMode.PREBUILT
    time_bound: bool = True
    env: Tuple[Tuple[str, str], ...] = ()
    config_arg: Optional[str] = None
    timeout: float = 300.0
    # Cargo package to run instead of an example of the SDK crate
    package: Optional[str] = None
    # Scope of an extra API token issued alongside the credential
    token_scope: Optional[str] = None
    # Configuration handed over as E2E_* environment instead of a file
    config_env: bool = False

    @property
    def needs_pairing_token(self) -> bool:
        return self.credential is CredentialKind.PAIRING_TOKEN


@dataclass(frozen=True)
class DeviceIdentity:
    """A freshly provisioned device, valid for a single scenario run."""

    device_id: str
    pairing_token: Optional[str] = None
    credentials_secret: Optional[str] = None
    api_token: Optional[str] = None

    def __post_init__(self):
        if (self.pairing_token is None) == (self.credentials_secret is None):
            raise ValueError("identity needs exactly one of pairing_token or credentials_secret")

    def __repr__(self) -> str:
        # Keep secrets out of logs and tracebacks
        kind = "pairing_token" if self.pairing_token is not None else "credentials_secret"
        extra = ", api_token=***" if self.api_token is not None else ""
        return f"DeviceIdentity(device_id={self.device_id!r}, {kind}=***{extra})"


@dataclass(frozen=True)
class Environment:
    """Backend coordinates every scenario shares."""

    realm: str
    pairing_url: str
    base_domain: str = ""
    secure_transport: bool = True


@dataclass(frozen=True)
class ScenarioConfig:
    """Runtime configuration record read by a scenario program."""

    realm: str
    device_id: str
    pairing_url: str
    pairing_token: Optional[str] = None
    credentials_secret: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {"realm": self.realm, "device_id": self.device_id}
        if self.pairing_token is not None:
            data["pairing_token"] = self.pairing_token
        else:
            data["credentials_secret"] = self.credentials_secret
        data["pairing_url"] = self.pairing_url
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + "\n"


@dataclass
class RunResult:
    """Outcome of one scenario attempt."""

    name: str
    status: RunStatus
    exit_code: Optional[int] = None
    duration: float = 0.0
    output_path: Optional[Path] = None
    error: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.status is RunStatus.PASSED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "exit_code": self.exit_code,
            "duration": round(self.duration, 3),
            "output": str(self.output_path) if self.output_path else None,
            "error": self.error,
        }


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Report:
    """Ordered results of a whole run plus any fatal error."""

    results: List[RunResult] = field(default_factory=list)
    fatal_phase: Optional[str] = None
    fatal_error: Optional[str] = None
    started_at: datetime = field(default_factory=_now)
    finished_at: Optional[datetime] = None

    def add(self, result: RunResult) -> None:
        self.results.append(result)

    @property
    def passed(self) -> bool:
        return self.fatal_phase is None and all(r.passed for r in self.results)

    @property
    def failed(self) -> List[str]:
        return [r.name for r in self.results if not r.passed]

    @property
    def succeeded(self) -> List[str]:
        return [r.name for r in self.results if r.passed]

    def exit_code(self) -> int:
        return 0 if self.passed else 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "fatal_phase": self.fatal_phase,
            "fatal_error": self.fatal_error,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "scenarios": [r.to_dict() for r in self.results],
        }
