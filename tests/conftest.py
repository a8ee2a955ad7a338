# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Shared fakes for the driver tests.

Nothing here talks to a live cluster: the health, registry and registration
collaborators are in-memory, and "cargo" is a shell script.
"""

import json
import stat
import threading
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest

from astarte_e2e.collaborators.base import HealthCheck, InterfaceRegistry, RegistrationBackend
from astarte_e2e.driver.provisioning import random_device_id
from astarte_e2e.models import Environment

# The SDK example programs
SCENARIO_NAMES = [
    "registration",
    "retention",
    "individual_datastream",
    "object_datastream",
    "individual_properties",
]

# Whole default catalog: the integration test crate runs first
CATALOG_NAMES = ["e2e_test"] + SCENARIO_NAMES


class FakeClock:
    """Monotonic clock advanced only by sleep() or explicitly."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeHealth(HealthCheck):
    """Healthy from the n-th check on; never healthy when n is None."""

    def __init__(self, healthy_on: Optional[int] = 1, error: Optional[Exception] = None):
        self.healthy_on = healthy_on
        self.error = error
        self.calls = 0
        self.timeouts: List[Optional[float]] = []

    def check_healthy(self, timeout: Optional[float] = None) -> bool:
        self.calls += 1
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return self.healthy_on is not None and self.calls >= self.healthy_on


class FakeRegistry(InterfaceRegistry):
    """Realm interface store keyed by interface name."""

    def __init__(self, fail_sync: bool = False, drop: Sequence[str] = ()):
        self.interfaces: Dict[str, dict] = {}
        self.fail_sync = fail_sync
        self.drop = set(drop)
        self.sync_calls = 0

    def sync_interfaces(self, paths) -> None:
        self.sync_calls += 1
        if self.fail_sync:
            raise RuntimeError("realm management unavailable")
        for path in paths:
            data = json.loads(Path(path).read_text())
            if data["interface_name"] not in self.drop:
                self.interfaces[data["interface_name"]] = data

    def list_interfaces(self) -> List[str]:
        return sorted(self.interfaces)


class FakeRegistration(RegistrationBackend):
    """Registers devices in memory; optionally fails for some calls."""

    def __init__(self, fail_register: bool = False, fail_token: bool = False, fixed_id: Optional[str] = None):
        self.fail_register = fail_register
        self.fail_token = fail_token
        self.fixed_id = fixed_id
        self.devices: Dict[str, str] = {}
        self.tokens: List[str] = []
        self._lock = threading.Lock()

    def generate_device_id(self) -> str:
        return self.fixed_id or random_device_id()

    def register_device(self, device_id: str) -> str:
        if self.fail_register:
            raise RuntimeError("pairing API refused the device")
        secret = f"secret-{device_id}"
        with self._lock:
            self.devices[device_id] = secret
        return secret

    def generate_pairing_token(self, scope: str = "pairing") -> str:
        if self.fail_token:
            raise RuntimeError("no private key")
        with self._lock:
            token = f"jwt-{scope}-{len(self.tokens)}"
            self.tokens.append(token)
        return token


FAKE_CARGO = """#!/bin/sh
# Fake cargo: $1 is build|run, $4 the example (or package) name
echo "$*" >> "$CARGO_LOG"
for name in $FAIL_RUN; do
    if [ "$1" = "run" ] && [ "$4" = "$name" ]; then
        echo "$name failed"
        exit 1
    fi
done
for name in $FAIL_BUILD; do
    if [ "$1" = "build" ] && [ "$4" = "$name" ]; then
        exit 101
    fi
done
for name in $SLOW_BUILD; do
    if [ "$1" = "build" ] && [ "$4" = "$name" ]; then
        sleep 2
    fi
done
for name in $HANG_RUN; do
    if [ "$1" = "run" ] && [ "$4" = "$name" ]; then
        sleep 30
    fi
done
if [ -n "$E2E_STORE_DIR" ]; then
    echo "device $E2E_DEVICE_ID store $E2E_STORE_DIR token $E2E_TOKEN"
fi
echo "$4 ok"
exit 0
"""


@pytest.fixture
def fake_cargo(tmp_path, monkeypatch):
    """Path of an executable fake cargo; invocations are logged to cargo.log."""
    script = tmp_path / "bin" / "cargo"
    script.parent.mkdir()
    script.write_text(FAKE_CARGO)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    log = tmp_path / "cargo.log"
    monkeypatch.setenv("CARGO_LOG", str(log))
    monkeypatch.delenv("FAIL_RUN", raising=False)
    monkeypatch.delenv("FAIL_BUILD", raising=False)
    monkeypatch.delenv("HANG_RUN", raising=False)
    monkeypatch.delenv("SLOW_BUILD", raising=False)
    monkeypatch.delenv("E2E_STORE_DIR", raising=False)
    return script


@pytest.fixture
def cargo_calls(tmp_path):
    """Reads back the fake cargo invocations."""
    def read() -> List[str]:
        log = tmp_path / "cargo.log"
        if not log.exists():
            return []
        return log.read_text().splitlines()
    return read


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def environment():
    return Environment(realm="test", pairing_url="https://api.autotest.astarte-platform.org/pairing")


@pytest.fixture
def interface_dir(tmp_path):
    """Two interface definitions in a nested layout."""
    root = tmp_path / "interfaces"
    (root / "nested").mkdir(parents=True)
    (root / "org.astarte-platform.rust.e2etest.DeviceDatastream.json").write_text(json.dumps({
        "interface_name": "org.astarte-platform.rust.e2etest.DeviceDatastream",
        "version_major": 0,
        "version_minor": 1,
        "type": "datastream",
        "ownership": "device",
    }))
    (root / "nested" / "org.astarte-platform.rust.e2etest.DeviceProperty.json").write_text(json.dumps({
        "interface_name": "org.astarte-platform.rust.e2etest.DeviceProperty",
        "version_major": 0,
        "version_minor": 1,
        "type": "properties",
        "ownership": "device",
    }))
    return root


@pytest.fixture
def fakes():
    """Namespace with the fake collaborator classes."""
    class Fakes:
        Clock = FakeClock
        Health = FakeHealth
        Registry = FakeRegistry
        Registration = FakeRegistration
    return Fakes
