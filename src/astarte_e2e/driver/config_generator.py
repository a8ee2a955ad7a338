# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Scenario configuration rendering.

render() and render_env() are pure; write_config() and make_store_dir() are
the only steps touching the filesystem.
"""

import tempfile
from pathlib import Path
from typing import Dict, Optional

from ..models import DeviceIdentity, Environment, ScenarioConfig, ScenarioSpec

CONFIG_FILENAME = "configuration.json"
STORE_PREFIX = "store-"


def render(spec: ScenarioSpec, identity: DeviceIdentity, environment: Environment) -> ScenarioConfig:
    """Build the configuration record for one scenario run."""
    if spec.needs_pairing_token and identity.pairing_token is None:
        raise ValueError(f"{spec.name} needs a pairing token")
    if not spec.needs_pairing_token and identity.credentials_secret is None:
        raise ValueError(f"{spec.name} needs a credentials secret")

    return ScenarioConfig(
        realm=environment.realm,
        device_id=identity.device_id,
        pairing_url=environment.pairing_url,
        pairing_token=identity.pairing_token,
        credentials_secret=identity.credentials_secret,
    )


def config_path(spec: ScenarioSpec, sdk_path: Optional[Path], work_dir: Path) -> Path:
    """Where the scenario program expects its configuration."""
    if sdk_path is not None:
        return Path(sdk_path) / "examples" / spec.name / CONFIG_FILENAME
    return Path(work_dir) / spec.name / CONFIG_FILENAME


def write_config(config: ScenarioConfig, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(config.to_json())
    # Holds a credential
    path.chmod(0o600)
    return path


def render_env(
    spec: ScenarioSpec,
    identity: DeviceIdentity,
    environment: Environment,
    store_dir: Path,
) -> Dict[str, str]:
    """
    Build the E2E_* environment for programs configured through it.

    Only the provisioned identity and the given environment end up in the
    result; nothing is inherited from the driver's own process.
    """
    if spec.needs_pairing_token and identity.pairing_token is None:
        raise ValueError(f"{spec.name} needs a pairing token")
    if spec.token_scope and identity.api_token is None:
        raise ValueError(f"{spec.name} needs a {spec.token_scope} token")

    env = {
        "E2E_REALM": environment.realm,
        "E2E_BASE_DOMAIN": environment.base_domain,
        "E2E_SECURE_TRANSPORT": "true" if environment.secure_transport else "false",
        "E2E_PAIRING_URL": environment.pairing_url,
        "E2E_DEVICE_ID": identity.device_id,
        "E2E_STORE_DIR": str(store_dir),
    }
    if identity.pairing_token is not None:
        env["E2E_PAIRING_TOKEN"] = identity.pairing_token
    else:
        env["E2E_CREDENTIALS_SECRET"] = identity.credentials_secret
    if identity.api_token is not None:
        env["E2E_TOKEN"] = identity.api_token
    return env


def make_store_dir(spec: ScenarioSpec, work_dir: Path) -> Path:
    """Fresh, empty persistence directory for one scenario run."""
    parent = Path(work_dir) / spec.name
    parent.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(prefix=STORE_PREFIX, dir=parent))
