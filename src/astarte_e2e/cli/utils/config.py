# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Configuration management for the CLI.

Precedence: defaults < YAML file < environment variables < command line flags.
Only this module reads the process environment; the driver components get
explicit values.
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml

from ...models import Environment
from ...scenarios import DEFAULT_INTERFACE_SOURCES, DEFAULT_TIME_BOUND

logger = logging.getLogger(__name__)

_TRUE = ("1", "true", "yes", "y", "on")
_FALSE = ("0", "false", "no", "n", "off", "")


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Invalid boolean value: {value}")


@dataclass
class Config:
    """CLI configuration container."""

    # Backend settings
    realm: str = "test"
    base_domain: str = "autotest.astarte-platform.org"
    secure_transport: bool = True
    pairing_url: Optional[str] = None  # derived from base_domain when unset
    http_timeout: float = 10.0
    http_retry: int = 0

    # Readiness settings
    health_deadline: float = 600.0  # seconds
    health_interval: float = 5.0  # seconds

    # Run settings
    job_deadline: float = 1800.0  # seconds
    time_bound: int = DEFAULT_TIME_BOUND
    scenario_timeout: Optional[float] = None  # per-scenario override
    jobs: int = 1
    sdk_path: Optional[Path] = None
    work_dir: Path = field(default_factory=lambda: Path("target") / "e2e")
    interface_sources: Tuple[str, ...] = DEFAULT_INTERFACE_SOURCES

    # Tools
    astartectl: str = "astartectl"
    cargo: str = "cargo"
    command_timeout: float = 60.0

    # Display settings
    default_format: str = "table"  # table, json
    no_color: bool = False

    # Debug settings
    debug: bool = False

    # Config file path
    config_path: Optional[Path] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> "Config":
        """Build configuration from the YAML file and the environment."""
        config = cls(config_path=config_path)
        if config.config_path is None:
            config.config_path = Path.home() / ".astarte-e2e" / "config.yaml"

        if config.config_path.exists():
            config.load_from_file()

        config.load_from_env(os.environ if env is None else env)
        return config

    def load_from_file(self):
        """Load configuration from YAML file."""
        try:
            with open(self.config_path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Could not load config file {self.config_path}: {e}")
            return

        if not isinstance(data, dict):
            logger.warning(f"Ignoring {self.config_path}: expected a mapping")
            return

        # Backend settings
        astarte = data.get("astarte", {}) or {}
        self.realm = astarte.get("realm", self.realm)
        self.base_domain = astarte.get("base_domain", self.base_domain)
        self.secure_transport = parse_bool(astarte.get("secure_transport", self.secure_transport))
        self.pairing_url = astarte.get("pairing_url", self.pairing_url)
        self.http_timeout = float(astarte.get("timeout", self.http_timeout))
        self.http_retry = int(astarte.get("retry", self.http_retry))

        # Readiness settings
        health = data.get("health", {}) or {}
        self.health_deadline = float(health.get("deadline", self.health_deadline))
        self.health_interval = float(health.get("interval", self.health_interval))

        # Run settings
        run = data.get("run", {}) or {}
        self.job_deadline = float(run.get("job_deadline", self.job_deadline))
        self.time_bound = int(run.get("time_bound", self.time_bound))
        if run.get("scenario_timeout") is not None:
            self.scenario_timeout = float(run["scenario_timeout"])
        self.jobs = int(run.get("jobs", self.jobs))
        if run.get("sdk_path"):
            self.sdk_path = Path(run["sdk_path"]).expanduser()
        if run.get("work_dir"):
            self.work_dir = Path(run["work_dir"]).expanduser()
        if run.get("interfaces"):
            self.interface_sources = tuple(run["interfaces"])

        # Tools
        tools = data.get("tools", {}) or {}
        self.astartectl = tools.get("astartectl", self.astartectl)
        self.cargo = tools.get("cargo", self.cargo)
        self.command_timeout = float(tools.get("timeout", self.command_timeout))

        # Display settings
        display = data.get("display", {}) or {}
        self.default_format = display.get("format", self.default_format)
        self.no_color = not parse_bool(display.get("color", True))

    def load_from_env(self, env: Mapping[str, str]):
        """Load configuration from environment variables."""
        if realm := env.get("E2E_REALM"):
            self.realm = realm

        if base_domain := env.get("E2E_BASE_DOMAIN"):
            self.base_domain = base_domain

        if "E2E_SECURE_TRANSPORT" in env:
            self.secure_transport = parse_bool(env["E2E_SECURE_TRANSPORT"])

        if pairing_url := env.get("E2E_PAIRING_URL"):
            self.pairing_url = pairing_url

        if time_bound := env.get("E2E_TIME_BOUND"):
            self.time_bound = int(time_bound)

        if sdk_path := env.get("E2E_SDK_PATH"):
            self.sdk_path = Path(sdk_path)

        if env.get("E2E_DEBUG"):
            self.debug = True

        if env.get("NO_COLOR"):
            self.no_color = True

    @property
    def api_url(self) -> str:
        scheme = "https" if self.secure_transport else "http"
        return f"{scheme}://api.{self.base_domain}"

    @property
    def resolved_pairing_url(self) -> str:
        return self.pairing_url or f"{self.api_url}/pairing"

    def environment(self) -> Environment:
        return Environment(
            realm=self.realm,
            pairing_url=self.resolved_pairing_url,
            base_domain=self.base_domain,
            secure_transport=self.secure_transport,
        )

    def interface_paths(self) -> List[str]:
        """Interface sources, relative ones anchored at the SDK path."""
        base = self.sdk_path or Path(".")
        return [s if Path(s).is_absolute() else str(base / s) for s in self.interface_sources]

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        data = {}
        for f in fields(self):
            if f.name == "config_path":
                continue
            value = getattr(self, f.name)
            if isinstance(value, Path):
                value = str(value)
            elif isinstance(value, tuple):
                value = list(value)
            data[f.name] = value
        data["pairing_url"] = self.resolved_pairing_url
        data["api_url"] = self.api_url
        return data

    def validate(self) -> List[str]:
        """Validate configuration values; returns the list of problems."""
        errors = []

        if not self.realm:
            errors.append("realm must not be empty")

        if not self.base_domain and not self.pairing_url:
            errors.append("base_domain or pairing_url must be set")

        if self.pairing_url and not self.pairing_url.startswith(("http://", "https://")):
            errors.append("pairing_url must start with http:// or https://")

        if self.health_deadline <= 0:
            errors.append("health_deadline must be positive")

        if self.health_interval <= 0:
            errors.append("health_interval must be positive")

        if self.job_deadline <= 0:
            errors.append("job_deadline must be positive")

        if self.time_bound <= 0:
            errors.append("time_bound must be positive")

        if self.jobs < 1:
            errors.append("jobs must be at least 1")

        if self.sdk_path is not None and not Path(self.sdk_path).is_dir():
            errors.append(f"sdk_path {self.sdk_path} is not a directory")

        if self.default_format not in ("table", "json"):
            errors.append("format must be table or json")

        return errors
