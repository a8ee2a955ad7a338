# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
End-to-end run orchestration.

Phases:
    INIT -> WAITING -> INSTALLING_INTERFACES -> RUNNING_SCENARIOS -> REPORTING -> DONE

WAITING and INSTALLING_INTERFACES may move to FAILED, which ends the run.
RUNNING_SCENARIOS only ever moves forward: a failed scenario is recorded and
the next one still runs, the verdict is computed once all were attempted.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..errors import E2EError, InstallError, ReadinessTimeout
from ..models import Environment, Report, RunResult, RunStatus, ScenarioSpec
from .config_generator import config_path, make_store_dir, render, render_env, write_config
from .interfaces import InterfaceInstaller
from .provisioning import IdentityProvisioner
from .readiness import DEFAULT_DEADLINE, ReadinessWaiter
from .runner import ScenarioRunner

logger = logging.getLogger(__name__)

DEFAULT_JOB_DEADLINE = 1800.0


class Phase(str, Enum):
    INIT = "init"
    WAITING = "waiting"
    INSTALLING_INTERFACES = "installing_interfaces"
    RUNNING_SCENARIOS = "running_scenarios"
    REPORTING = "reporting"
    DONE = "done"
    FAILED = "failed"


_TRANSITIONS: Dict[Phase, FrozenSet[Phase]] = {
    Phase.INIT: frozenset({Phase.WAITING}),
    Phase.WAITING: frozenset({Phase.INSTALLING_INTERFACES, Phase.FAILED}),
    Phase.INSTALLING_INTERFACES: frozenset({Phase.RUNNING_SCENARIOS, Phase.FAILED}),
    Phase.RUNNING_SCENARIOS: frozenset({Phase.RUNNING_SCENARIOS, Phase.REPORTING}),
    Phase.REPORTING: frozenset({Phase.DONE}),
    Phase.DONE: frozenset(),
    Phase.FAILED: frozenset(),
}


@dataclass(frozen=True)
class RunSettings:
    """Everything a run needs besides its collaborators."""

    environment: Environment
    work_dir: Path
    sdk_path: Optional[Path] = None
    interface_sources: Tuple[str, ...] = ()
    readiness_deadline: float = DEFAULT_DEADLINE
    job_deadline: float = DEFAULT_JOB_DEADLINE
    wait: bool = True
    install_interfaces: bool = True
    jobs: int = 1


class Orchestrator:
    """Sequences readiness, interface install and the scenarios."""

    def __init__(
        self,
        waiter: ReadinessWaiter,
        installer: InterfaceInstaller,
        provisioner: IdentityProvisioner,
        runner: ScenarioRunner,
        settings: RunSettings,
        clock: Callable[[], float] = time.monotonic,
        on_result: Optional[Callable[[RunResult], None]] = None,
    ):
        self.waiter = waiter
        self.installer = installer
        self.provisioner = provisioner
        self.runner = runner
        self.settings = settings
        self.on_result = on_result
        self._clock = clock
        self._phase = Phase.INIT
        self._scenario_index = 0
        self._lock = threading.Lock()
        self._started = 0.0

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def scenario_index(self) -> int:
        """Number of scenarios attempted so far."""
        return self._scenario_index

    def _transition(self, target: Phase) -> None:
        if target not in _TRANSITIONS[self._phase]:
            raise RuntimeError(f"illegal transition {self._phase.value} -> {target.value}")
        logger.debug(f"Phase {self._phase.value} -> {target.value}")
        self._phase = target

    def _remaining(self) -> float:
        return self.settings.job_deadline - (self._clock() - self._started)

    def _fail(self, report: Report, error: E2EError) -> Report:
        self._transition(Phase.FAILED)
        report.fatal_phase = error.phase
        report.fatal_error = str(error)
        report.finished_at = datetime.now(timezone.utc)
        logger.error(f"Run aborted during {error.phase}: {error}")
        return report

    def run(self, scenarios: Sequence[ScenarioSpec]) -> Report:
        """
        Execute a whole run.

        Fatal errors end up in the report (fatal_phase/fatal_error) instead of
        being raised, so callers always get a report to render.
        """
        report = Report()
        self._started = self._clock()

        self._transition(Phase.WAITING)
        if self.settings.wait:
            deadline = min(self.settings.readiness_deadline, self._remaining())
            try:
                self.waiter.wait_healthy(deadline)
            except ReadinessTimeout as e:
                return self._fail(report, e)

        self._transition(Phase.INSTALLING_INTERFACES)
        if self.settings.install_interfaces:
            try:
                installed = self.installer.install(self.settings.interface_sources)
                logger.info(f"Installed {len(installed)} interface(s)")
            except InstallError as e:
                return self._fail(report, e)

        self._transition(Phase.RUNNING_SCENARIOS)
        if self.settings.jobs > 1 and len(scenarios) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.jobs, thread_name_prefix="scenario") as pool:
                futures = [pool.submit(self._attempt, spec) for spec in scenarios]
                results = [f.result() for f in futures]
        else:
            results = [self._attempt(spec) for spec in scenarios]

        self._transition(Phase.REPORTING)
        for result in results:
            report.add(result)
        report.finished_at = datetime.now(timezone.utc)
        self._transition(Phase.DONE)
        return report

    def _attempt(self, spec: ScenarioSpec) -> RunResult:
        remaining = self._remaining()
        if remaining <= 0:
            logger.warning(f"{spec.name}: skipped, job deadline exceeded")
            result = RunResult(name=spec.name, status=RunStatus.SKIPPED, error="job deadline exceeded")
        else:
            try:
                result = self._run_scenario(spec, min(spec.timeout, remaining))
            except Exception as e:
                # Whatever breaks one scenario must not stop its siblings
                logger.exception(f"{spec.name}: unexpected error")
                result = RunResult(name=spec.name, status=RunStatus.FAILED, error=f"unexpected: {e}")

        with self._lock:
            self._scenario_index += 1
            self._transition(Phase.RUNNING_SCENARIOS)
        if self.on_result is not None:
            self.on_result(result)
        return result

    def _run_scenario(self, spec: ScenarioSpec, timeout: float) -> RunResult:
        """Provision, configure and run a single scenario."""
        try:
            identity = self.provisioner.provision(spec)
        except E2EError as e:
            logger.error(f"Provisioning failed: {e}")
            return RunResult(name=spec.name, status=RunStatus.FAILED, error=f"{e.phase}: {e}")

        environment = self.settings.environment
        path = None
        extra_env = None
        try:
            if spec.config_env:
                store_dir = make_store_dir(spec, self.settings.work_dir)
                extra_env = render_env(spec, identity, environment, store_dir)
            else:
                path = config_path(spec, self.settings.sdk_path, self.settings.work_dir)
                write_config(render(spec, identity, environment), path)
        except OSError as e:
            logger.error(f"{spec.name}: cannot write its configuration: {e}")
            return RunResult(name=spec.name, status=RunStatus.FAILED, error=f"configure: {e}")

        return self.runner.run(spec, path, timeout=timeout, extra_env=extra_env)


def summarize(results: List[RunResult]) -> str:
    passed = sum(1 for r in results if r.passed)
    return f"{passed}/{len(results)} scenarios passed"
