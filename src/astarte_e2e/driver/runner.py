# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Execute scenario programs (cargo examples of the device SDK).

A scenario failing is an expected outcome here: it is returned as a FAILED
RunResult, never raised to the caller.
"""

import logging
import os
import shlex
import signal
import subprocess
import time
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Sequence, TextIO

from ..errors import ScenarioFailure
from ..models import RunMode, RunResult, RunStatus, ScenarioSpec

logger = logging.getLogger(__name__)

OUTPUT_FILENAME = "output.log"
COMMAND_FILENAME = "command.txt"

# Grace period between SIGTERM and SIGKILL for a timed out scenario
KILL_GRACE = 5.0


class ScenarioRunner:
    """Builds and runs one scenario program per call."""

    def __init__(
        self,
        work_dir: Path,
        sdk_path: Optional[Path] = None,
        cargo: str = "cargo",
        time_bound: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize runner.

        Args:
            work_dir: Root for per-scenario output directories
            sdk_path: Cargo workspace of the SDK (working directory of cargo)
            cargo: cargo executable
            time_bound: Value of the -t argument for time-bounded scenarios
            clock: Monotonic clock used to time runs
        """
        self.work_dir = Path(work_dir)
        self.sdk_path = Path(sdk_path) if sdk_path is not None else None
        self.cargo = cargo
        self.time_bound = time_bound
        self._clock = clock

    def _feature_args(self, spec: ScenarioSpec) -> List[str]:
        if not spec.features:
            return []
        return [f"--features={','.join(spec.features)}"]

    def _target_args(self, spec: ScenarioSpec) -> List[str]:
        if spec.package:
            return ["-p", spec.package]
        return ["--example", spec.name]

    def program_args(self, spec: ScenarioSpec, config_path: Optional[Path] = None) -> List[str]:
        args = list(spec.args)
        if spec.config_arg and config_path is not None:
            args += [spec.config_arg, str(config_path)]
        if spec.time_bound and self.time_bound is not None:
            args += ["-t", str(self.time_bound)]
        return args

    def build_command(self, spec: ScenarioSpec) -> List[str]:
        return [self.cargo, "build", "--locked"] + self._target_args(spec) + self._feature_args(spec)

    def run_command(self, spec: ScenarioSpec, config_path: Optional[Path] = None) -> List[str]:
        cmd = [self.cargo, "run", "--locked"] + self._target_args(spec) + self._feature_args(spec)
        args = self.program_args(spec, config_path)
        if args:
            cmd += ["--"] + args
        return cmd

    def _environment(self, spec: ScenarioSpec, extra_env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        env = dict(os.environ)
        env.update(dict(spec.env))
        if extra_env:
            env.update(extra_env)
        return env

    def _execute(self, cmd: Sequence[str], env: Dict[str, str], log: TextIO, timeout: float) -> int:
        """Run cmd with output appended to log; returns its exit status."""
        log.write(f"$ {' '.join(shlex.quote(c) for c in cmd)}\n")
        log.flush()

        proc = subprocess.Popen(
            list(cmd),
            stdout=log,
            stderr=subprocess.STDOUT,
            cwd=str(self.sdk_path) if self.sdk_path else None,
            env=env,
            start_new_session=True,
        )
        try:
            return proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            self._terminate(proc)
            raise

    def _terminate(self, proc: subprocess.Popen) -> None:
        """Stop the whole process group (cargo plus the example it spawned)."""
        try:
            os.killpg(proc.pid, signal.SIGTERM)
            proc.wait(timeout=KILL_GRACE)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {proc.pid} ignored SIGTERM, killing")
            os.killpg(proc.pid, signal.SIGKILL)
            proc.wait()
        except ProcessLookupError:
            proc.wait()

    def run(
        self,
        spec: ScenarioSpec,
        config_path: Optional[Path] = None,
        mode: Optional[RunMode] = None,
        timeout: Optional[float] = None,
        extra_env: Optional[Mapping[str, str]] = None,
    ) -> RunResult:
        """
        Run one scenario and collect its result.

        Args:
            spec: Scenario to run
            config_path: Rendered configuration file, if the program reads one
            mode: Overrides spec.mode
            timeout: Overrides spec.timeout; one deadline covers build and run
            extra_env: Per-run environment, applied on top of spec.env
        """
        mode = mode or spec.mode
        timeout = spec.timeout if timeout is None else timeout
        deadline = self._clock() + timeout

        out_dir = self.work_dir / spec.name
        output_path = out_dir / OUTPUT_FILENAME

        commands = []
        if mode is RunMode.PREBUILT:
            commands.append(self.build_command(spec))
        commands.append(self.run_command(spec, config_path))

        try:
            out_dir.mkdir(parents=True, exist_ok=True)
            (out_dir / COMMAND_FILENAME).write_text(
                "\n".join(" ".join(shlex.quote(c) for c in cmd) for cmd in commands) + "\n"
            )
            log = output_path.open("w")
        except OSError as e:
            failure = ScenarioFailure(spec.name, f"cannot prepare {out_dir}: {e}")
            return self._failed(spec, failure, 0.0, None)

        env = self._environment(spec, extra_env)
        exit_code = None
        duration = 0.0

        try:
            with log:
                if mode is RunMode.PREBUILT:
                    logger.info(f"{spec.name}: building")
                    build_status = self._execute(commands[0], env, log, deadline - self._clock())
                    if build_status != 0:
                        raise ScenarioFailure(spec.name, f"build exited with status {build_status}", build_status)

                remaining = deadline - self._clock()
                if remaining <= 0:
                    raise subprocess.TimeoutExpired(commands[-1], timeout)

                logger.info(f"{spec.name}: running")
                start = self._clock()
                try:
                    exit_code = self._execute(commands[-1], env, log, remaining)
                finally:
                    duration = self._clock() - start

            if exit_code != 0:
                raise ScenarioFailure(spec.name, f"exited with status {exit_code}", exit_code)

        except subprocess.TimeoutExpired:
            failure = ScenarioFailure(spec.name, f"timed out after {timeout:.0f}s")
            return self._failed(spec, failure, duration, output_path)
        except OSError as e:
            failure = ScenarioFailure(spec.name, f"could not start: {e}")
            return self._failed(spec, failure, duration, output_path)
        except ScenarioFailure as failure:
            return self._failed(spec, failure, duration, output_path)

        logger.info(f"{spec.name}: passed in {duration:.1f}s")
        return RunResult(
            name=spec.name,
            status=RunStatus.PASSED,
            exit_code=0,
            duration=duration,
            output_path=output_path,
        )

    def _failed(
        self, spec: ScenarioSpec, failure: ScenarioFailure, duration: float, output_path: Optional[Path]
    ) -> RunResult:
        logger.error(f"Scenario failed: {failure}")
        return RunResult(
            name=spec.name,
            status=RunStatus.FAILED,
            exit_code=failure.exit_code,
            duration=duration,
            output_path=output_path,
            error=f"{failure.phase}: {failure}",
        )
