# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Tests for the shared data model and the scenario catalog.
"""

import io

import pytest
from rich.console import Console

from astarte_e2e.cli.formatters import JSONFormatter, TableFormatter, get_formatter
from astarte_e2e.driver.orchestrator import summarize
from astarte_e2e.models import CredentialKind, Report, RunMode, RunResult, RunStatus
from astarte_e2e.scenarios import default_scenarios, select


def by_name(name):
    return next(s for s in default_scenarios() if s.name == name)


class TestReport:
    """Test the run verdict."""

    def test_empty_report_passes(self):
        """Test a report with no results passes."""
        assert Report().passed
        assert Report().exit_code() == 0

    def test_any_failure_fails(self):
        """Test one failed result fails the run."""
        report = Report()
        report.add(RunResult(name="a", status=RunStatus.PASSED))
        report.add(RunResult(name="b", status=RunStatus.FAILED, exit_code=2))

        assert not report.passed
        assert report.exit_code() == 1
        assert report.failed == ["b"]
        assert report.succeeded == ["a"]

    def test_skipped_is_not_a_pass(self):
        """Test a skipped scenario fails the run."""
        report = Report(results=[RunResult(name="a", status=RunStatus.SKIPPED)])
        assert not report.passed

    def test_fatal_error_fails(self):
        """Test a fatal phase error fails the run."""
        report = Report(fatal_phase="waiting", fatal_error="backend not healthy after 600s (121 checks)")
        assert report.exit_code() == 1

    def test_to_dict(self):
        """Test the serialized report shape."""
        report = Report()
        report.add(RunResult(name="a", status=RunStatus.PASSED, exit_code=0, duration=1.23456))
        data = report.to_dict()

        assert data["passed"] is True
        assert data["finished_at"] is None
        assert data["scenarios"] == [{
            "name": "a",
            "status": "passed",
            "exit_code": 0,
            "duration": 1.235,
            "output": None,
            "error": None,
        }]

    def test_summarize(self):
        """Test the one-line summary."""
        results = [
            RunResult(name="a", status=RunStatus.PASSED),
            RunResult(name="b", status=RunStatus.FAILED),
        ]
        assert summarize(results) == "1/2 scenarios passed"


class TestCatalog:
    """Test the default scenario catalog."""

    def test_order(self):
        """Test the catalog runs the integration crate before the examples."""
        assert [s.name for s in default_scenarios()] == [
            "e2e_test",
            "registration",
            "retention",
            "individual_datastream",
            "object_datastream",
            "individual_properties",
        ]

    def test_pairing_token_users(self):
        """Test which scenarios register with a pairing token."""
        pairing = [s.name for s in default_scenarios() if s.credential is CredentialKind.PAIRING_TOKEN]
        assert pairing == ["e2e_test", "registration"]

    def test_registration_is_built_and_run_once(self):
        """Test registration builds first and takes its config as an argument."""
        registration = by_name("registration")
        assert registration.mode is RunMode.BUILD_THEN_RUN
        assert registration.time_bound is False
        assert registration.config_arg == "--config"

    def test_retention_disables_debug_assertions(self):
        """Test retention runs with debug assertions off."""
        retention = by_name("retention")
        assert dict(retention.env)["RUSTFLAGS"] == "-C debug-assertions=off"

    def test_e2e_test_entry(self):
        """Test the integration crate entry runs as a package and reads E2E_* variables."""
        e2e = by_name("e2e_test")
        assert e2e.package == "e2e-test"
        assert e2e.args == ("run",)
        assert e2e.mode is RunMode.BUILD_THEN_RUN
        assert e2e.time_bound is False
        assert e2e.token_scope == "all-realm-apis"
        assert e2e.config_env is True
        assert e2e.config_arg is None

    def test_examples_are_not_packages(self):
        """Test every other entry is an SDK example configured through a file."""
        examples = [s for s in default_scenarios() if s.name != "e2e_test"]
        assert all(s.package is None and not s.config_env for s in examples)

    def test_select_keeps_catalog_order(self):
        """Test selection follows catalog order, not argument order."""
        selected = select(default_scenarios(), ["individual_properties", "registration"])
        assert [s.name for s in selected] == ["registration", "individual_properties"]

    def test_select_unknown(self):
        """Test an unknown name is rejected."""
        with pytest.raises(KeyError, match="nope"):
            select(default_scenarios(), ["nope"])


class TestFormatters:

    def test_get_formatter(self):
        """Test formatter lookup by name."""
        console = Console(file=io.StringIO())
        assert isinstance(get_formatter("json", console), JSONFormatter)
        assert isinstance(get_formatter("table", console), TableFormatter)

    def test_table_report(self):
        """Test the table lists scenarios and the summary."""
        buffer = io.StringIO()
        report = Report(results=[
            RunResult(name="retention", status=RunStatus.PASSED, exit_code=0),
            RunResult(name="object_datastream", status=RunStatus.FAILED, exit_code=1, error="scenario: exited"),
        ])

        TableFormatter(Console(file=buffer, width=120)).format_report(report)

        output = buffer.getvalue()
        assert "object_datastream" in output
        assert "1/2 scenarios passed" in output

    def test_table_fatal_report(self):
        """Test the table shows the fatal phase."""
        buffer = io.StringIO()
        report = Report(fatal_phase="installing_interfaces", fatal_error="interface sync failed: boom")

        TableFormatter(Console(file=buffer, width=120)).format_report(report)

        assert "installing_interfaces" in buffer.getvalue()
