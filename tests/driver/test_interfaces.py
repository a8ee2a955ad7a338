# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Tests for InterfaceInstaller.
"""

import json

import pytest

from astarte_e2e.driver.interfaces import InterfaceInstaller, read_interface_name, resolve_sources
from astarte_e2e.errors import InstallError

DATASTREAM = "org.astarte-platform.rust.e2etest.DeviceDatastream"
PROPERTY = "org.astarte-platform.rust.e2etest.DeviceProperty"


class TestResolveSources:

    def test_globs_are_deduplicated(self, interface_dir):
        """Test overlapping globs yield each file once."""
        files = resolve_sources([
            f"{interface_dir}/*.json",
            f"{interface_dir}/**/*.json",
        ])
        assert [f.name for f in files] == [f"{DATASTREAM}.json", f"{PROPERTY}.json"]

    def test_directory_source(self, interface_dir):
        """Test a directory expands to its JSON files."""
        files = resolve_sources([interface_dir])
        assert [f.name for f in files] == [f"{DATASTREAM}.json"]

    def test_missing_literal_path(self, tmp_path):
        """Test a missing literal path is an error."""
        with pytest.raises(InstallError, match="not found"):
            resolve_sources([tmp_path / "nope.json"])

    def test_unmatched_glob_is_empty(self, tmp_path):
        """Test an unmatched glob yields nothing."""
        assert resolve_sources([f"{tmp_path}/*.json"]) == []


class TestReadInterfaceName:

    def test_invalid_json(self, tmp_path):
        """Test unparsable JSON is reported with its path."""
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(InstallError, match="cannot read"):
            read_interface_name(path)

    def test_missing_name(self, tmp_path):
        """Test a file without interface_name is rejected."""
        path = tmp_path / "anonymous.json"
        path.write_text(json.dumps({"version_major": 0}))
        with pytest.raises(InstallError, match="no interface_name"):
            read_interface_name(path)


class TestInstall:

    def test_install(self, fakes, interface_dir):
        """Test interfaces are synced and verified."""
        registry = fakes.Registry()
        names = InterfaceInstaller(registry).install([f"{interface_dir}/**/*.json"])

        assert names == [DATASTREAM, PROPERTY]
        assert registry.list_interfaces() == [DATASTREAM, PROPERTY]

    def test_install_is_idempotent(self, fakes, interface_dir):
        """Test a second install succeeds on the same registry."""
        registry = fakes.Registry()
        installer = InterfaceInstaller(registry)
        sources = [f"{interface_dir}/**/*.json"]

        installer.install(sources)
        after_first = dict(registry.interfaces)
        installer.install(sources)

        assert registry.interfaces == after_first
        assert registry.sync_calls == 2

    def test_sync_failure(self, fakes, interface_dir):
        """Test a failed sync raises InstallError."""
        installer = InterfaceInstaller(fakes.Registry(fail_sync=True))
        with pytest.raises(InstallError, match="sync failed"):
            installer.install([interface_dir])

    def test_missing_after_sync(self, fakes, interface_dir):
        """Test an interface missing after sync raises InstallError."""
        installer = InterfaceInstaller(fakes.Registry(drop=[PROPERTY]))
        with pytest.raises(InstallError, match=PROPERTY):
            installer.install([f"{interface_dir}/**/*.json"])

    def test_empty_sources_are_a_noop(self, fakes, tmp_path):
        """Test no sources means no sync."""
        registry = fakes.Registry()
        assert InterfaceInstaller(registry).install([f"{tmp_path}/*.json"]) == []
        assert registry.sync_calls == 0
