# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Install interface definitions into the realm before any scenario runs.
"""

import glob
import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Union

from ..collaborators.base import InterfaceRegistry
from ..errors import InstallError

logger = logging.getLogger(__name__)

Source = Union[str, Path]


def resolve_sources(sources: Iterable[Source]) -> List[Path]:
    """Expand paths, directories and globs into a sorted set of JSON files."""
    found = set()
    for source in sources:
        source = str(source)
        if glob.has_magic(source):
            matches = glob.glob(source, recursive=True)
        else:
            matches = [source]

        for match in matches:
            path = Path(match)
            if path.is_dir():
                found.update(p.resolve() for p in path.glob("*.json"))
            elif path.is_file() and path.suffix == ".json":
                found.add(path.resolve())
            elif not glob.has_magic(source):
                raise InstallError(f"interface source not found: {source}")

    return sorted(found)


def read_interface_name(path: Path) -> str:
    try:
        data = json.loads(Path(path).read_text())
    except (OSError, ValueError) as e:
        raise InstallError(f"cannot read interface {path}: {e}") from e

    name = data.get("interface_name") if isinstance(data, dict) else None
    if not name:
        raise InstallError(f"{path} has no interface_name")
    return name


class InterfaceInstaller:
    """Syncs interface definitions (create or update) and verifies them."""

    def __init__(self, registry: InterfaceRegistry):
        self.registry = registry

    def install(self, sources: Iterable[Source]) -> List[str]:
        """
        Install every interface found in sources.

        Returns:
            Sorted names of the installed interfaces

        Raises:
            InstallError: unreadable definition, sync failure, or an interface
                still missing from the realm after the sync
        """
        files = resolve_sources(sources)
        if not files:
            logger.warning("No interface definitions found, nothing to install")
            return []

        names: Dict[str, Path] = {}
        for path in files:
            name = read_interface_name(path)
            if name in names:
                # Same interface defined in two places; the registry keeps one
                logger.warning(f"{name} defined in both {names[name]} and {path}")
            names[name] = path

        logger.info(f"Syncing {len(files)} interface file(s)")
        try:
            self.registry.sync_interfaces(files)
            installed = set(self.registry.list_interfaces())
        except Exception as e:
            raise InstallError(f"interface sync failed: {e}") from e

        missing = sorted(set(names) - installed)
        if missing:
            raise InstallError(f"interfaces missing after sync: {', '.join(missing)}")

        return sorted(names)
