# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only
# License-Filename: LICENSE

"""
Default scenario catalog, in execution order.
"""

from typing import List, Optional, Sequence

from .models import CredentialKind, RunMode, ScenarioSpec

DEFAULT_TIME_BOUND = 10

DEFAULT_INTERFACE_SOURCES = (
    "e2e-test/interfaces/*.json",
    "e2e-test/interfaces/**/*.json",
    "docs/interfaces/*.json",
    "examples/**/interfaces/*.json",
)


def default_scenarios() -> List[ScenarioSpec]:
    return [
        # Integration test crate of the workspace, configured through E2E_* variables
        ScenarioSpec(
            name="e2e_test",
            credential=CredentialKind.PAIRING_TOKEN,
            package="e2e-test",
            args=("run",),
            mode=RunMode.BUILD_THEN_RUN,
            time_bound=False,
            token_scope="all-realm-apis",
            config_env=True,
            timeout=600.0,
        ),
        ScenarioSpec(
            name="registration",
            credential=CredentialKind.PAIRING_TOKEN,
            mode=RunMode.BUILD_THEN_RUN,
            time_bound=False,
            config_arg="--config",
        ),
        ScenarioSpec(
            name="retention",
            features=("derive",),
            # TODO: drop once the SDK retention ids are unique, debug assertions catch the collisions
            env=(("RUSTFLAGS", "-C debug-assertions=off"),),
        ),
        ScenarioSpec(name="individual_datastream"),
        ScenarioSpec(name="object_datastream", features=("derive",)),
        ScenarioSpec(name="individual_properties"),
    ]


def select(scenarios: Sequence[ScenarioSpec], names: Optional[Sequence[str]] = None) -> List[ScenarioSpec]:
    """Filter by name, keeping catalog order."""
    if not names:
        return list(scenarios)

    known = {s.name for s in scenarios}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise KeyError(f"unknown scenario(s): {', '.join(unknown)}")
    return [s for s in scenarios if s.name in names]
