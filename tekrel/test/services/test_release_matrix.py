from __future__ import annotations

import pytest

from tekrel.services.release.config import (
    DEFAULT_OCP_VERSIONS,
    ENVIRONMENTS,
    RELEASE_GROUPS,
)
from tekrel.services.release.matrix import environment_profile, expand, fbc_settings
from tekrel.services.release.model import SubComponent


def test_expand_default_groups() -> None:
    tasks = expand(RELEASE_GROUPS, ENVIRONMENTS, DEFAULT_OCP_VERSIONS)

    assert [(t.group, t.environment) for t in tasks] == [
        ("cli", "stage"),
        ("cli", "prod"),
        ("core", "stage"),
        ("core", "prod"),
        ("operator", "stage"),
        ("operator", "prod"),
        ("fbc", "stage"),
        ("fbc", "prod"),
    ]
    assert [t.is_fbc for t in tasks].count(True) == 2


def test_expand_carries_all_ocp_versions() -> None:
    tasks = expand(RELEASE_GROUPS, ["prod"], ["4-16", "4-17"])
    fbc = [t for t in tasks if t.is_fbc]
    assert len(fbc) == 1
    assert fbc[0].ocp_versions == ("4-16", "4-17")


def test_expand_is_deterministic() -> None:
    first = expand(RELEASE_GROUPS, ENVIRONMENTS, DEFAULT_OCP_VERSIONS)
    second = expand(RELEASE_GROUPS, ENVIRONMENTS, DEFAULT_OCP_VERSIONS)
    assert first == second


def test_expand_custom_groups() -> None:
    groups = {"results": (SubComponent(name="api", repository="pipelines-results-api-rhel9"),)}
    tasks = expand(groups, ["stage"], [])
    assert len(tasks) == 1
    assert tasks[0].profile.registry_host == "registry.stage.redhat.io"
    assert tasks[0].sub_components[0].name == "api"


def test_profiles_differ_for_fbc() -> None:
    regular = environment_profile("prod", False)
    fbc = environment_profile("prod", True)
    assert regular.policy == "registry-standard"
    assert fbc.policy == "fbc-tekton-ecosystem-prod"
    assert fbc.registry_host == regular.registry_host == "registry.redhat.io"


def test_unknown_environment() -> None:
    with pytest.raises(ValueError, match="qa"):
        environment_profile("qa", False)
    with pytest.raises(ValueError):
        fbc_settings("qa")


def test_stage_fbc_uses_staged_index() -> None:
    assert fbc_settings("stage").staged_index is True
    assert fbc_settings("prod").target_index.endswith("{{ OCP_VERSION }}")
