from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Literal

ReleaseType = Literal["RHEA", "RHBA"]

FBC_GROUP = "fbc"


@dataclass(frozen=True, slots=True)
class BranchRepo:
    """A component repository that gets a release branch."""

    name: str
    remote: str | None  # repository name under the GitHub org
    # None means the configured default source branch.
    source_branch: str | None = None
    # Skipped repos are listed so the table documents every component.
    skip: bool = False


@dataclass(frozen=True, slots=True)
class SubComponent:
    """One image of a release group (e.g. the core controller)."""

    name: str
    repository: str  # image repository under openshift-pipelines/


@dataclass(frozen=True, slots=True)
class EnvironmentProfile:
    registry_host: str
    policy: str
    intention: str
    service_account: str
    business_unit: str


@dataclass(frozen=True, slots=True)
class FbcSettings:
    """Index-image publishing data for the FBC admission document."""

    from_index: str
    target_index: str
    publishing_credentials: str
    request_timeout_seconds: int
    build_timeout_seconds: int
    allowed_packages: tuple[str, ...]
    staged_index: bool = False


@dataclass(frozen=True, slots=True)
class GenerationTask:
    """One cell of the group x environment matrix."""

    group: str
    is_fbc: bool
    environment: str
    profile: EnvironmentProfile
    sub_components: tuple[SubComponent, ...]
    # Whole list for FBC (one document enumerates every OCP version).
    ocp_versions: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class BranchEntry:
    """A rendered entry of a repo config ``branches:`` list."""

    name: str
    versions: tuple[str, ...]
    upstream: str | None = None


def _frozen_map(data: Mapping[str, str] | None = None) -> Mapping[str, str]:
    return MappingProxyType(dict(data or {}))


@dataclass(frozen=True, slots=True)
class BranchUpdate:
    """What the branch-section editor needs to know about the new release."""

    minor_version: str
    upstream_versions: Mapping[str, str] = field(default_factory=_frozen_map)


@dataclass(frozen=True, slots=True)
class HackRequest:
    minor_version: str
    ocp_version: str | None = None
    upstream_versions: Mapping[str, str] = field(default_factory=_frozen_map)


@dataclass(frozen=True, slots=True)
class PlanRequest:
    minor_version: str
    ocp_versions: tuple[str, ...]
    patch_version: str | None = None
