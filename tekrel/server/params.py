"""Tool argument parsing.

Arguments arrive as an untyped mapping. Only ``minor_version`` is required;
optional values of the wrong type are ignored rather than rejected.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from tekrel.core.structured import get_str, get_str_list, get_str_map
from tekrel.services.release.config import DEFAULT_OCP_VERSIONS
from tekrel.services.release.model import HackRequest, PlanRequest


class ParameterError(ValueError):
    """A tool was called with arguments it cannot run with."""


def _minor_version(args: Mapping[str, object]) -> str:
    minor = get_str(args, "minor_version")
    if minor is None:
        raise ParameterError("minor_version parameter is required")
    return minor


@dataclass(frozen=True, slots=True)
class BranchParams:
    minor_version: str

    @classmethod
    def from_arguments(cls, args: Mapping[str, object]) -> BranchParams:
        return cls(minor_version=_minor_version(args))


@dataclass(frozen=True, slots=True)
class HackParams:
    minor_version: str
    ocp_version: str | None = None
    upstream_versions: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_arguments(cls, args: Mapping[str, object]) -> HackParams:
        return cls(
            minor_version=_minor_version(args),
            ocp_version=get_str(args, "ocp_version"),
            upstream_versions=MappingProxyType(get_str_map(args, "upstream_versions") or {}),
        )

    def to_request(self) -> HackRequest:
        return HackRequest(
            minor_version=self.minor_version,
            ocp_version=self.ocp_version,
            upstream_versions=self.upstream_versions,
        )


@dataclass(frozen=True, slots=True)
class PlanParams:
    minor_version: str
    patch_version: str | None = None
    ocp_versions: tuple[str, ...] = DEFAULT_OCP_VERSIONS

    @classmethod
    def from_arguments(cls, args: Mapping[str, object]) -> PlanParams:
        # An empty (or all-invalid) list falls back to the defaults.
        versions = get_str_list(args, "ocp_versions")
        return cls(
            minor_version=_minor_version(args),
            patch_version=get_str(args, "patch_version"),
            ocp_versions=tuple(versions) if versions else DEFAULT_OCP_VERSIONS,
        )

    def to_request(self) -> PlanRequest:
        return PlanRequest(
            minor_version=self.minor_version,
            ocp_versions=self.ocp_versions,
            patch_version=self.patch_version,
        )
