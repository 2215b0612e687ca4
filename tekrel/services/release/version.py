from __future__ import annotations

from dataclasses import dataclass

from tekrel.services.release.model import ReleaseType


@dataclass(frozen=True, slots=True)
class ResolvedRelease:
    release_type: ReleaseType
    full_version: str


def resolve(minor: str, patch: str | None) -> ResolvedRelease:
    """Derive advisory type and full version.

    A patch release is a bug-fix advisory (RHBA); a new minor is an
    enhancement advisory (RHEA) at ``.0``. Version strings are used verbatim.
    """
    if patch:
        return ResolvedRelease(release_type="RHBA", full_version=f"{minor}.{patch}")
    return ResolvedRelease(release_type="RHEA", full_version=f"{minor}.0")


def release_branch_name(minor: str) -> str:
    return f"release-v{minor}.x"
