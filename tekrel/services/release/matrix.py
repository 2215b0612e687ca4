"""Expansion of release groups into the documents to generate.

Each (group, environment) pair becomes one ``GenerationTask``. The FBC
group is not expanded per OCP version: its single admission document lists
every OCP version.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from tekrel.services.release.config import ENVIRONMENT_PROFILES, FBC_SETTINGS
from tekrel.services.release.model import (
    FBC_GROUP,
    EnvironmentProfile,
    FbcSettings,
    GenerationTask,
    SubComponent,
)


def environment_profile(
    environment: str,
    is_fbc: bool,
    *,
    profiles: Mapping[tuple[str, bool], EnvironmentProfile] = ENVIRONMENT_PROFILES,
) -> EnvironmentProfile:
    """Look up the registry/policy values for an environment.

    Raises:
        ValueError: If the environment is not in the table.
    """
    profile = profiles.get((environment, is_fbc))
    if profile is None:
        raise ValueError(f"unknown environment: {environment}")
    return profile


def fbc_settings(
    environment: str,
    *,
    settings: Mapping[str, FbcSettings] = FBC_SETTINGS,
) -> FbcSettings:
    value = settings.get(environment)
    if value is None:
        raise ValueError(f"unknown environment: {environment}")
    return value


def expand(
    groups: Mapping[str, Sequence[SubComponent]],
    environments: Iterable[str],
    ocp_versions: Sequence[str],
    *,
    profiles: Mapping[tuple[str, bool], EnvironmentProfile] = ENVIRONMENT_PROFILES,
) -> tuple[GenerationTask, ...]:
    """Build the generation matrix, groups outer, environments inner.

    The result only depends on the arguments, so reruns produce the same
    tasks and therefore the same file names.
    """
    envs = tuple(environments)
    versions = tuple(ocp_versions)
    tasks: list[GenerationTask] = []
    for group, subs in groups.items():
        is_fbc = group == FBC_GROUP
        for env in envs:
            tasks.append(
                GenerationTask(
                    group=group,
                    is_fbc=is_fbc,
                    environment=env,
                    profile=environment_profile(env, is_fbc, profiles=profiles),
                    sub_components=tuple(subs),
                    ocp_versions=versions,
                )
            )
    return tuple(tasks)
