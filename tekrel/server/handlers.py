"""Tool handlers: run a release operation and describe the outcome as text.

Operation failures are reported in the returned text, not raised, so the
client sees them as an ordinary tool result.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from tekrel.core.config import Config
from tekrel.core.result import Err
from tekrel.output.console import ConsoleProtocol
from tekrel.server.params import BranchParams, HackParams, PlanParams
from tekrel.services.release.branches import create_release_branches
from tekrel.services.release.config import DEFAULT_BRANCH_TABLES, BranchTables
from tekrel.services.release.hack_repo import configure_hack_repo
from tekrel.services.release.release_plans import create_release_plans


@dataclass(frozen=True, slots=True)
class ToolContext:
    config: Config
    console: ConsoleProtocol
    tables: BranchTables = DEFAULT_BRANCH_TABLES
    env: Mapping[str, str] = field(default_factory=lambda: os.environ)


def handle_create_branches(params: BranchParams, ctx: ToolContext) -> str:
    result = create_release_branches(params.minor_version, config=ctx.config, console=ctx.console)
    if isinstance(result, Err):
        return f"Failed to create branches: {result.error.pretty()}"
    return f"Successfully created release branches for version {params.minor_version}"


def handle_configure_hack(params: HackParams, ctx: ToolContext) -> str:
    result = configure_hack_repo(
        params.to_request(),
        config=ctx.config,
        console=ctx.console,
        tables=ctx.tables,
    )
    if isinstance(result, Err):
        return f"Failed to configure hack repository: {result.error.pretty()}"

    hack = result.value
    lines = [
        "Successfully configured hack repository and created pull request",
        f"Pull request: {hack.pr_url}",
    ]
    if hack.report.failed:
        lines.append("Not updated:")
        lines += [f"- {path.name}: {error.pretty()}" for path, error in hack.report.failed]
    if hack.ocp_note:
        lines.append(f"Note: OCP {params.ocp_version} index configuration must be added manually")
    return "\n".join(lines)


def handle_create_plans(params: PlanParams, ctx: ToolContext) -> str:
    result = create_release_plans(
        params.to_request(),
        config=ctx.config,
        console=ctx.console,
        env=ctx.env,
    )
    if isinstance(result, Err):
        return f"Failed to create release plans: {result.error.pretty()}"

    docs = result.value.documents
    return (
        "Successfully created ReleasePlan and ReleasePlanAdmission files\n"
        f"Branch: {result.value.branch} "
        f"({len(docs.admissions)} admissions, {len(docs.release_plans)} release plans)"
    )
