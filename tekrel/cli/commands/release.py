from __future__ import annotations

from types import MappingProxyType

import typer

from tekrel.cli.commands._helpers import exit_on_error, exit_with_error
from tekrel.cli.context import build_context
from tekrel.core.errors import ErrorCode
from tekrel.output.console import Style
from tekrel.services.release.branches import create_release_branches
from tekrel.services.release.config import DEFAULT_OCP_VERSIONS
from tekrel.services.release.hack_repo import configure_hack_repo
from tekrel.services.release.model import HackRequest, PlanRequest
from tekrel.services.release.release_plans import create_release_plans


def parse_upstream(values: list[str]) -> dict[str, str]:
    """Parse repeated ``component=version`` options."""
    out: dict[str, str] = {}
    for item in values:
        component, sep, version = item.partition("=")
        if not sep or not component.strip() or not version.strip():
            exit_with_error(f"invalid --upstream (expected component=version): {item}", code=ErrorCode.USER_ERROR)
        out[component.strip()] = version.strip()
    return out


def branches(
    minor_version: str = typer.Argument(..., help="Minor version, e.g. 1.21"),
) -> None:
    """Create release-v<minor>.x in every component repository."""
    ctx = build_context()
    done = exit_on_error(
        create_release_branches(minor_version, config=ctx.config, console=ctx.console),
        ctx,
    )
    ctx.console.print(", ".join(done), Style.DIM)


def hack(
    minor_version: str = typer.Argument(..., help="Minor version, e.g. 1.21"),
    ocp_version: str | None = typer.Option(None, "--ocp", help="New OCP version to note in the PR"),
    upstream: list[str] = typer.Option(
        [],
        "--upstream",
        help="Upstream branch per component (component=version); repeatable",
    ),
) -> None:
    """Register the release in the hack repository and open a PR."""
    ctx = build_context()
    request = HackRequest(
        minor_version=minor_version,
        ocp_version=ocp_version,
        upstream_versions=MappingProxyType(parse_upstream(upstream)),
    )
    result = exit_on_error(
        configure_hack_repo(request, config=ctx.config, console=ctx.console),
        ctx,
    )
    if result.report.failed:
        ctx.console.warning(f"{len(result.report.failed)} repo configs were not updated")


def plans(
    minor_version: str = typer.Argument(..., help="Minor version, e.g. 1.21"),
    patch_version: str | None = typer.Option(None, "--patch", help="Patch number for a z-stream release"),
    ocp: list[str] = typer.Option(
        [],
        "--ocp",
        help="OCP version for the FBC admission (e.g. 4-16); repeatable",
    ),
) -> None:
    """Generate ReleasePlan/ReleasePlanAdmission files and open a merge request."""
    ctx = build_context()
    request = PlanRequest(
        minor_version=minor_version,
        ocp_versions=tuple(ocp) if ocp else DEFAULT_OCP_VERSIONS,
        patch_version=patch_version,
    )
    result = exit_on_error(
        create_release_plans(request, config=ctx.config, console=ctx.console),
        ctx,
    )
    ctx.console.print(f"branch: {result.branch}", Style.DIM)
