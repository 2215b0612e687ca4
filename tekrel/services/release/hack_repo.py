"""configure-hack-repo: register a release in openshift-pipelines/hack.

The hack repository's release branch is cloned, its konflux configs are
pointed at the release, each component config gets a single branch entry,
and the result is proposed as a pull request against the release branch.
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from tekrel.core.config import Config
from tekrel.core.result import Err, Ok, Result
from tekrel.git.repository import Repository
from tekrel.output.console import ConsoleProtocol
from tekrel.services.release.branches_yaml import (
    RepoBranchReport,
    replace_next_references,
    update_repo_branches,
)
from tekrel.services.release.config import (
    DEFAULT_BRANCH_TABLES,
    HACK_KONFLUX_DIR,
    HACK_REPOS_DIR,
    BranchTables,
)
from tekrel.services.release.errors import ReleaseError, from_git_error
from tekrel.services.release.gh import create_pull_request, ensure_gh_available, fork_owner
from tekrel.services.release.model import BranchUpdate, HackRequest
from tekrel.services.release.version import release_branch_name

_BRANCH_PREFIX = "update-konflux-config"
_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"


@dataclass(frozen=True, slots=True)
class HackResult:
    pr_url: str
    branch: str
    report: RepoBranchReport
    ocp_note: str | None = None


def commit_title(minor: str) -> str:
    return f"Update Konflux configuration for release v{minor}"


def ocp_note(ocp_version: str | None) -> str | None:
    if not ocp_version:
        return None
    return f"- Added new OCP {ocp_version} configuration"


def pr_body(request: HackRequest, report: RepoBranchReport) -> str:
    minor = request.minor_version
    lines = [
        commit_title(minor),
        "",
        "Changes:",
        f"- Updated version references for release v{minor}",
        "- Updated branch configurations in repos directory",
    ]
    note = ocp_note(request.ocp_version)
    if note:
        lines.append(note)
    if report.failed:
        lines += ["", "Not updated (needs manual attention):"]
        lines += [f"- {path.name}: {error.pretty()}" for path, error in report.failed]
    return "\n".join(lines) + "\n"


def configure_hack_repo(
    request: HackRequest,
    *,
    config: Config,
    console: ConsoleProtocol,
    tables: BranchTables = DEFAULT_BRANCH_TABLES,
    work_root: Path | None = None,
    now: Callable[[], datetime] = datetime.now,
) -> Result[HackResult, ReleaseError]:
    """Update the hack repo for a release and open a PR.

    Component configs that cannot be edited are listed in the PR body; the
    remaining configs are still updated.
    """
    if not request.minor_version:
        return Err(ReleaseError(kind="invalid_input", message="minor version is required"))

    gh = ensure_gh_available()
    if isinstance(gh, Err):
        return gh

    if work_root is not None:
        return _configure(request, config=config, console=console, tables=tables, root=work_root, now=now)

    with tempfile.TemporaryDirectory(prefix="tekrel-hack-") as tmp:
        return _configure(request, config=config, console=console, tables=tables, root=Path(tmp), now=now)


def _configure(
    request: HackRequest,
    *,
    config: Config,
    console: ConsoleProtocol,
    tables: BranchTables,
    root: Path,
    now: Callable[[], datetime],
) -> Result[HackResult, ReleaseError]:
    minor = request.minor_version
    base = release_branch_name(minor)
    slug = config.repos.hack_repo_slug

    console.header(f"{slug}: {base}")
    cloned = Repository.clone(config.repos.hack_repo_url, root / "hack", branch=base, console=console)
    if isinstance(cloned, Err):
        return Err(from_git_error(cloned.error, context=slug, kind="clone_failed"))
    repo = cloned.value

    branch = f"{_BRANCH_PREFIX}-{now().strftime(_TIMESTAMP_FORMAT)}"
    created = repo.create_branch(branch)
    if isinstance(created, Err):
        return Err(from_git_error(created.error, context=slug))

    replaced = replace_next_references(repo.path.joinpath(*HACK_KONFLUX_DIR), minor)
    if isinstance(replaced, Err):
        return replaced
    console.print(f"replaced next -> {minor} in {len(replaced.value)} konflux configs")

    report = update_repo_branches(
        repos_dir=repo.path.joinpath(*HACK_REPOS_DIR),
        update=BranchUpdate(minor_version=minor, upstream_versions=request.upstream_versions),
        tables=tables,
        console=console,
    )
    if isinstance(report, Err):
        return report

    note = ocp_note(request.ocp_version)
    if request.ocp_version:
        index_file = f"openshift-pipelines-index-{request.ocp_version}.yaml"
        console.warning(
            f"OCP {request.ocp_version} needs a new {index_file}; "
            "copy an existing openshift-pipelines-index-*.yaml"
        )

    title = commit_title(minor)
    for step in (repo.add_all, lambda: repo.commit(title), lambda: repo.push("origin", branch, force=True)):
        result = step()
        if isinstance(result, Err):
            return Err(from_git_error(result.error, context=slug))

    origin = repo.remote_url()
    if isinstance(origin, Err):
        return Err(from_git_error(origin.error, context=slug))
    owner = fork_owner(origin.value)
    if owner is None:
        return Err(
            ReleaseError(
                kind="pr_failed",
                message="could not determine fork owner from remote URL",
                hint=origin.value,
            )
        )

    pr = create_pull_request(
        repo_root=repo.path,
        repo_slug=slug,
        base=base,
        head=f"{owner}:{branch}",
        title=title,
        body=pr_body(request, report.value),
        console=console,
    )
    if isinstance(pr, Err):
        return pr

    console.success(f"PR: {pr.value}")
    return Ok(HackResult(pr_url=pr.value, branch=branch, report=report.value, ocp_note=note))
