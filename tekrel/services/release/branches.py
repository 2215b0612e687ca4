"""create-release-branches: cut ``release-v{minor}.x`` in every component repo."""

from __future__ import annotations

import tempfile
from collections.abc import Sequence
from pathlib import Path

from tekrel.core.config import Config
from tekrel.core.result import Err, Ok, Result
from tekrel.git.repository import Repository
from tekrel.output.console import ConsoleProtocol
from tekrel.services.release.config import BRANCH_REPOS
from tekrel.services.release.errors import ReleaseError, from_git_error
from tekrel.services.release.model import BranchRepo
from tekrel.services.release.version import release_branch_name


def repo_url(org: str, remote: str) -> str:
    return f"git@github.com:{org}/{remote}.git"


def create_release_branches(
    minor: str,
    *,
    config: Config,
    console: ConsoleProtocol,
    repos: Sequence[BranchRepo] = BRANCH_REPOS,
    work_root: Path | None = None,
) -> Result[tuple[str, ...], ReleaseError]:
    """Create and push the release branch in each non-skipped repository.

    Each repository is cloned fresh into a temporary directory, the source
    branch is brought up to date and the release branch is pushed to origin.
    The first failure aborts the run; branches already pushed stay pushed.

    Returns:
        Ok(names of the repositories that got the branch)
    """
    if not minor:
        return Err(ReleaseError(kind="invalid_input", message="minor version is required"))

    branch = release_branch_name(minor)
    if work_root is not None:
        return _create_all(minor, branch, config=config, console=console, repos=repos, root=work_root)

    with tempfile.TemporaryDirectory(prefix="tekrel-branches-") as tmp:
        return _create_all(minor, branch, config=config, console=console, repos=repos, root=Path(tmp))


def _create_all(
    minor: str,
    branch: str,
    *,
    config: Config,
    console: ConsoleProtocol,
    repos: Sequence[BranchRepo],
    root: Path,
) -> Result[tuple[str, ...], ReleaseError]:
    done: list[str] = []
    for repo in repos:
        if repo.skip or repo.remote is None:
            continue

        console.header(f"{repo.name}: {branch}")
        source = repo.source_branch or config.repos.source_branch
        result = _create_one(
            url=repo_url(config.repos.github_org, repo.remote),
            dest=root / repo.name,
            source=source,
            branch=branch,
            console=console,
            label=repo.name,
        )
        if isinstance(result, Err):
            return result
        done.append(repo.name)

    console.success(f"Created {branch} in {len(done)} repositories for {minor}")
    return Ok(tuple(done))


def _create_one(
    *,
    url: str,
    dest: Path,
    source: str,
    branch: str,
    console: ConsoleProtocol,
    label: str,
) -> Result[None, ReleaseError]:
    cloned = Repository.clone(url, dest, console=console)
    if isinstance(cloned, Err):
        return Err(from_git_error(cloned.error, context=label, kind="clone_failed"))

    repo = cloned.value
    steps = (
        repo.fetch_all,
        lambda: repo.checkout(source),
        lambda: repo.pull("origin", source),
        lambda: repo.create_branch(branch),
        lambda: repo.push("origin", branch),
    )
    for step in steps:
        result = step()
        if isinstance(result, Err):
            return Err(from_git_error(result.error, context=label))
    return Ok(None)
