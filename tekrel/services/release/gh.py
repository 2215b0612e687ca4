from __future__ import annotations

import re
import shutil
from pathlib import Path

from tekrel.core.result import Err, Ok, Result
from tekrel.output.console import ConsoleProtocol, Style
from tekrel.platform.process import run as run_process
from tekrel.services.release.errors import ReleaseError

_SSH_REMOTE = re.compile(r"^[\w.-]+@github\.com:(?P<owner>[^/]+)/")
_HTTPS_REMOTE = re.compile(r"^(?:https?|ssh)://(?:[^@/]+@)?github\.com/(?P<owner>[^/]+)/")


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def fork_owner(remote_url: str) -> str | None:
    """Owner of a GitHub remote.

    Accepts ``git@github.com:owner/repo.git`` and
    ``https://github.com/owner/repo``; returns None for anything else.
    """
    url = remote_url.strip()
    for pattern in (_SSH_REMOTE, _HTTPS_REMOTE):
        match = pattern.match(url)
        if match is not None:
            return match.group("owner")
    return None


def create_pull_request(
    *,
    repo_root: Path,
    repo_slug: str,
    base: str,
    head: str,
    title: str,
    body: str,
    console: ConsoleProtocol,
) -> Result[str, ReleaseError]:
    """Open a PR with ``gh pr create`` and return its URL."""
    cmd = [
        "gh",
        "pr",
        "create",
        "--repo",
        repo_slug,
        "--base",
        base,
        "--head",
        head,
        "--title",
        title,
        "--body",
        body,
    ]

    console.print(" ".join(cmd[:3]) + f" --repo {repo_slug} --head {head}", Style.DIM)
    result = run_process(cmd, cwd=repo_root)
    if isinstance(result, Err):
        e = result.error
        return Err(
            ReleaseError(
                kind="pr_failed",
                message=f"failed to create PR in {repo_slug}",
                hint=e.stderr.strip() or None,
            )
        )

    # gh prints progress lines before the URL on some versions.
    lines = result.value.strip().splitlines()
    url = lines[-1].strip() if lines else ""
    if not url.startswith("https://"):
        return Err(
            ReleaseError(
                kind="pr_failed",
                message="unexpected gh pr create output",
                hint=url or None,
            )
        )
    return Ok(url)
