"""create-release-plans: add RPA/RP manifests to konflux-release-data.

The repository lives on GitLab. Pushing with ``merge_request.*`` push
options makes GitLab open the merge request, so no GitLab client is needed.
"""

from __future__ import annotations

import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote, urlsplit, urlunsplit

from tekrel.core.config import Config
from tekrel.core.result import Err, Ok, Result
from tekrel.git.repository import Repository
from tekrel.output.console import ConsoleProtocol, Style
from tekrel.platform.process import run as run_process
from tekrel.services.release.config import (
    BUILD_MANIFESTS_SCRIPT,
    ENVIRONMENTS,
    KUSTOMIZATION_FILE,
    RELEASE_GROUPS,
    RP_DIR,
    RPA_DIR,
)
from tekrel.services.release.errors import ReleaseError, from_git_error
from tekrel.services.release.manifests import WrittenDocuments, update_kustomization, write_documents
from tekrel.services.release.matrix import expand
from tekrel.services.release.model import PlanRequest
from tekrel.services.release.version import resolve


@dataclass(frozen=True, slots=True)
class GitLabCredentials:
    username: str
    token: str

    def secrets(self) -> tuple[str, ...]:
        return (self.token, quote(self.token, safe=""))


@dataclass(frozen=True, slots=True)
class PlanResult:
    branch: str
    documents: WrittenDocuments


def commit_title(minor: str) -> str:
    return f"Add ReleasePlan and ReleasePlanAdmission for v{minor}"


def plan_branch_name(minor: str) -> str:
    return f"release-plan-v{minor}"


def read_credentials(
    config: Config,
    env: Mapping[str, str],
) -> Result[GitLabCredentials, ReleaseError]:
    names = config.credentials
    username = env.get(names.username_env, "")
    token = env.get(names.token_env, "")
    if not username or not token:
        return Err(
            ReleaseError(
                kind="credentials_missing",
                message="GitLab credentials not set",
                hint=f"Set {names.username_env} and {names.token_env}",
            )
        )
    return Ok(GitLabCredentials(username=username, token=token))


def authenticated_url(url: str, creds: GitLabCredentials) -> str:
    """Embed credentials in an https URL, replacing any userinfo it has."""
    parts = urlsplit(url)
    host = parts.hostname or ""
    if parts.port is not None:
        host = f"{host}:{parts.port}"
    userinfo = f"{quote(creds.username, safe='')}:{quote(creds.token, safe='')}"
    return urlunsplit(parts._replace(netloc=f"{userinfo}@{host}"))


def merge_request_options(*, target: str, title: str) -> tuple[str, ...]:
    return (
        "merge_request.create",
        f"merge_request.target={target}",
        f"merge_request.title={title}",
    )


def create_release_plans(
    request: PlanRequest,
    *,
    config: Config,
    console: ConsoleProtocol,
    env: Mapping[str, str] | None = None,
    work_root: Path | None = None,
) -> Result[PlanResult, ReleaseError]:
    """Generate manifests for every group/environment and open a GitLab MR.

    Credentials are read before anything is cloned. The token never appears
    in console output or in returned errors.
    """
    if not request.minor_version:
        return Err(ReleaseError(kind="invalid_input", message="minor version is required"))

    creds = read_credentials(config, os.environ if env is None else env)
    if isinstance(creds, Err):
        return creds

    if work_root is not None:
        return _create(request, config=config, console=console, creds=creds.value, root=work_root)

    with tempfile.TemporaryDirectory(prefix="tekrel-plans-") as tmp:
        return _create(request, config=config, console=console, creds=creds.value, root=Path(tmp))


def _create(
    request: PlanRequest,
    *,
    config: Config,
    console: ConsoleProtocol,
    creds: GitLabCredentials,
    root: Path,
) -> Result[PlanResult, ReleaseError]:
    minor = request.minor_version
    resolved = resolve(minor, request.patch_version)
    tasks = expand(RELEASE_GROUPS, ENVIRONMENTS, request.ocp_versions)
    secrets = creds.secrets()
    remote = authenticated_url(config.repos.konflux_repo_url, creds)
    label = "konflux-release-data"

    console.header(f"{label}: {resolved.release_type} {resolved.full_version}")
    cloned = Repository.clone(remote, root / label, console=console, secrets=secrets)
    if isinstance(cloned, Err):
        return Err(from_git_error(cloned.error, context=label, kind="clone_failed"))
    repo = cloned.value

    branch = plan_branch_name(minor)
    created = repo.create_branch(branch)
    if isinstance(created, Err):
        return Err(from_git_error(created.error, context=label))

    rp_dir = repo.path.joinpath(*RP_DIR)
    written = write_documents(
        admission_dir=repo.path.joinpath(*RPA_DIR),
        release_plan_dir=rp_dir,
        tasks=tasks,
        minor=minor,
        resolved=resolved,
    )
    if isinstance(written, Err):
        return written
    docs = written.value
    console.print(
        f"wrote {len(docs.admissions)} admissions and {len(docs.release_plans)} release plans"
    )

    kustomized = update_kustomization(rp_dir / KUSTOMIZATION_FILE, [p.name for p in docs.release_plans])
    if isinstance(kustomized, Err):
        return kustomized

    built = _run_build_manifests(repo.path, console=console, secrets=secrets)
    if isinstance(built, Err):
        return built

    title = commit_title(minor)
    options = merge_request_options(target=config.repos.konflux_base_branch, title=title)
    steps = (
        repo.add_all,
        lambda: repo.commit(title),
        lambda: repo.push(remote, branch, set_upstream=True, push_options=options),
    )
    for step in steps:
        result = step()
        if isinstance(result, Err):
            return Err(from_git_error(result.error, context=label))

    console.success(f"Pushed {branch}; merge request requested against {config.repos.konflux_base_branch}")
    return Ok(PlanResult(branch=branch, documents=docs))


def _run_build_manifests(
    repo_root: Path,
    *,
    console: ConsoleProtocol,
    secrets: tuple[str, ...],
) -> Result[None, ReleaseError]:
    script = repo_root.joinpath(*BUILD_MANIFESTS_SCRIPT)
    rel = script.relative_to(repo_root)
    console.print(f"./{rel}", Style.DIM)
    result = run_process([str(script)], cwd=repo_root, secrets=secrets)
    if isinstance(result, Err):
        e = result.error
        return Err(
            ReleaseError(
                kind="build_failed",
                message=f"{rel} failed (exit {e.returncode})",
                hint=e.stderr.strip() or e.stdout.strip() or None,
            )
        )
    return Ok(None)
