"""Git repository abstraction.

``Repository`` wraps the git CLI for one working copy. Every method runs a
single git command, echoes it to the console and returns a Result, so a
release flow can chain clone -> branch -> commit -> push and stop at the
first failure.

Usage:
    match Repository.clone(url, work_dir / "hack", branch="release-v1.21.x"):
        case Ok(repo):
            repo.create_branch("update-konflux-config")
        case Err(e):
            print(f"clone failed: {e.message}")
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from tekrel.core.result import Err, Ok, Result
from tekrel.output.console import ConsoleProtocol, Style
from tekrel.platform.process import redact
from tekrel.platform.process import run as run_process

__all__ = ["GitError", "Repository"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "push")
        message: stderr of the failed command, or a fallback description
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1

    def __str__(self) -> str:
        return f"git {self.command}: {self.message}"


class Repository:
    """A local git working copy.

    Attributes:
        path: Path to the repository root
    """

    def __init__(
        self,
        path: Path,
        *,
        console: ConsoleProtocol | None = None,
        secrets: Sequence[str] = (),
    ) -> None:
        """Initialize repository.

        Args:
            path: Path to repository root (containing .git)
            console: Where executed commands are echoed (optional)
            secrets: Values (tokens) to redact from echoed commands and errors
        """
        self.path = path
        self._console = console
        self._secrets = tuple(secrets)

    @classmethod
    def clone(
        cls,
        url: str,
        dest: Path,
        *,
        branch: str | None = None,
        console: ConsoleProtocol | None = None,
        secrets: Sequence[str] = (),
    ) -> Result[Repository, GitError]:
        """Clone url into dest (which must not exist or be empty).

        Args:
            url: Remote URL; may embed credentials listed in ``secrets``
            dest: Target directory
            branch: Branch to check out instead of the remote HEAD
        """
        repo = cls(dest, console=console, secrets=secrets)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(GitError(command="clone", message=f"cannot create {dest.parent}: {e}"))
        args = ["clone", url]
        if branch:
            args += ["-b", branch]
        args.append(str(dest))
        result = repo._git(args, cwd=dest.parent)
        if isinstance(result, Err):
            return result
        return Ok(repo)

    def fetch_all(self) -> Result[str, GitError]:
        return self._git(["fetch", "--all"])

    def checkout(self, branch: str) -> Result[str, GitError]:
        return self._git(["checkout", branch])

    def create_branch(self, branch: str) -> Result[str, GitError]:
        """Create branch from HEAD and switch to it."""
        return self._git(["checkout", "-b", branch])

    def pull(self, remote: str, branch: str) -> Result[str, GitError]:
        return self._git(["pull", remote, branch])

    def add_all(self) -> Result[str, GitError]:
        return self._git(["add", "."])

    def commit(self, message: str) -> Result[str, GitError]:
        return self._git(
            ["commit", "-m", message],
            fallback="git commit failed; configure user.name/user.email and retry",
        )

    def push(
        self,
        remote: str,
        branch: str,
        *,
        force: bool = False,
        set_upstream: bool = False,
        push_options: Sequence[str] = (),
    ) -> Result[str, GitError]:
        """Push branch to remote.

        Args:
            remote: Remote name or URL
            branch: Local branch to push
            force: Overwrite the remote branch
            set_upstream: Record remote/branch as upstream (-u)
            push_options: Server-side options passed as ``-o`` (GitLab uses
                these to open merge requests)
        """
        args = ["push"]
        if force:
            args.append("-f")
        if set_upstream:
            args.append("-u")
        for option in push_options:
            args += ["-o", option]
        args += [remote, branch]
        return self._git(args)

    def remote_url(self, remote: str = "origin") -> Result[str, GitError]:
        result = self._git(["config", "--get", f"remote.{remote}.url"], echo=False)
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def _git(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        echo: bool = True,
        fallback: str | None = None,
    ) -> Result[str, GitError]:
        """Run a git command in this repository (or in cwd, for clone).

        ``fallback`` replaces the error message when git prints nothing.
        """
        if echo and self._console is not None:
            self._console.print(redact(" ".join(["git", *args]), self._secrets), Style.DIM)

        cmd = ["git", *args] if cwd is not None else ["git", "-C", str(self.path), *args]
        result = run_process(cmd, cwd=cwd or self.path, secrets=self._secrets)
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=args[0],
                        message=e.stderr.strip()
                        or e.stdout.strip()
                        or fallback
                        or f"git {args[0]} failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(stdout)
