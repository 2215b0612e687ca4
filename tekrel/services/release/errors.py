from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from tekrel.git.repository import GitError

ReleaseErrorKind = Literal[
    "invalid_input",
    "credentials_missing",
    "gh_missing",
    "clone_failed",
    "git_failed",
    "write_failed",
    "build_failed",
    "pr_failed",
    "document_invalid",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Failure of one release step.

    ``message`` names the step that failed; ``hint`` carries the underlying
    detail (usually stderr of the external command).
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message}: {self.hint}"
        return self.message


def from_git_error(
    error: GitError,
    *,
    context: str,
    kind: ReleaseErrorKind = "git_failed",
) -> ReleaseError:
    return ReleaseError(kind=kind, message=f"{context}: git {error.command} failed", hint=error.message)
