"""Subprocess execution with Result-based error handling.

Every external tool (git, gh, build scripts) goes through ``run`` so that
failures come back as structured values carrying the command and stderr.
No timeout is applied unless the caller passes one.

Usage:
    result = run(["git", "fetch", "--all"], cwd=repo_dir)
    match result:
        case Ok(stdout):
            ...
        case Err(error):
            print(f"fetch failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from tekrel.core.result import Err, Ok, Result

__all__ = ["ProcessError", "REDACTED", "redact", "run"]

REDACTED = "[REDACTED]"


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed (secrets already redacted).
        returncode: The exit code, or -1 if the process could not start.
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def redact(text: str, secrets: Sequence[str]) -> str:
    """Replace every non-empty secret in text."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    secrets: Sequence[str] = (),
) -> Result[str, ProcessError]:
    """Execute a command and return stdout or error.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).
        secrets: Values to scrub from the recorded command and output.

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    shown = tuple(redact(part, secrets) for part in cmd)
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(
                command=shown,
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=shown,
                returncode=-1,
                stdout="",
                stderr=redact(str(e), secrets),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=shown,
                returncode=proc.returncode,
                stdout=redact(proc.stdout, secrets),
                stderr=redact(proc.stderr, secrets),
            )
        )

    return Ok(proc.stdout)
