"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from tekrel.core.errors import ErrorCode
from tekrel.core.result import Err, Result
from tekrel.output.console import Style
from tekrel.services.release.errors import ReleaseError, ReleaseErrorKind

if TYPE_CHECKING:
    from tekrel.cli.context import CLIContext


_EXIT_CODES: dict[ReleaseErrorKind, ErrorCode] = {
    "invalid_input": ErrorCode.USER_ERROR,
    "document_invalid": ErrorCode.USER_ERROR,
    "credentials_missing": ErrorCode.ENV_ERROR,
    "gh_missing": ErrorCode.ENV_ERROR,
    "clone_failed": ErrorCode.NETWORK_ERROR,
    "write_failed": ErrorCode.IO_ERROR,
}


def exit_code_for(error: ReleaseError) -> ErrorCode:
    return _EXIT_CODES.get(error.kind, ErrorCode.BUILD_ERROR)


def exit_on_error[T](result: Result[T, ReleaseError], ctx: CLIContext) -> T:
    """Return the value of an Ok result; report an Err and exit.

    The exit code follows the error kind (see ``exit_code_for``).
    """
    if isinstance(result, Err):
        error = result.error
        ctx.console.error(error.message)
        if error.hint:
            ctx.console.print(f"hint: {error.hint}", Style.DIM)
        raise typer.Exit(code=int(exit_code_for(error)))
    return result.value


def exit_with_error(message: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(code=int(code))
