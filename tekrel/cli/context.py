from __future__ import annotations

from dataclasses import dataclass

import typer

from tekrel.core.config import Config, find_config_path, load_config_or_default
from tekrel.core.errors import ErrorCode
from tekrel.core.result import Err
from tekrel.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol


def build_context(*, stderr: bool = False) -> CLIContext:
    """Load configuration and create the console.

    Args:
        stderr: Send console output to stderr (used by ``serve``).
    """
    config_result = load_config_or_default(find_config_path())
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(config=config_result.value, console=RichConsole(stderr=stderr))
