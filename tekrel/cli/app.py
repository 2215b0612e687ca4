from __future__ import annotations

import os
from pathlib import Path

import typer

from tekrel import __version__
from tekrel.cli.commands.release import branches, hack, plans
from tekrel.cli.commands.serve import serve
from tekrel.core.config import CONFIG_ENV_VAR
from tekrel.core.errors import ErrorCode


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(serve)
app.command()(branches)
app.command()(hack)
app.command()(plans)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit.",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        help=f"Path to tekrel.toml (overrides ${CONFIG_ENV_VAR})",
    ),
) -> None:
    if config is not None:
        path = config.expanduser()
        if not path.is_file():
            typer.echo(f"error: --config '{path}' does not exist", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        os.environ[CONFIG_ENV_VAR] = str(path)


def main() -> None:
    app()
