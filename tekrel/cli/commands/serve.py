from __future__ import annotations

import typer

from tekrel.cli.commands._helpers import exit_with_error
from tekrel.cli.context import build_context
from tekrel.core.errors import ErrorCode
from tekrel.server.app import parse_address, run_server
from tekrel.server.handlers import ToolContext


def serve(
    transport: str | None = typer.Option(
        None,
        "--transport",
        help="Transport type (stdio or http). Default: [server] transport, else http",
    ),
    address: str | None = typer.Option(
        None,
        "--address",
        help="Address to bind the HTTP server to (host:port, e.g. :3000)",
    ),
) -> None:
    """Run the MCP server."""
    ctx = build_context(stderr=True)
    server = ctx.config.server

    selected = transport or server.transport
    if selected not in ("http", "stdio"):
        exit_with_error(f"invalid transport: {selected}", code=ErrorCode.USER_ERROR)

    host, port = server.host, server.port
    if address is not None:
        try:
            host, port = parse_address(address, default_host=server.host)
        except ValueError as e:
            exit_with_error(str(e), code=ErrorCode.USER_ERROR)

    if selected == "http":
        ctx.console.info(f"listening on {host}:{port}")
    run_server(
        ToolContext(config=ctx.config, console=ctx.console),
        transport=selected,
        host=host,
        port=port,
    )
