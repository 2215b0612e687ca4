"""MCP server exposing the release operations as tools.

Tool handlers are async; each call runs its (blocking) operation in a
worker thread so concurrent requests do not stall the event loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError

from tekrel import __version__
from tekrel.server.handlers import (
    ToolContext,
    handle_configure_hack,
    handle_create_branches,
    handle_create_plans,
)
from tekrel.server.params import BranchParams, HackParams, ParameterError, PlanParams

SERVER_NAME = "Tekton Release MCP Server"
INSTRUCTIONS = """This server provides tools for managing Tekton releases:
- Creating release branches
- Configuring hack repository
- Managing ReleasePlanAdmission and ReleasePlan files"""


def parse_address(address: str, *, default_host: str = "0.0.0.0") -> tuple[str, int]:
    """Split ``host:port`` (host optional, as in ``:3000``).

    Raises:
        ValueError: If the port is missing or not a number.
    """
    host, sep, port = address.rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"invalid address (expected host:port): {address}")
    return host or default_host, int(port)


def _parse[P](parse: Callable[[Mapping[str, object]], P], args: Mapping[str, object]) -> P:
    try:
        return parse(args)
    except ParameterError as e:
        raise ToolError(str(e)) from e


def build_server(ctx: ToolContext) -> FastMCP:
    mcp = FastMCP(SERVER_NAME, instructions=INSTRUCTIONS, version=__version__)

    @mcp.tool(
        name="create-release-branches",
        description="Creates release branches for Tekton components",
    )
    async def create_release_branches(minor_version: str) -> str:
        """
        Args:
            minor_version: Minor version number (e.g., '1.19')
        """
        params = _parse(BranchParams.from_arguments, {"minor_version": minor_version})
        return await asyncio.to_thread(handle_create_branches, params, ctx)

    @mcp.tool(
        name="configure-hack-repo",
        description="Configures the hack repository for a new release and creates a pull request",
    )
    async def configure_hack_repo(
        minor_version: str,
        ocp_version: str | None = None,
        upstream_versions: dict[str, str] | None = None,
    ) -> str:
        """
        Args:
            minor_version: Minor version number (e.g., '1.21')
            ocp_version: OpenShift Container Platform version
            upstream_versions: Map of component names to their upstream versions
                (e.g., {'chains': 'release-v0.25.x'})
        """
        params = _parse(
            HackParams.from_arguments,
            {
                "minor_version": minor_version,
                "ocp_version": ocp_version,
                "upstream_versions": upstream_versions,
            },
        )
        return await asyncio.to_thread(handle_configure_hack, params, ctx)

    @mcp.tool(
        name="create-release-plans",
        description="Creates ReleasePlanAdmission and ReleasePlan files for Tekton components",
    )
    async def create_release_plans(
        minor_version: str,
        patch_version: str | None = None,
        ocp_versions: list[str] | None = None,
    ) -> str:
        """
        Args:
            minor_version: Minor version number (e.g., '1.21')
            patch_version: Optional patch version number
            ocp_versions: List of OCP versions (e.g., ['4-15', '4-16']).
                Defaults to ['4-15', '4-16', '4-17', '4-18', '4-19']
        """
        params = _parse(
            PlanParams.from_arguments,
            {
                "minor_version": minor_version,
                "patch_version": patch_version,
                "ocp_versions": ocp_versions,
            },
        )
        return await asyncio.to_thread(handle_create_plans, params, ctx)

    return mcp


def run_server(ctx: ToolContext, *, transport: str, host: str, port: int) -> None:
    """Serve until interrupted."""
    mcp = build_server(ctx)
    if transport == "stdio":
        mcp.run(transport="stdio")
    else:
        mcp.run(transport="http", host=host, port=port)
