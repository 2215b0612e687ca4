"""MCP server: tool registration, argument parsing and result text."""

from tekrel.server.app import build_server, run_server
from tekrel.server.handlers import ToolContext
from tekrel.server.params import ParameterError

__all__ = ["ParameterError", "ToolContext", "build_server", "run_server"]
