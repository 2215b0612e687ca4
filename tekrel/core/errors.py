"""Error codes for CLI exit status.

Each operation reports failures as text when served over MCP. When the same
operations run from the command line, these codes become the process exit
status.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    The numeric values are stable:
    - 0: Success
    - 1: User error (missing minor version, bad config)
    - 2: Environment error (git/gh missing, credentials unset)
    - 3: Operation error (a release step failed)
    - 4: Network error (clone or push failed)
    - 5: I/O error (manifest could not be written)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
