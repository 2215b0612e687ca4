"""Platform abstraction layer."""

from .files import write_text_atomic
from .process import ProcessError, redact, run

__all__ = [
    # files
    "write_text_atomic",
    # process
    "ProcessError",
    "redact",
    "run",
]
