"""Platform layer: processes, the directory stack and filesystem helpers."""

from .dirstack import DirStack
from .files import atomic_write_text, reset_directory
from .process import CommandResult, ProcessError, format_command, run
from .runner import ProcessRunner

__all__ = [
    "CommandResult",
    "DirStack",
    "ProcessError",
    "ProcessRunner",
    "atomic_write_text",
    "format_command",
    "reset_directory",
    "run",
]
