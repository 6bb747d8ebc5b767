"""Subprocess execution with Result-based error handling.

This is the only module that starts processes. Output of both streams is
captured in full (subprocess.run drains stdout and stderr concurrently), so
a command is never considered finished with output still buffered.

Usage:
    match run(["git", "status", "--porcelain"], cwd=repo_dir):
        case Ok(result):
            print(result.stdout)
        case Err(error):
            print(f"{error} ({error.stderr.strip()})")
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from mkbranch.core.result import Err, Ok, Result

__all__ = ["CommandResult", "ProcessError", "format_command", "run"]


def format_command(command: tuple[str, ...] | list[str]) -> str:
    """Render a command line the way a shell user would type it."""
    return " ".join(shlex.quote(part) for part in command)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Output of a command that exited with status 0.

    Attributes:
        command: The command that was executed
        returncode: Exit status (always 0 for a successful run)
        stdout: Complete standard output
        stderr: Complete standard error (git writes progress here)
        attempts: Number of attempts it took (set by retrying callers)
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str
    attempts: int = 1


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that could not be started or exited non-zero.

    Attributes:
        command: The command that was executed.
        returncode: Exit status; -1 when the process never ran or timed out.
        stdout: Standard output (may be empty).
        stderr: Standard error, or the OS error when the process never ran.
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


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[CommandResult, ProcessError]:
    """Execute a command and capture both output streams.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(CommandResult) on exit status 0, Err(ProcessError) otherwise.
    """
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
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=str(e),
            )
        )

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(
        CommandResult(
            command=tuple(cmd),
            returncode=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )
    )
