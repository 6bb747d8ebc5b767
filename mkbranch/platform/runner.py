"""Logged, retrying command execution.

ProcessRunner sits between the git layers and platform.process.run. It
echoes every command before it runs, echoes its output afterwards (stderr as
warnings, regardless of exit status), retries transient failures with a
fixed backoff, and suppresses writes in dry-run mode.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Collection
from pathlib import Path
from typing import TypeAlias

from mkbranch.core.branch_errors import BranchError, BranchErrorKind
from mkbranch.core.result import Err, Ok, Result
from mkbranch.output.console import ConsoleProtocol
from mkbranch.platform.process import CommandResult, ProcessError, format_command
from mkbranch.platform.process import run as run_process

__all__ = ["DEFAULT_BACKOFF_SECONDS", "DEFAULT_MAX_ATTEMPTS", "Executor", "ProcessRunner"]

DEFAULT_MAX_ATTEMPTS = 6
DEFAULT_BACKOFF_SECONDS = 5.0

Executor: TypeAlias = Callable[[list[str], Path], Result[CommandResult, ProcessError]]


def _default_executor(cmd: list[str], cwd: Path) -> Result[CommandResult, ProcessError]:
    return run_process(cmd, cwd=cwd)


class ProcessRunner:
    """Run commands with logging, retry and dry-run suppression.

    Attributes:
        dry_run: When True, run_if_not_dry_run never executes anything
    """

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        dry_run: bool = False,
        noisy: bool = False,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        executor: Executor = _default_executor,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.dry_run = dry_run
        self._console = console
        self._noisy = noisy
        self._max_attempts = max(1, max_attempts)
        self._backoff_seconds = backoff_seconds
        self._executor = executor
        self._sleep = sleep

    def run(self, cmd: list[str], cwd: Path) -> Result[CommandResult, ProcessError]:
        """Run once; log the command line, then every line of output."""
        args = self._prepare(cmd)
        self._console.debug(f"$ {format_command(args)}")

        result = self._executor(args, cwd)
        match result:
            case Ok(done):
                self._log_output(done.stdout, done.stderr)
            case Err(error):
                self._log_output(error.stdout, error.stderr)
        return result

    def run_checked(
        self,
        cmd: list[str],
        cwd: Path,
        *,
        kind: BranchErrorKind = "probe_failed",
    ) -> Result[CommandResult, BranchError]:
        """Run once; any failure is fatal."""
        result = self.run(cmd, cwd)
        if isinstance(result, Err):
            return Err(_failure(result.error, kind=kind, attempts=1))
        return result

    def run_with_retry(
        self,
        cmd: list[str],
        cwd: Path,
        *,
        max_attempts: int | None = None,
        backoff_seconds: float | None = None,
        final_returncodes: Collection[int] = (),
    ) -> Result[CommandResult, BranchError]:
        """Run until the command succeeds or the attempts are exhausted.

        An exit status in `final_returncodes` is an answer, not a transient
        failure: it is returned at once without retrying.

        Returns:
            Ok(CommandResult) with `attempts` set to the number of tries,
            Err(BranchError) carrying the command and last exit status.
        """
        attempts = max(1, max_attempts if max_attempts is not None else self._max_attempts)
        delay = backoff_seconds if backoff_seconds is not None else self._backoff_seconds

        last: ProcessError | None = None
        for attempt in range(1, attempts + 1):
            result = self.run(cmd, cwd)
            if isinstance(result, Ok):
                return Ok(
                    CommandResult(
                        command=result.value.command,
                        returncode=result.value.returncode,
                        stdout=result.value.stdout,
                        stderr=result.value.stderr,
                        attempts=attempt,
                    )
                )

            last = result.error
            if last.returncode in final_returncodes:
                return Err(_failure(last, kind="command_failed", attempts=attempt))
            if attempt < attempts:
                self._console.warning(
                    f"{last} (attempt {attempt}/{attempts}), retrying in {delay:g}s"
                )
                self._sleep(delay)

        assert last is not None
        return Err(_failure(last, kind="command_failed", attempts=attempts))

    def run_if_not_dry_run(
        self,
        cmd: list[str],
        cwd: Path,
    ) -> Result[CommandResult | None, BranchError]:
        """Run a state-changing command, or only log it in dry-run mode."""
        if self.dry_run:
            self._console.info(f"[dry-run] {format_command(self._prepare(cmd))}")
            return Ok(None)
        return self.run_with_retry(cmd, cwd)

    def _prepare(self, cmd: list[str]) -> list[str]:
        if self._noisy:
            return [arg for arg in cmd if arg != "-q"]
        return list(cmd)

    def _log_output(self, stdout: str, stderr: str) -> None:
        for line in stdout.splitlines():
            self._console.debug(line)
        for line in stderr.splitlines():
            if line.strip():
                self._console.warning(line)


def _failure(error: ProcessError, *, kind: BranchErrorKind, attempts: int) -> BranchError:
    suffix = f" after {attempts} attempts" if attempts > 1 else ""
    return BranchError(
        kind=kind,
        message=f"{format_command(error.command)} exited with status {error.returncode}{suffix}",
        hint=error.stderr.strip() or None,
        returncode=error.returncode,
    )
