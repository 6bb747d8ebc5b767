"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

import typer

from mkbranch.core.branch_errors import BranchError, exit_code_for
from mkbranch.core.errors import ErrorCode
from mkbranch.core.result import Err, Result
from mkbranch.output.console import Style

if TYPE_CHECKING:
    from mkbranch.cli.context import CLIContext

T = TypeVar("T")
E = TypeVar("E")


def exit_on_error(
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.USER_ERROR,
) -> T:
    """Return the value of an Ok; print the error of an Err and exit.

    A BranchError picks its own exit code; any other error object exits with
    `error_code`. Error objects are expected to have a 'message' and an
    optional 'hint' attribute.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        code = exit_code_for(error) if isinstance(error, BranchError) else error_code
        raise typer.Exit(code=int(code))
    return result.value
