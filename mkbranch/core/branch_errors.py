"""Fatal errors of a branch run.

Every fatal condition is a BranchError carried back to the CLI in an Err.
Non-fatal conditions (no remote branch, no divergence, marker already up to
date) are not errors and never produce one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .errors import ErrorCode

__all__ = ["BranchError", "BranchErrorKind", "exit_code_for"]

BranchErrorKind = Literal[
    # transient failure that exhausted its retries
    "command_failed",
    # precondition violations
    "probe_failed",
    "clone_conflict",
    "submodule_failed",
    "marker_not_found",
    "marker_ambiguous",
    "resume_marker_not_found",
    "build_dir_failed",
    "version_file_failed",
    # authorization / configuration gaps
    "not_configured",
    "read_only",
    "remote_failed",
    "invalid_config",
]


@dataclass(frozen=True, slots=True)
class BranchError:
    """A fatal condition with enough context to resume manually.

    Attributes:
        kind: Category of failure
        message: One-line description (includes command and exit status where relevant)
        hint: Optional follow-up (stderr excerpt, what to do next)
        returncode: Exit status of the failing command, if any
    """

    kind: BranchErrorKind
    message: str
    hint: str | None = None
    returncode: int | None = None


def exit_code_for(error: BranchError) -> ErrorCode:
    """Map a BranchError to the process exit code."""
    match error.kind:
        case "resume_marker_not_found":
            return ErrorCode.USER_ERROR
        case "not_configured" | "read_only" | "invalid_config":
            return ErrorCode.CONFIG_ERROR
        case "remote_failed":
            return ErrorCode.NETWORK_ERROR
        case "build_dir_failed" | "version_file_failed" | "marker_not_found" | "marker_ambiguous":
            return ErrorCode.IO_ERROR
        case _:
            return ErrorCode.GIT_ERROR
