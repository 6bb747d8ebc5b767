"""Resume a partially completed run.

Given the repository at which a previous run stopped, every repository
declared up to and including it is skipped on the next run.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import PurePosixPath

from mkbranch.core.branch_errors import BranchError
from mkbranch.core.result import Err, Ok, Result

__all__ = ["apply_resume_marker"]


def _matches(name: str, marker: str) -> bool:
    return name == marker or PurePosixPath(name).name == marker


def apply_resume_marker(
    names: Sequence[str],
    marker: str | None,
) -> Result[frozenset[str], BranchError]:
    """Compute the skip-list for `marker`.

    `marker` may be a full repository name ("extensions/Cite") or its last
    path component ("Cite"). An empty marker means a full run.
    """
    if not marker:
        return Ok(frozenset())

    for index, name in enumerate(names):
        if _matches(name, marker):
            return Ok(frozenset(names[: index + 1]))

    return Err(
        BranchError(
            kind="resume_marker_not_found",
            message=f"could not find '{marker}' in any branched repository list",
        )
    )
