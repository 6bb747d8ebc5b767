"""Rewrite the version marker of the core repository.

The marker is a single assignment at the start of a line, for example

    $wgVersion = '1.40.0-alpha';

Only the string literal changes; indentation, spacing, quote style and the
trailing semicolon are preserved.
"""

from __future__ import annotations

import re
from pathlib import Path

from mkbranch.core.branch_errors import BranchError
from mkbranch.core.result import Err, Ok, Result
from mkbranch.platform.files import atomic_write_text

__all__ = ["DEFAULT_IDENTIFIER", "fix_version", "marker_pattern"]

DEFAULT_IDENTIFIER = "$wgVersion"


def marker_pattern(identifier: str = DEFAULT_IDENTIFIER) -> re.Pattern[str]:
    return re.compile(
        rf"^(?P<lead>[ \t]*{re.escape(identifier)}[ \t]*=[ \t]*)"
        r"(?P<quote>['\"])(?P<value>[^'\"\n]*)(?P=quote)"
        r"(?P<tail>[ \t]*;[ \t]*\r?)$",
        re.MULTILINE,
    )


def fix_version(
    path: Path,
    new_version: str,
    *,
    identifier: str = DEFAULT_IDENTIFIER,
) -> Result[int, BranchError]:
    """Set the marker in `path` to `new_version`.

    Returns:
        Ok(1) if the file was rewritten, Ok(0) if it already carried
        `new_version` (the file is left untouched), Err if the marker is
        missing or appears more than once.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            BranchError(
                kind="version_file_failed",
                message=f"unable to read {path}",
                hint=str(e),
            )
        )

    matches = list(marker_pattern(identifier).finditer(text))
    if not matches:
        return Err(
            BranchError(
                kind="marker_not_found",
                message=f"version marker {identifier} not found in {path}",
            )
        )
    if len(matches) > 1:
        lines = ", ".join(str(text.count("\n", 0, m.start()) + 1) for m in matches)
        return Err(
            BranchError(
                kind="marker_ambiguous",
                message=f"version marker {identifier} assigned {len(matches)} times in {path}",
                hint=f"lines {lines}",
            )
        )

    match = matches[0]
    if match.group("value") == new_version:
        return Ok(0)

    replacement = (
        f"{match.group('lead')}{match.group('quote')}{new_version}"
        f"{match.group('quote')}{match.group('tail')}"
    )
    updated = text[: match.start()] + replacement + text[match.end() :]

    try:
        atomic_write_text(path, updated)
    except OSError as e:
        return Err(
            BranchError(
                kind="version_file_failed",
                message=f"unable to write {path}",
                hint=str(e),
            )
        )
    return Ok(1)
