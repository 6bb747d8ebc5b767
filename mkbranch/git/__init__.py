"""Git operations.

- RepositoryProbe: read-only queries (branches, tracking, remote refs, status)
- RepositoryMutator: clone, checkout, submodules, commit, push

Usage:
    runner = ProcessRunner(console=console, dry_run=True)
    probe = RepositoryProbe(runner)
    mutator = RepositoryMutator(runner, probe, console)

    mutator.clone_or_update(work_dir / "Cite", url, "master")
"""

from mkbranch.git.mutator import RepositoryMutator
from mkbranch.git.probe import (
    LS_REMOTE_NO_MATCH,
    RepositoryProbe,
    StatusEntry,
    parse_porcelain,
)

__all__ = [
    "LS_REMOTE_NO_MATCH",
    "RepositoryMutator",
    "RepositoryProbe",
    "StatusEntry",
    "parse_porcelain",
]
