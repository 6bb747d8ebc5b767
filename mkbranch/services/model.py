from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class RunConfig:
    """Inputs of one branch run; never changes once the run starts.

    Attributes:
        old_version: Version (or branch) the new branch is cut from, e.g. "master" or "1.39.0-wmf.28"
        branch_prefix: Prefix of release branch names ("wmf/" or "")
        new_version: Version of the new branch, e.g. "1.40.0-wmf.1"
        source_path: Where the core repository is cloned from
        branch_from: Ref that is used verbatim when old_version equals it
        dry_run: Log remote-visible writes instead of performing them
    """

    old_version: str
    branch_prefix: str
    new_version: str
    source_path: str
    branch_from: str = "master"
    dry_run: bool = False

    @property
    def new_branch(self) -> str:
        return f"{self.branch_prefix}{self.new_version}"

    @property
    def source_branch(self) -> str:
        """Branch the core clone starts from."""
        if self.old_version == self.branch_from:
            return self.branch_from
        return f"{self.branch_prefix}{self.old_version}"


@dataclass(frozen=True, slots=True)
class BranchTarget:
    """A working copy that should end up on `branch`.

    Attributes:
        repo_dir: Working copy directory
        branch: Branch to create or reuse
        base_ref: Branch the new one starts from
    """

    repo_dir: Path
    branch: str
    base_ref: str
