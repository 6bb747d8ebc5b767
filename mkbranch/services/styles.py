"""Branch styles: where and how a kind of release branch is built.

A style supplies the work directory, the repository root URL, the branch
name prefix, the directory the core repository is cloned into, the manifest
file name and how the build directory is prepared. The orchestrator only
sees the BranchStyle protocol; styles are looked up by name in STYLES.
"""

from __future__ import annotations

import tempfile
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from mkbranch.core.branch_errors import BranchError
from mkbranch.core.result import Err, Ok, Result
from mkbranch.git.mutator import RepositoryMutator

__all__ = [
    "DEFAULT_REPO_PATH",
    "STYLES",
    "STYLE_DESCRIPTIONS",
    "BranchStyle",
    "StyleOptions",
    "TarballStyle",
    "WmfStyle",
    "create_style",
]

DEFAULT_REPO_PATH = "https://gerrit.wikimedia.org/r/mediawiki"


class BranchStyle(Protocol):
    name: str
    description: str
    commit_label: str

    def work_dir(self) -> Path: ...

    def repo_path(self) -> str:
        """Root URL every repository path is appended to."""
        ...

    def branch_prefix(self) -> str: ...

    def branch_dir(self) -> str:
        """Directory (below the work dir) holding the core clone."""
        ...

    def manifest_path(self, config_dir: Path) -> Path: ...

    def setup_build_directory(self, mutator: RepositoryMutator) -> Result[None, BranchError]: ...


@dataclass(frozen=True, slots=True)
class StyleOptions:
    """Overrides from settings and command line; None keeps the style default."""

    work_dir: Path | None = None
    repo_path: str | None = None
    branch_prefix: str | None = None
    branch_dir: str | None = None


@dataclass(frozen=True, slots=True)
class WmfStyle:
    """Weekly deployment branches (wmf/<version>), built in a fresh directory."""

    options: StyleOptions = StyleOptions()
    name: str = "wmf"
    description: str = "Create a WMF branch"
    commit_label: str = "WMF"

    def work_dir(self) -> Path:
        return self.options.work_dir or Path(tempfile.gettempdir()) / "make-wmf-branch"

    def repo_path(self) -> str:
        return self.options.repo_path or DEFAULT_REPO_PATH

    def branch_prefix(self) -> str:
        if self.options.branch_prefix is not None:
            return self.options.branch_prefix
        return "wmf/"

    def branch_dir(self) -> str:
        return self.options.branch_dir or "wmf"

    def manifest_path(self, config_dir: Path) -> Path:
        return config_dir / "config.json"

    def setup_build_directory(self, mutator: RepositoryMutator) -> Result[None, BranchError]:
        return mutator.ensure_empty_directory(self.work_dir())


@dataclass(frozen=True, slots=True)
class TarballStyle:
    """Release branches for tarballs; reuses an existing build directory."""

    options: StyleOptions = StyleOptions()
    name: str = "tarball"
    description: str = "Prepare the tree for a tarball release"
    commit_label: str = "tarball"

    def work_dir(self) -> Path:
        return self.options.work_dir or Path(tempfile.gettempdir()) / "make-tarball-branch"

    def repo_path(self) -> str:
        return self.options.repo_path or DEFAULT_REPO_PATH

    def branch_prefix(self) -> str:
        return self.options.branch_prefix or ""

    def branch_dir(self) -> str:
        # create_style guarantees a value.
        return self.options.branch_dir or ""

    def manifest_path(self, config_dir: Path) -> Path:
        return config_dir / "tarball-config.json"

    def setup_build_directory(self, mutator: RepositoryMutator) -> Result[None, BranchError]:
        return mutator.ensure_directory(self.work_dir())


def _tarball(options: StyleOptions) -> Result[BranchStyle, BranchError]:
    if not options.branch_dir:
        return Err(
            BranchError(
                kind="invalid_config",
                message="the tarball style needs a branch directory",
                hint="Pass --branch-dir (e.g. REL1_40)",
            )
        )
    return Ok(TarballStyle(options=options))


def _wmf(options: StyleOptions) -> Result[BranchStyle, BranchError]:
    return Ok(WmfStyle(options=options))


STYLES: dict[str, Callable[[StyleOptions], Result[BranchStyle, BranchError]]] = {
    "wmf": _wmf,
    "tarball": _tarball,
}

STYLE_DESCRIPTIONS: dict[str, str] = {
    "wmf": WmfStyle().description,
    "tarball": TarballStyle().description,
}


def create_style(name: str, options: StyleOptions) -> Result[BranchStyle, BranchError]:
    factory = STYLES.get(name.lower())
    if factory is None:
        return Err(
            BranchError(
                kind="invalid_config",
                message=f"{name} is not a known branch style",
                hint=f"Available: {', '.join(sorted(STYLES))}",
            )
        )
    return factory(options)
