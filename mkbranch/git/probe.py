"""Read-only git queries.

RepositoryProbe never changes repository state (apart from refreshing remote
refs before computing divergence). A probe is expected to run against an
existing, well-formed working copy, so any unexpected failure is fatal.

Usage:
    probe = RepositoryProbe(runner)
    match probe.current_branch(repo_dir):
        case Ok(branch):
            ...
        case Err(error):
            return Err(error)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from mkbranch.core.branch_errors import BranchError
from mkbranch.core.result import Err, Ok, Result
from mkbranch.platform.runner import ProcessRunner

__all__ = [
    "LS_REMOTE_NO_MATCH",
    "RepositoryProbe",
    "StatusEntry",
    "parse_porcelain",
]

# `git ls-remote --exit-code` exits 2 when no matching ref exists.
LS_REMOTE_NO_MATCH = 2

# `git config --get` exits 1 when the key is not set.
_CONFIG_KEY_MISSING = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single line of `git status --porcelain`.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"

    def pretty_xy(self) -> str:
        """Format XY with dots for spaces (". M" instead of " M")."""
        return self.xy.replace(" ", ".")


def parse_porcelain(output: str) -> list[StatusEntry]:
    """Parse `git status --porcelain` (v1) output into entries."""
    entries: list[StatusEntry] = []
    for line in output.splitlines():
        if len(line) < 4:
            continue
        if line.startswith("?? "):
            entries.append(StatusEntry(xy="??", path=line[3:]))
            continue
        entries.append(StatusEntry(xy=line[:2], path=line[3:]))
    return entries


class RepositoryProbe:
    """Read-only queries against a working copy or a remote."""

    def __init__(self, runner: ProcessRunner) -> None:
        self._runner = runner

    def is_clone(self, path: Path) -> bool:
        """True if `path` is the top of a git working copy."""
        return (path / ".git").exists()

    def current_branch(self, repo_dir: Path) -> Result[str, BranchError]:
        """Name of the checked-out branch; empty string on a detached HEAD."""
        result = self._git(repo_dir, "rev-parse", "--abbrev-ref", "HEAD")
        if isinstance(result, Err):
            return result
        branch = result.value.strip()
        return Ok("" if branch == "HEAD" else branch)

    def head_revision(self, repo_dir: Path) -> Result[str, BranchError]:
        """Commit id checked out in `repo_dir`."""
        result = self._git(repo_dir, "rev-parse", "HEAD")
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def local_branches(self, repo_dir: Path) -> Result[frozenset[str], BranchError]:
        result = self._git(repo_dir, "for-each-ref", "--format=%(refname:short)", "refs/heads/")
        if isinstance(result, Err):
            return result
        return Ok(frozenset(ln.strip() for ln in result.value.splitlines() if ln.strip()))

    def remote_has_branch(
        self,
        remote_url: str,
        name: str,
        *,
        cwd: Path,
    ) -> Result[bool, BranchError]:
        """Ask the remote whether `name` exists there.

        "No matching ref" is a normal negative answer, not an error. Any other
        failure is treated as transient and retried.
        """
        cmd = ["git", "ls-remote", "--exit-code", "--heads", remote_url, name]
        result = self._runner.run_with_retry(cmd, cwd, final_returncodes=(LS_REMOTE_NO_MATCH,))
        match result:
            case Ok(_):
                return Ok(True)
            case Err(error) if error.returncode == LS_REMOTE_NO_MATCH:
                return Ok(False)
            case Err(error):
                return Err(
                    BranchError(
                        kind="probe_failed",
                        message=error.message,
                        hint=error.hint,
                        returncode=error.returncode,
                    )
                )

    def tracking_branch_of(self, repo_dir: Path, name: str) -> Result[str, BranchError]:
        """Upstream of local branch `name` (e.g. "origin/wmf/1.40"), or ""."""
        result = self._git(
            repo_dir, "for-each-ref", "--format=%(upstream:short)", f"refs/heads/{name}"
        )
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def divergence_log(self, repo_dir: Path, reference: str) -> Result[str, BranchError]:
        """Commits on `reference` that HEAD lacks, after refreshing remote refs.

        Empty text means HEAD is in sync with the reference.
        """
        fetched = self._runner.run_with_retry(["git", "fetch", "-q", "origin"], repo_dir)
        if isinstance(fetched, Err):
            return fetched
        result = self._git(repo_dir, "log", "--oneline", f"HEAD..{reference}")
        if isinstance(result, Err):
            return result
        return Ok(result.value.strip())

    def working_tree_changes(self, repo_dir: Path) -> Result[str, BranchError]:
        """Porcelain status text; non-empty means uncommitted changes exist."""
        result = self._runner.run_checked(["git", "status", "--porcelain"], repo_dir)
        if isinstance(result, Err):
            return result
        return Ok(result.value.stdout)

    def remote_url(self, repo_dir: Path, remote: str = "origin") -> Result[str | None, BranchError]:
        """URL configured for `remote`, or None if the remote does not exist."""
        return self._config_value(repo_dir, f"remote.{remote}.url")

    def fetch_refspecs(
        self,
        repo_dir: Path,
        remote: str = "origin",
    ) -> Result[tuple[str, ...], BranchError]:
        """Fetch refspecs configured for `remote` (empty if none)."""
        key = f"remote.{remote}.fetch"
        result = self._runner.run(["git", "config", "--get-all", key], repo_dir)
        match result:
            case Ok(done):
                return Ok(tuple(ln.strip() for ln in done.stdout.splitlines() if ln.strip()))
            case Err(error) if error.returncode == _CONFIG_KEY_MISSING:
                return Ok(())
            case Err(error):
                return Err(
                    BranchError(
                        kind="probe_failed",
                        message=f"git config --get-all {key} exited with status {error.returncode}",
                        hint=error.stderr.strip() or None,
                        returncode=error.returncode,
                    )
                )

    def submodule_url(self, repo_dir: Path, path: str) -> Result[str | None, BranchError]:
        """URL of a submodule as declared in .gitmodules, or None."""
        return self._config_value(repo_dir, f"submodule.{path}.url", file=".gitmodules")

    def _config_value(
        self,
        repo_dir: Path,
        key: str,
        *,
        file: str | None = None,
    ) -> Result[str | None, BranchError]:
        cmd = ["git", "config"]
        if file is not None:
            cmd.extend(["--file", file])
        cmd.extend(["--get", key])

        result = self._runner.run(cmd, repo_dir)
        match result:
            case Ok(done):
                return Ok(done.stdout.strip() or None)
            case Err(error) if error.returncode == _CONFIG_KEY_MISSING:
                return Ok(None)
            case Err(error):
                return Err(
                    BranchError(
                        kind="probe_failed",
                        message=f"git config --get {key} exited with status {error.returncode}",
                        hint=error.stderr.strip() or None,
                        returncode=error.returncode,
                    )
                )

    def _git(self, repo_dir: Path, *args: str) -> Result[str, BranchError]:
        result = self._runner.run_checked(["git", *args], repo_dir)
        if isinstance(result, Err):
            return result
        return Ok(result.value.stdout)
