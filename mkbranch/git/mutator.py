"""State-changing git operations.

Every operation returns Err(BranchError) on failure; there is nothing to
retry at this level beyond what ProcessRunner already did. Network-bound
commands go through run_with_retry. Checkouts stay local to the scratch clone
and always run; submodule registration, the commit and the push go through
the dry-run wrapper.
"""

from __future__ import annotations

from pathlib import Path

from mkbranch.core.branch_errors import BranchError
from mkbranch.core.result import Err, Ok, Result
from mkbranch.git.probe import RepositoryProbe
from mkbranch.output.console import ConsoleProtocol
from mkbranch.platform.files import reset_directory
from mkbranch.platform.runner import ProcessRunner

__all__ = ["RepositoryMutator"]


class RepositoryMutator:
    def __init__(
        self,
        runner: ProcessRunner,
        probe: RepositoryProbe,
        console: ConsoleProtocol,
    ) -> None:
        self._runner = runner
        self._probe = probe
        self._console = console

    def clone_or_update(
        self,
        dest: Path,
        remote_path: str,
        branch: str,
        *,
        aliases: tuple[str, ...] = (),
    ) -> Result[None, BranchError]:
        """Make `dest` a clone of `remote_path` checked out at `branch`.

        - existing clone of the same remote (or one of `aliases`, URLs the
          origin may have been repointed to): switch to `branch` and fast-forward
        - nothing at `dest`: shallow, single-branch clone
        - anything else at `dest`: fatal conflict
        """
        if self._probe.is_clone(dest):
            url = self._probe.remote_url(dest)
            if isinstance(url, Err):
                return url
            if url.value == remote_path or url.value in aliases:
                self._console.info(f"updating existing clone {dest}")
                checkout = self.checkout_existing(dest, branch)
                if isinstance(checkout, Err):
                    return checkout
                return self.pull(dest, branch=branch)
            return Err(
                BranchError(
                    kind="clone_conflict",
                    message=f"{dest} is a clone of {url.value or 'an unknown remote'}, "
                    f"not {remote_path}",
                    hint="Remove the directory or point --work-dir elsewhere",
                )
            )

        if dest.exists():
            return Err(
                BranchError(
                    kind="clone_conflict",
                    message=f"{dest} exists and is not a git clone",
                    hint="Remove the directory or point --work-dir elsewhere",
                )
            )

        dest.parent.mkdir(parents=True, exist_ok=True)
        result = self._runner.run_with_retry(
            [
                "git",
                "clone",
                "-q",
                "--branch",
                branch,
                "--depth",
                "1",
                remote_path,
                str(dest),
            ],
            dest.parent,
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def ensure_empty_directory(self, path: Path) -> Result[None, BranchError]:
        """Remove `path` recursively if present, then recreate it."""
        self._console.debug(f"rm -rf -- {path}")
        try:
            reset_directory(path)
        except OSError as e:
            return Err(
                BranchError(
                    kind="build_dir_failed",
                    message=f"unable to create build directory {path}",
                    hint=str(e),
                )
            )
        return Ok(None)

    def ensure_directory(self, path: Path) -> Result[None, BranchError]:
        """Create `path` if missing; an existing non-directory is fatal."""
        if path.is_dir():
            return Ok(None)
        if path.exists() or path.is_symlink():
            return Err(
                BranchError(
                    kind="build_dir_failed",
                    message=f"unable to create build directory {path} because a file exists",
                )
            )
        try:
            path.mkdir(parents=True)
        except OSError as e:
            return Err(
                BranchError(
                    kind="build_dir_failed",
                    message=f"unable to create build directory {path}",
                    hint=str(e),
                )
            )
        return Ok(None)

    def checkout_new(self, repo_dir: Path, branch: str, base_ref: str) -> Result[None, BranchError]:
        """Create `branch` from `base_ref` and switch to it (no upstream yet)."""
        return self._git(repo_dir, "checkout", "-q", "--no-track", "-b", branch, base_ref)

    def checkout_existing(self, repo_dir: Path, branch: str) -> Result[None, BranchError]:
        return self._git(repo_dir, "checkout", "-q", branch)

    def checkout_remote(
        self,
        repo_dir: Path,
        branch: str,
        remote: str = "origin",
    ) -> Result[None, BranchError]:
        """Fetch `remote/branch` and check it out as a tracking branch.

        Clones are single-branch, so the branch is added to the remote's fetch
        refspecs first; otherwise `remote/branch` is not a remote-tracking branch.
        """
        tracked = self.track_remote_branch(repo_dir, branch, remote)
        if isinstance(tracked, Err):
            return tracked
        fetched = self._runner.run_with_retry(
            [
                "git",
                "fetch",
                "-q",
                remote,
                f"+refs/heads/{branch}:refs/remotes/{remote}/{branch}",
            ],
            repo_dir,
        )
        if isinstance(fetched, Err):
            return fetched
        return self._git(repo_dir, "checkout", "-q", "-b", branch, "--track", f"{remote}/{branch}")

    def pull(self, repo_dir: Path, *, branch: str | None = None) -> Result[None, BranchError]:
        """Fast-forward the current branch (from `origin/branch` if given)."""
        cmd = ["git", "pull", "-q", "--ff-only"]
        if branch is not None:
            cmd.extend(["origin", branch])
        result = self._runner.run_with_retry(cmd, repo_dir)
        if isinstance(result, Err):
            return result
        return Ok(None)

    def init_submodule(self, repo_dir: Path, path: str) -> Result[None, BranchError]:
        result = self._runner.run_with_retry(
            ["git", "submodule", "update", "-q", "--init", path], repo_dir
        )
        if isinstance(result, Err):
            return Err(
                BranchError(
                    kind="submodule_failed",
                    message=f"unable to initialize submodule {path}: {result.error.message}",
                    hint=result.error.hint,
                    returncode=result.error.returncode,
                )
            )
        return Ok(None)

    def add_submodule(
        self,
        repo_dir: Path,
        branch: str,
        remote_path: str,
        relative_path: str,
    ) -> Result[None, BranchError]:
        """Register `remote_path` at `relative_path`, pinned to `branch`.

        The branch usually exists only once pushed, so in dry-run mode the
        registration is only logged.
        """
        result = self._runner.run_if_not_dry_run(
            ["git", "submodule", "add", "-f", "-b", branch, "-q", remote_path, relative_path],
            repo_dir,
        )
        if isinstance(result, Err):
            return Err(
                BranchError(
                    kind="submodule_failed",
                    message=f"unable to add submodule {relative_path}: {result.error.message}",
                    hint=result.error.hint,
                    returncode=result.error.returncode,
                )
            )
        return Ok(None)

    def commit_all(self, repo_dir: Path, message: str) -> Result[None, BranchError]:
        """Commit every tracked change; only logged in dry-run mode."""
        result = self._runner.run_if_not_dry_run(
            ["git", "commit", "-a", "-q", "-m", message], repo_dir
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def push(self, repo_dir: Path, remote: str, branch: str) -> Result[None, BranchError]:
        """Push `branch` to `remote` and record it as upstream.

        The branch is mapped into the remote's fetch refspecs so that the
        upstream recorded by `-u` resolves in a single-branch clone. In dry-run
        mode the push itself is only logged.
        """
        tracked = self.track_remote_branch(repo_dir, branch, remote)
        if isinstance(tracked, Err):
            return tracked
        result = self._runner.run_if_not_dry_run(
            ["git", "push", "-q", "-u", remote, branch], repo_dir
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    def track_remote_branch(
        self,
        repo_dir: Path,
        branch: str,
        remote: str = "origin",
    ) -> Result[None, BranchError]:
        """Add `branch` to the fetch refspecs of `remote` unless already covered."""
        refspecs = self._probe.fetch_refspecs(repo_dir, remote)
        if isinstance(refspecs, Err):
            return refspecs

        covering = {
            f"+refs/heads/*:refs/remotes/{remote}/*",
            f"+refs/heads/{branch}:refs/remotes/{remote}/{branch}",
        }
        if covering.intersection(refspecs.value):
            return Ok(None)
        return self._git(repo_dir, "remote", "set-branches", "--add", remote, branch)

    def set_remote_url(self, repo_dir: Path, remote: str, url: str) -> Result[None, BranchError]:
        return self._git(repo_dir, "remote", "set-url", remote, url)

    def _git(self, repo_dir: Path, *args: str) -> Result[None, BranchError]:
        result = self._runner.run_with_retry(["git", *args], repo_dir)
        if isinstance(result, Err):
            return result
        return Ok(None)
