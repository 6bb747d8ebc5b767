"""Ways of giving a dependent repository its new branch.

One strategy is chosen per run:
- GitBranchStrategy: create the branch in the local clone and push it
- GerritBranchStrategy: ask the review server to create it at the commit the
  local clone has checked out

Both leave the remote with `refs/heads/<branch>` and are idempotent: a branch
that already exists is reused, not recreated.
"""

from __future__ import annotations

from typing import Protocol

from mkbranch.core.branch_errors import BranchError
from mkbranch.core.result import Err, Ok, Result
from mkbranch.gerrit.service import RemoteBranchService
from mkbranch.git.mutator import RepositoryMutator
from mkbranch.git.probe import RepositoryProbe
from mkbranch.output.console import ConsoleProtocol
from mkbranch.services.model import BranchTarget

__all__ = [
    "BranchStrategy",
    "GerritBranchStrategy",
    "GitBranchStrategy",
    "gerrit_project_name",
]


class BranchStrategy(Protocol):
    def ensure_branch(self, target: BranchTarget) -> Result[None, BranchError]: ...


class GitBranchStrategy:
    def __init__(
        self,
        *,
        probe: RepositoryProbe,
        mutator: RepositoryMutator,
        console: ConsoleProtocol,
    ) -> None:
        self._probe = probe
        self._mutator = mutator
        self._console = console

    def ensure_branch(self, target: BranchTarget) -> Result[None, BranchError]:
        local = self._probe.local_branches(target.repo_dir)
        if isinstance(local, Err):
            return local

        if target.branch in local.value:
            self._console.info(f"reusing local branch {target.branch}")
            step = self._mutator.checkout_existing(target.repo_dir, target.branch)
        else:
            step = self._mutator.checkout_new(target.repo_dir, target.branch, "HEAD")
        if isinstance(step, Err):
            return step

        return self._mutator.push(target.repo_dir, "origin", target.branch)


def gerrit_project_name(remote_url: str, server_url: str) -> str | None:
    """Project name of a clone URL hosted on `server_url`, or None.

    https://gerrit.example/r/mediawiki/extensions/Cite.git on server
    https://gerrit.example/r is project "mediawiki/extensions/Cite". The
    authenticated "/a/" prefix is ignored on either side.
    """
    server = server_url.rstrip("/")
    if server.endswith("/a"):
        server = server[: -len("/a")]
    if not remote_url.startswith(server + "/"):
        return None

    project = remote_url[len(server) + 1 :].strip("/")
    if project.startswith("a/"):
        project = project[len("a/") :]
    if project.endswith(".git"):
        project = project[: -len(".git")]
    return project or None


class GerritBranchStrategy:
    def __init__(
        self,
        *,
        probe: RepositoryProbe,
        service: RemoteBranchService,
        console: ConsoleProtocol,
    ) -> None:
        self._probe = probe
        self._service = service
        self._console = console

    def ensure_branch(self, target: BranchTarget) -> Result[None, BranchError]:
        project = self._project_of(target)
        if isinstance(project, Err):
            return project

        exists = self._service.has_branch(project.value, target.branch)
        if isinstance(exists, Err):
            return exists
        if exists.value:
            self._console.info(f"{project.value} already has {target.branch}, reusing it")
            return Ok(None)

        revision = self._probe.head_revision(target.repo_dir)
        if isinstance(revision, Err):
            return revision

        if self._service.read_only:
            self._console.info(
                f"[dry-run] create {target.branch} in {project.value} "
                f"at {revision.value[:12]} ({target.base_ref})"
            )
            return Ok(None)

        created = self._service.create_branch(project.value, revision.value, target.branch)
        if isinstance(created, Err):
            return created
        self._console.success(
            f"created {created.value.ref} in {project.value} at {created.value.revision[:12]}"
        )
        return Ok(None)

    def _project_of(self, target: BranchTarget) -> Result[str, BranchError]:
        server = self._service.endpoint()
        if isinstance(server, Err):
            return server

        url = self._probe.remote_url(target.repo_dir)
        if isinstance(url, Err):
            return url

        project = gerrit_project_name(url.value or "", server.value)
        if project is None:
            return Err(
                BranchError(
                    kind="invalid_config",
                    message=f"{target.repo_dir} is not cloned from {server.value}",
                    hint=f"origin is {url.value or 'not set'}",
                )
            )
        return Ok(project)
