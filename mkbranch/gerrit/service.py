"""Branch listing and creation through the Gerrit REST API.

RemoteBranchService is the alternative to pushing branches from a local
clone: it asks the review server to create `refs/heads/<branch>` at a given
revision. Branch listings are cached per project for the lifetime of the
service, so repeated existence checks cost one request per project.

The service must be configured with a base URL before use. When it is built
read-only (dry-run), creation is refused outright; the HTTP client is never
reached.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

from mkbranch.core.branch_errors import BranchError
from mkbranch.core.result import Err, Ok, Result
from mkbranch.core.structured import as_obj_list, as_str_dict, get_str
from mkbranch.gerrit.http import HttpClient, HttpError

__all__ = ["BranchInfo", "RemoteBranchService"]

_HEADS = "refs/heads/"


@dataclass(frozen=True, slots=True)
class BranchInfo:
    """A branch as reported by the review server.

    Attributes:
        ref: Branch name without the refs/heads/ prefix
        revision: Commit the branch points at
    """

    ref: str
    revision: str


def _short_ref(ref: str) -> str:
    return ref[len(_HEADS) :] if ref.startswith(_HEADS) else ref


class RemoteBranchService:
    def __init__(
        self,
        *,
        http: HttpClient,
        read_only: bool,
        base_url: str | None = None,
    ) -> None:
        self._http = http
        self._read_only = read_only
        self._base_url: str | None = None
        self._cache: dict[str, frozenset[str]] = {}
        if base_url:
            self.configure(base_url)

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def configured(self) -> bool:
        return self._base_url is not None

    def configure(self, base_url: str) -> None:
        """Set the server root, e.g. https://gerrit.wikimedia.org/r."""
        self._base_url = base_url.rstrip("/")

    def list_branches(self, project: str) -> Result[frozenset[str], BranchError]:
        """Branch names of `project`, fetched once and then served from cache."""
        cached = self._cache.get(project)
        if cached is not None:
            return Ok(cached)

        url = self._branches_url(project)
        if isinstance(url, Err):
            return url

        response = self._http.get_json(url.value)
        if isinstance(response, Err):
            return Err(_remote_failure(f"unable to list branches of {project}", response.error))

        items = as_obj_list(response.value)
        if items is None:
            return Err(
                BranchError(
                    kind="remote_failed",
                    message=f"unexpected branch listing for {project}",
                    hint=url.value,
                )
            )

        names: set[str] = set()
        for item in items:
            data = as_str_dict(item)
            ref = get_str(data, "ref") if data is not None else None
            if ref is not None and ref.startswith(_HEADS):
                names.add(_short_ref(ref))

        branches = frozenset(names)
        self._cache[project] = branches
        return Ok(branches)

    def refresh(self, project: str) -> None:
        """Forget the cached listing of `project`."""
        self._cache.pop(project, None)

    def has_branch(self, project: str, branch: str) -> Result[bool, BranchError]:
        listing = self.list_branches(project)
        if isinstance(listing, Err):
            return listing
        return Ok(branch in listing.value)

    def create_branch(
        self,
        project: str,
        base_ref: str,
        new_branch: str,
    ) -> Result[BranchInfo, BranchError]:
        """Create `new_branch` in `project` at `base_ref` (branch name or sha)."""
        if self._read_only:
            return Err(
                BranchError(
                    kind="read_only",
                    message=f"refusing to create {new_branch} in {project}: "
                    "the review server client is read-only (dry-run)",
                )
            )

        url = self._branches_url(project)
        if isinstance(url, Err):
            return url

        target = f"{url.value}{quote(new_branch, safe='')}"
        # Gerrit creates branches with PUT /projects/{project}/branches/{branch};
        # it has no POST endpoint for this.
        response = self._http.send_json(
            "PUT",
            target,
            {"ref": new_branch, "revision": base_ref},
        )
        if isinstance(response, Err):
            return Err(
                _remote_failure(f"unable to create {new_branch} in {project}", response.error)
            )

        data = as_str_dict(response.value)
        revision = get_str(data, "revision") if data is not None else None
        ref = get_str(data, "ref") if data is not None else None
        info = BranchInfo(ref=_short_ref(ref or new_branch), revision=revision or base_ref)

        cached = self._cache.get(project)
        if cached is not None:
            self._cache[project] = cached | {info.ref}
        return Ok(info)

    def endpoint(self) -> Result[str, BranchError]:
        """Configured server root, or Err(not_configured)."""
        if self._base_url is None:
            return Err(
                BranchError(
                    kind="not_configured",
                    message="review server base URL is not configured",
                    hint="Pass --gerrit-url or set [gerrit] url in the settings file",
                )
            )
        return Ok(self._base_url)

    def _branches_url(self, project: str) -> Result[str, BranchError]:
        base = self.endpoint()
        if isinstance(base, Err):
            return base
        return Ok(f"{base.value}/projects/{quote(project, safe='')}/branches/")


def _remote_failure(message: str, error: HttpError) -> BranchError:
    return BranchError(kind="remote_failed", message=message, hint=str(error))
