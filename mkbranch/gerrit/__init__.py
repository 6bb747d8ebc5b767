"""Review server (Gerrit) REST access."""

from mkbranch.gerrit.http import (
    HttpClient,
    HttpError,
    MockHttpClient,
    RealHttpClient,
    parse_gerrit_json,
)
from mkbranch.gerrit.service import BranchInfo, RemoteBranchService

__all__ = [
    "BranchInfo",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "RemoteBranchService",
    "parse_gerrit_json",
]
