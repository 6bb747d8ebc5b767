"""Exit codes for the CLI.

Any fatal condition ends the run with one of these non-zero codes. There is
no code for partial success: a run either completed or it did not.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success
    - 1: User error (bad option, unknown style, resume marker not found)
    - 2: Config error (unreadable settings or manifest, service not configured)
    - 3: Git error (a git command failed after all retries, clone conflict)
    - 4: Network error (review server unreachable or refused the request)
    - 5: I/O error (build directory or version file problems)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    GIT_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
