"""Error codes for CLI exit status.

Every aborted run maps to exactly one of these codes. The mapping from
pipeline error kinds lives in ``shipit.output.errors``.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success (including runs whose notification failed)
    - 1: User error (unknown target, malformed --param)
    - 2: Environment error (not a git checkout, unreadable shipit.toml)
    - 3: Build error (a target action or external command failed)
    - 4: Network error (zip-deploy or release publication rejected)
    - 5: I/O error (packaging failed)
    - 6: Configuration error (missing required value, cycle, duplicate)
    - 130: Interrupted by the operator
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    CONFIG_ERROR = 6
    INTERRUPTED = 130

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
