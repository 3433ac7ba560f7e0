"""Error codes for CLI exit status.

Each install failure kind maps onto one of these codes (see
``iu.output.errors``). The numeric values are process exit codes and
should remain stable:
- 0: Success
- 1: User error (bad arguments, unknown version, path already taken)
- 2: Environment error (unsupported package, missing executable)
- 5: I/O error (a move/copy/delete failed even when elevated)
- 6: Privilege error (not running with the rights the install needs)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    IO_ERROR = 5
    PRIVILEGE_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
