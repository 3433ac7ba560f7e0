"""Error presentation utilities.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from iu.core.errors import ErrorCode
from iu.output.console import Style

if TYPE_CHECKING:
    from iu.install.errors import InstallError
    from iu.output.console import ConsoleProtocol

__all__ = ["print_install_error", "install_error_exit_code"]


def print_install_error(error: InstallError, console: ConsoleProtocol) -> None:
    """Print install error to console with appropriate formatting."""
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def install_error_exit_code(error: InstallError) -> int:
    """Get exit code for an install error."""
    match error.kind:
        case (
            "already_installing"
            | "no_active_transaction"
            | "version_not_installed"
            | "editor_not_installed_first"
            | "unsupported_package_type"
            | "destination_exists"
        ):
            return int(ErrorCode.USER_ERROR)
        case "insufficient_privilege" | "elevation_failed":
            return int(ErrorCode.PRIVILEGE_ERROR)
        case "package_install_failed" | "executable_not_found" | "run_failed":
            return int(ErrorCode.ENV_ERROR)
        case "fallback_path_occupied" | "restore_failed":
            return int(ErrorCode.IO_ERROR)
