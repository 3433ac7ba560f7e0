from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

__all__ = ["InstallError", "InstallErrorKind"]

InstallErrorKind = Literal[
    "already_installing",
    "no_active_transaction",
    "fallback_path_occupied",
    "version_not_installed",
    "editor_not_installed_first",
    "unsupported_package_type",
    "package_install_failed",
    "destination_exists",
    "elevation_failed",
    "executable_not_found",
    "insufficient_privilege",
    "restore_failed",
    "run_failed",
]


@dataclass(frozen=True, slots=True)
class InstallError:
    kind: InstallErrorKind
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        return self.message
