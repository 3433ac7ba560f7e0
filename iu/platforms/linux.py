"""Linux: editor and module archives extracted into /opt/Unity."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from pathlib import Path, PurePath

from iu.core.installation import Installation
from iu.core.queue import FileType, PackageItem
from iu.core.result import Err, Ok, Result
from iu.install.archive import ARCHIVE_TYPES, extract_archive
from iu.install.errors import InstallError
from iu.install.fileops import ROOT_SHELL, SUDO_SHELL, ElevatedShell
from iu.install.layout import InstallLayout
from iu.install.transaction import PackageInstaller
from iu.output.console import Style
from iu.platform.process import CancelToken, run_checked, spawn_detached

from .base import BasePlatform, command_failed

__all__ = ["LinuxPlatform"]

INSTALL_PATH = Path("/opt/Unity")
EXECUTABLE_SUBPATH = PurePath("Editor", "Unity")
DEFAULT_INSTALL_PATHS = "/opt/Unity {major}.{minor}.{patch}{type}{build}"


class LinuxPlatform(BasePlatform):
    def default_layout(self) -> InstallLayout:
        return InstallLayout(
            install_path=INSTALL_PATH,
            executable_subpath=EXECUTABLE_SUBPATH,
            default_paths=DEFAULT_INSTALL_PATHS,
        )

    def elevated_shell(self) -> ElevatedShell:
        return ROOT_SHELL if os.geteuid() == 0 else SUDO_SHELL

    def installers(self) -> Mapping[FileType, PackageInstaller]:
        return {file_type: self._install_archive for file_type in ARCHIVE_TYPES}

    def is_privileged(self) -> Result[bool, InstallError]:
        return Ok(os.geteuid() == 0)

    def ensure_elevation(self, *, cancel: CancelToken | None = None) -> Result[None, InstallError]:
        """Ask for the sudo password up front so later commands don't stall."""
        if os.geteuid() == 0:
            return Ok(None)
        result = run_checked(self._runner, ["sudo", "-v"], cancel=cancel)
        if isinstance(result, Err):
            return Err(
                InstallError(
                    kind="insufficient_privilege",
                    message=f"Could not acquire root rights: {result.error}",
                    hint="Run with an account allowed to use sudo.",
                )
            )
        return Ok(None)

    def launch_detached(
        self,
        installation: Installation,
        arguments: Sequence[str],
        cancel: CancelToken | None,
    ) -> Result[None, InstallError]:
        cmd = [str(installation.executable), *arguments]
        self._console.info(f"$ {' '.join(cmd)}")
        result = spawn_detached(cmd)
        if isinstance(result, Err):
            return Err(
                InstallError(kind="run_failed", message=f"Could not run Unity: {result.error}")
            )
        return Ok(None)

    def _install_archive(
        self, item: PackageItem, install_path: Path, cancel: CancelToken | None
    ) -> Result[None, InstallError]:
        try:
            extracted = extract_archive(
                item.file_path, install_path, item.file_type, console=self._console
            )
        except OSError as e:
            self._console.print(f"Extract as user failed, trying elevated... ({e})", Style.DIM)
            return self._extract_elevated(item, install_path, cancel)

        if isinstance(extracted, Err):
            return extracted
        self._console.print(f"Extracted {extracted.value} files", Style.DIM)
        return Ok(None)

    def _extract_elevated(
        self, item: PackageItem, install_path: Path, cancel: CancelToken | None
    ) -> Result[None, InstallError]:
        shell = self.elevated_shell()
        if item.file_type == FileType.ZIP:
            extract = ["unzip", "-o", "-q", str(item.file_path), "-d", str(install_path)]
        else:
            extract = ["tar", "-xf", str(item.file_path), "-C", str(install_path)]

        for cmd in (shell.mkdir(install_path), [*shell.prefix, *extract]):
            result = run_checked(self._runner, cmd, cancel=cancel)
            if isinstance(result, Err):
                return Err(command_failed(f"extracting {item.name}", result.error))
        return Ok(None)
