"""Windows: NSIS installers into C:\\Program Files\\Unity.

Elevation cannot be requested per command on Windows, so the whole process
must run as administrator; the elevated retry of file operations goes
through cmd.exe builtins.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path, PurePath

from iu.core.installation import Installation
from iu.core.queue import FileType, PackageItem
from iu.core.result import Err, Ok, Result
from iu.install.errors import InstallError
from iu.install.fileops import WINDOWS_SHELL, ElevatedShell
from iu.install.layout import InstallLayout
from iu.install.transaction import PackageInstaller
from iu.platform.privilege import is_elevated
from iu.platform.process import CancelToken, run_checked

from .base import BasePlatform, command_failed

__all__ = ["WindowsPlatform"]

INSTALL_PATH = Path("C:\\Program Files\\Unity")
EXECUTABLE_SUBPATH = PurePath("Editor", "Unity.exe")
DEFAULT_INSTALL_PATHS = "C:\\Program Files\\Unity {major}.{minor}.{patch}{type}{build}"


class WindowsPlatform(BasePlatform):
    def default_layout(self) -> InstallLayout:
        return InstallLayout(
            install_path=INSTALL_PATH,
            executable_subpath=EXECUTABLE_SUBPATH,
            default_paths=DEFAULT_INSTALL_PATHS,
        )

    def elevated_shell(self) -> ElevatedShell:
        return WINDOWS_SHELL

    def installers(self) -> Mapping[FileType, PackageInstaller]:
        return {FileType.EXE: self._install_exe}

    def is_privileged(self) -> Result[bool, InstallError]:
        if not is_elevated():
            return Err(
                InstallError(
                    kind="insufficient_privilege",
                    message="Must be run as administrator.",
                    hint="Right click the terminal or console and select 'Run as administrator'.",
                )
            )
        return Ok(True)

    def ensure_elevation(self, *, cancel: CancelToken | None = None) -> Result[None, InstallError]:
        return self.is_privileged().map(lambda _: None)

    def launch_detached(
        self,
        installation: Installation,
        arguments: Sequence[str],
        cancel: CancelToken | None,
    ) -> Result[None, InstallError]:
        # 'start' takes the window title as its first quoted argument
        cmd = ["cmd", "/c", "start", "", str(installation.executable), *arguments]
        self._console.info(f"$ {' '.join(cmd)}")
        result = run_checked(self._runner, cmd, cancel=cancel)
        if isinstance(result, Err):
            return Err(
                InstallError(kind="run_failed", message=f"Could not run Unity: {result.error}")
            )
        return Ok(None)

    def _install_exe(
        self, item: PackageItem, install_path: Path, cancel: CancelToken | None
    ) -> Result[None, InstallError]:
        # NSIS wants /D last and unquoted, even with spaces: pass a raw command line
        cmdline = f'"{item.file_path}" /S /D={install_path}'
        result = run_checked(self._runner, cmdline, cancel=cancel)
        if isinstance(result, Err):
            return Err(command_failed(f"installing {item.name}", result.error))
        return Ok(None)
