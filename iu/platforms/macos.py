"""macOS: .pkg installers into /Applications/Unity, .dmg images copied.

Package installers always target the boot volume, so the canonical location
is fixed by the packages themselves.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping, Sequence
from pathlib import Path, PurePath

from iu.core.installation import Installation
from iu.core.queue import FileType, PackageItem
from iu.core.result import Err, Ok, Result
from iu.install.errors import InstallError
from iu.install.fileops import ROOT_SHELL, SUDO_SHELL, ElevatedShell
from iu.install.layout import InstallLayout
from iu.install.transaction import PackageInstaller
from iu.platform.process import CancelToken, run_checked

from .base import BasePlatform, command_failed

__all__ = ["MacPlatform", "parse_mount_point"]

INSTALL_PATH = Path("/Applications/Unity")
INSTALL_VOLUME = "/"
APP_BUNDLE = "Unity.app"
EXECUTABLE_SUBPATH = PurePath(APP_BUNDLE, "Contents", "MacOS", "Unity")
DEFAULT_INSTALL_PATHS = "/Applications/Unity {major}.{minor}.{patch}{type}{build}"

# Mount point from hdiutil's output, e.g.:
# /dev/disk4s2        	Apple_HFS                      	/private/tmp/dmg.0bDM7Q
_MOUNT_POINT_RE = re.compile(r"^(?:/dev/\w+)[\t ]+(?:\w+)[\t ]+(/.*)$", re.MULTILINE)


def parse_mount_point(hdiutil_output: str) -> Path | None:
    match = _MOUNT_POINT_RE.search(hdiutil_output)
    if match is None:
        return None
    return Path(match.group(1).strip())


class MacPlatform(BasePlatform):
    def default_layout(self) -> InstallLayout:
        return InstallLayout(
            install_path=INSTALL_PATH,
            executable_subpath=EXECUTABLE_SUBPATH,
            default_paths=DEFAULT_INSTALL_PATHS,
        )

    def elevated_shell(self) -> ElevatedShell:
        return ROOT_SHELL if os.geteuid() == 0 else SUDO_SHELL

    def installers(self) -> Mapping[FileType, PackageInstaller]:
        return {
            FileType.PKG: self._install_pkg,
            FileType.DMG: self._install_dmg,
        }

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
                    message=f"Could not acquire administrator rights: {result.error}",
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
        app = installation.path / APP_BUNDLE
        cmd = ["open", "-a", str(app), "-n", "--args", *arguments]
        self._console.info(f"$ {' '.join(cmd)}")
        result = run_checked(self._runner, cmd, cancel=cancel)
        if isinstance(result, Err):
            return Err(
                InstallError(kind="run_failed", message=f"Could not run Unity: {result.error}")
            )
        return Ok(None)

    def _install_pkg(
        self, item: PackageItem, install_path: Path, cancel: CancelToken | None
    ) -> Result[None, InstallError]:
        shell = self.elevated_shell()
        cmd = [*shell.prefix, "installer", "-pkg", str(item.file_path), "-target", INSTALL_VOLUME]
        result = run_checked(self._runner, cmd, cancel=cancel)
        if isinstance(result, Err):
            return Err(command_failed(f"installing {item.name}", result.error))
        return Ok(None)

    def _install_dmg(
        self, item: PackageItem, install_path: Path, cancel: CancelToken | None
    ) -> Result[None, InstallError]:
        attach = run_checked(
            self._runner,
            ["hdiutil", "attach", "-nobrowse", "-noautoopen", str(item.file_path)],
            cancel=cancel,
        )
        if isinstance(attach, Err):
            return Err(command_failed(f"mounting {item.file_path.name}", attach.error))

        mount_point = parse_mount_point(attach.value)
        if mount_point is None:
            return Err(
                InstallError(
                    kind="package_install_failed",
                    message=f"Could not find mount point of {item.file_path.name}",
                )
            )

        try:
            apps = sorted(mount_point.glob("*.app"))
            if not apps:
                return Err(
                    InstallError(
                        kind="package_install_failed",
                        message=f"No app bundle found in {item.file_path.name}",
                    )
                )
            for app in apps:
                result = self._file_ops.copy(app, install_path / app.name, cancel=cancel)
                if isinstance(result, Err):
                    return result
            return Ok(None)
        finally:
            detach = run_checked(self._runner, ["hdiutil", "detach", str(mount_point), "-quiet"])
            if isinstance(detach, Err):
                self._console.warning(f"Could not unmount {mount_point}: {detach.error}")
