"""Move, copy and delete with an elevated retry.

Each operation is first attempted as the current user. Any OSError is
reported and the same operation is retried once through the platform's
elevated shell. A failing elevated command is fatal and carries the
command's stderr. There is no further retry.

Deleting a path that does not exist is a no-op and never escalates.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from iu.core.result import Err, Ok, Result
from iu.install.errors import InstallError
from iu.install.paths import path_exists
from iu.output.console import ConsoleProtocol, Style
from iu.platform.process import CancelToken, CommandRunner, ProcessError, run_checked

__all__ = [
    "ElevatedShell",
    "PrivilegedFileOps",
    "ROOT_SHELL",
    "SUDO_SHELL",
    "WINDOWS_SHELL",
]


@dataclass(frozen=True, slots=True)
class ElevatedShell:
    """Builds the commands used for the elevated retry.

    Attributes:
        prefix: Prepended to every command (e.g. ("sudo",))
        windows: Use cmd.exe builtins instead of coreutils
    """

    prefix: tuple[str, ...]
    windows: bool = False

    def _wrap(self, *args: str) -> list[str]:
        return [*self.prefix, *args]

    def mkdir(self, path: Path) -> list[str]:
        if self.windows:
            return self._wrap("if", "not", "exist", str(path), "mkdir", str(path))
        return self._wrap("mkdir", "-p", str(path))

    def move(self, source: Path, destination: Path) -> list[str]:
        if self.windows:
            return self._wrap("move", "/Y", str(source), str(destination))
        return self._wrap("mv", str(source), str(destination))

    def copy(self, source: Path, destination: Path) -> list[str]:
        if self.windows:
            return self._wrap("xcopy", str(source), str(destination), "/E", "/I", "/H", "/Y", "/Q")
        return self._wrap("cp", "-R", str(source), str(destination))

    def delete(self, path: Path) -> list[str]:
        if self.windows:
            if path.is_dir():
                return self._wrap("rmdir", "/S", "/Q", str(path))
            return self._wrap("del", "/F", "/Q", str(path))
        return self._wrap("rm", "-rf", str(path))


SUDO_SHELL = ElevatedShell(prefix=("sudo",))
ROOT_SHELL = ElevatedShell(prefix=())
# The process must already hold an administrator token on Windows
WINDOWS_SHELL = ElevatedShell(prefix=("cmd", "/c"), windows=True)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class PrivilegedFileOps:
    """Filesystem primitives used by the install transaction."""

    def __init__(
        self,
        *,
        runner: CommandRunner,
        shell: ElevatedShell,
        console: ConsoleProtocol,
    ) -> None:
        self._runner = runner
        self._shell = shell
        self._console = console

    def move(
        self, source: Path, destination: Path, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]:
        """Move source to destination. Callers ensure destination is free."""
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            source.rename(destination)
            return Ok(None)
        except OSError as e:
            self._console.print(f"Move as user failed, trying elevated... ({e})", Style.DIM)

        return self._elevated(
            "move",
            [
                self._shell.mkdir(destination.parent),
                self._shell.move(source, destination),
            ],
            cancel,
        )

    def copy(
        self, source: Path, destination: Path, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]:
        """Copy a file or directory tree to destination."""
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            if source.is_dir() and not source.is_symlink():
                shutil.copytree(source, destination, symlinks=True)
            else:
                shutil.copy2(source, destination, follow_symlinks=False)
            return Ok(None)
        except OSError as e:
            self._console.print(f"Copy as user failed, trying elevated... ({e})", Style.DIM)

        commands = [self._shell.mkdir(destination.parent)]
        if path_exists(destination):
            # Partial copy from the user attempt; cp -R would nest into it
            commands.append(self._shell.delete(destination))
        commands.append(self._shell.copy(source, destination))
        return self._elevated("copy", commands, cancel)

    def delete(
        self, path: Path, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]:
        """Recursively delete path. A missing path is a no-op."""
        if not path_exists(path):
            return Ok(None)

        try:
            _remove(path)
            return Ok(None)
        except OSError as e:
            self._console.print(f"Delete as user failed, trying elevated... ({e})", Style.DIM)

        return self._elevated("delete", [self._shell.delete(path)], cancel)

    def _elevated(
        self,
        operation: str,
        commands: list[list[str]],
        cancel: CancelToken | None,
    ) -> Result[None, InstallError]:
        for args in commands:
            result = run_checked(self._runner, args, cancel=cancel)
            if isinstance(result, Err):
                return Err(_elevation_error(operation, result.error))
        return Ok(None)


def _elevation_error(operation: str, error: ProcessError) -> InstallError:
    hint = None
    if error.returncode == -1:
        hint = "The elevation helper could not be started"
    return InstallError(
        kind="elevation_failed",
        message=f"Elevated {operation} failed: {error}",
        hint=hint,
    )
