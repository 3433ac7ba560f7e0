"""The installer platform interface and the plumbing its implementations share.

Each operating system has one implementation. Implementations share no
state: every instance owns its own InstallTransaction.
"""

from __future__ import annotations

import shlex
import sys
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol

from iu.core.config import Config
from iu.core.installation import Installation
from iu.core.queue import FileType, InstallQueue, PackageItem
from iu.core.result import Err, Ok, Result
from iu.install.discovery import scan_installations
from iu.install.errors import InstallError
from iu.install.fileops import ElevatedShell, PrivilegedFileOps
from iu.install.layout import InstallLayout
from iu.install.paths import PATH_SEPARATOR, path_exists
from iu.install.transaction import InstallTransaction, PackageInstaller
from iu.output.console import ConsoleProtocol, Style
from iu.platform.paths import user_cache_dir, user_config_dir, user_download_dir
from iu.platform.process import (
    CancelToken,
    CommandRunner,
    DefaultCommandRunner,
    ProcessError,
    stream_lines,
)

__all__ = [
    "BasePlatform",
    "InstallerPlatform",
    "LOG_FILE_FLAG",
    "command_failed",
    "move_installation",
    "run_child",
    "with_log_file",
]

# Editor flag selecting the log file; "-logFile -" logs to stdout
LOG_FILE_FLAG = "-logFile"


class InstallerPlatform(Protocol):
    """Operations an installer needs from the operating system."""

    def config_dir(self) -> Path: ...

    def cache_dir(self) -> Path: ...

    def download_dir(self) -> Path: ...

    def is_privileged(self) -> Result[bool, InstallError]: ...

    def ensure_elevation(
        self, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]: ...

    def find_installations(
        self, cancel: CancelToken | None = None, *, install_paths: str | None = None
    ) -> Result[list[Installation], InstallError]: ...

    def prepare(
        self,
        queue: InstallQueue,
        install_paths: str | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> Result[None, InstallError]: ...

    def install_package(
        self, item: PackageItem, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]: ...

    def complete(
        self, aborted: bool, *, cancel: CancelToken | None = None
    ) -> Result[Installation | None, InstallError]: ...

    def move_installation(
        self,
        installation: Installation,
        new_path: Path,
        *,
        cancel: CancelToken | None = None,
    ) -> Result[None, InstallError]: ...

    def uninstall(
        self, installation: Installation, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]: ...

    def run(
        self,
        installation: Installation,
        arguments: Sequence[str],
        child: bool,
        *,
        cancel: CancelToken | None = None,
    ) -> Result[None, InstallError]: ...


def command_failed(what: str, error: ProcessError) -> InstallError:
    """Wrap a failed installer command."""
    return InstallError(kind="package_install_failed", message=f"ERROR: {what}: {error}")


def move_installation(
    file_ops: PrivilegedFileOps,
    installation: Installation,
    new_path: Path,
    *,
    cancel: CancelToken | None = None,
) -> Result[None, InstallError]:
    """Relocate an installation and update it to point at new_path."""
    if path_exists(new_path):
        return Err(
            InstallError(
                kind="destination_exists",
                message=f"Destination path already exists: {new_path}",
            )
        )

    result = file_ops.move(installation.path, new_path, cancel=cancel)
    if isinstance(result, Err):
        return result

    relative = installation.executable.relative_to(installation.path)
    installation.path = new_path
    installation.executable = new_path / relative
    return Ok(None)


def with_log_file(arguments: Sequence[str]) -> list[str]:
    """Make the editor log to stdout unless a log file is already chosen."""
    args = list(arguments)
    if LOG_FILE_FLAG not in args:
        args += [LOG_FILE_FLAG, "-"]
    return args


def run_child(
    executable: Path,
    arguments: Sequence[str],
    *,
    console: ConsoleProtocol,
    poll_interval: float,
    cancel: CancelToken | None = None,
) -> Result[None, InstallError]:
    """Run the editor as a monitored child and exit with its exit code.

    Output lines go to the console: stdout as info, stderr as errors. Only
    returns (with Err) when the editor cannot be started or the wait is
    cancelled.
    """
    cmd = [str(executable), *with_log_file(arguments)]
    console.print(f"$ {shlex.join(cmd)}", Style.DIM)

    result = stream_lines(
        cmd,
        on_stdout=console.info,
        on_stderr=console.error,
        cancel=cancel,
        poll_interval=poll_interval,
    )
    if isinstance(result, Err):
        return Err(
            InstallError(kind="run_failed", message=f"Could not run Unity: {result.error}")
        )

    console.info(f"Unity exited with code {result.value}")
    sys.exit(result.value)


class BasePlatform(ABC):
    """Transaction plumbing common to every platform.

    Subclasses must define:
    - default_layout(): canonical location, executable sub-path, default paths
    - elevated_shell(): commands for the elevated file operation retry
    - installers(): installer routine per package file type
    - is_privileged() / ensure_elevation()
    - launch_detached(): start the editor without monitoring it
    """

    def __init__(
        self,
        *,
        console: ConsoleProtocol,
        runner: CommandRunner | None = None,
        config: Config | None = None,
    ) -> None:
        self._config = config or Config()
        self._console = console
        self._runner: CommandRunner = runner or DefaultCommandRunner(
            poll_interval=self._config.run.poll_interval
        )
        self._layout = self.default_layout().with_install_path(self._config.install.default_path)
        self._file_ops = PrivilegedFileOps(
            runner=self._runner,
            shell=self.elevated_shell(),
            console=console,
        )
        self._transaction = InstallTransaction(
            layout=self._layout,
            file_ops=self._file_ops,
            installers=self.installers(),
            find_installations=self._find_for_install,
            console=console,
        )

    # -- per platform ---------------------------------------------------------

    @abstractmethod
    def default_layout(self) -> InstallLayout: ...

    @abstractmethod
    def elevated_shell(self) -> ElevatedShell: ...

    @abstractmethod
    def installers(self) -> Mapping[FileType, PackageInstaller]: ...

    @abstractmethod
    def is_privileged(self) -> Result[bool, InstallError]: ...

    @abstractmethod
    def ensure_elevation(
        self, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]: ...

    @abstractmethod
    def launch_detached(
        self,
        installation: Installation,
        arguments: Sequence[str],
        cancel: CancelToken | None,
    ) -> Result[None, InstallError]: ...

    # -- shared ---------------------------------------------------------------

    @property
    def layout(self) -> InstallLayout:
        return self._layout

    @property
    def transaction(self) -> InstallTransaction:
        return self._transaction

    @property
    def install_paths(self) -> str:
        """Configured install path templates, or the platform defaults."""
        return self._config.install.paths or self._layout.default_paths

    def config_dir(self) -> Path:
        return user_config_dir()

    def cache_dir(self) -> Path:
        return user_cache_dir()

    def download_dir(self) -> Path:
        return user_download_dir()

    def find_installations(
        self, cancel: CancelToken | None = None, *, install_paths: str | None = None
    ) -> Result[list[Installation], InstallError]:
        """Installations under the configured paths and, if given, install_paths."""
        paths = self.install_paths
        if install_paths:
            paths = f"{paths}{PATH_SEPARATOR}{install_paths}"
        return Ok(scan_installations(self._layout, paths))

    def _find_for_install(
        self, install_paths: str | None, cancel: CancelToken | None
    ) -> Result[list[Installation], InstallError]:
        return self.find_installations(cancel, install_paths=install_paths)

    def prepare(
        self,
        queue: InstallQueue,
        install_paths: str | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> Result[None, InstallError]:
        paths = install_paths if install_paths is not None else self.install_paths
        return self._transaction.prepare(queue, paths, cancel=cancel)

    def install_package(
        self, item: PackageItem, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]:
        return self._transaction.install_package(item, cancel=cancel)

    def complete(
        self, aborted: bool, *, cancel: CancelToken | None = None
    ) -> Result[Installation | None, InstallError]:
        return self._transaction.complete(aborted, cancel=cancel)

    def install(
        self,
        queue: InstallQueue,
        install_paths: str | None = None,
        *,
        cancel: CancelToken | None = None,
    ) -> Result[Installation | None, InstallError]:
        """Install a whole queue in one transaction."""
        paths = install_paths if install_paths is not None else self.install_paths
        return self._transaction.run_queue(queue, paths, cancel=cancel)

    def move_installation(
        self,
        installation: Installation,
        new_path: Path,
        *,
        cancel: CancelToken | None = None,
    ) -> Result[None, InstallError]:
        return move_installation(self._file_ops, installation, new_path, cancel=cancel)

    def uninstall(
        self, installation: Installation, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]:
        self._console.info(f"Deleting installation at path: {installation.path}")
        return self._file_ops.delete(installation.path, cancel=cancel)

    def run(
        self,
        installation: Installation,
        arguments: Sequence[str],
        child: bool,
        *,
        cancel: CancelToken | None = None,
    ) -> Result[None, InstallError]:
        if child:
            return run_child(
                installation.executable,
                arguments,
                console=self._console,
                poll_interval=self._config.run.poll_interval,
                cancel=cancel,
            )
        return self.launch_detached(installation, arguments, cancel)
