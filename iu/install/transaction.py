"""The install transaction.

A transaction moves through ``idle -> preparing -> installing ->
completing -> idle``:

- ``prepare`` parks any installation occupying the canonical location at the
  fallback location and, when the queue holds no editor (adding modules to an
  installed version), moves that installation into the canonical location.
- ``install_package`` runs the installer of each queued package against the
  canonical location. The editor must come first unless upgrading.
- ``complete`` moves the result to its final destination (or deletes it when
  aborted), then puts the parked installation back. It always ends idle.

Every step receives the TransactionState explicitly; the transaction object
only owns it.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path

from iu.core.installation import Installation
from iu.core.queue import FileType, InstallQueue, PackageItem
from iu.core.result import Err, Ok, Result
from iu.core.version import VersionMetadata
from iu.install.errors import InstallError
from iu.install.fileops import PrivilegedFileOps
from iu.install.layout import InstallLayout
from iu.install.paths import path_exists, resolve_unique_install_path
from iu.output.console import ConsoleProtocol
from iu.platform.process import CancelToken

__all__ = [
    "InstallTransaction",
    "InstallationFinder",
    "PackageInstaller",
    "Phase",
    "TransactionState",
]

# Installs one package into the given directory
PackageInstaller = Callable[[PackageItem, Path, CancelToken | None], Result[None, InstallError]]
# Lists installations, also searching under the given install path templates
InstallationFinder = Callable[
    [str | None, CancelToken | None], Result[list[Installation], InstallError]
]


class Phase(Enum):
    IDLE = auto()
    PREPARING = auto()
    INSTALLING = auto()
    COMPLETING = auto()

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(slots=True)
class TransactionState:
    """Mutable state of the transaction in progress.

    Attributes:
        phase: Current phase
        version: Version being installed (None when idle)
        install_paths: Install path templates given to prepare
        upgrade_original_path: Where the upgraded installation came from
            (set only when the queue holds no editor)
        moved_existing: The canonical location was parked at the fallback path
        installed_editor: The editor was installed in this transaction
    """

    phase: Phase = Phase.IDLE
    version: VersionMetadata | None = None
    install_paths: str | None = None
    upgrade_original_path: Path | None = None
    moved_existing: bool = False
    installed_editor: bool = False

    @classmethod
    def empty(cls) -> TransactionState:
        return cls()

    @property
    def active(self) -> bool:
        return self.version is not None

    @property
    def upgrading(self) -> bool:
        return self.upgrade_original_path is not None

    def reset(self) -> None:
        self.phase = Phase.IDLE
        self.version = None
        self.install_paths = None
        self.upgrade_original_path = None
        self.moved_existing = False
        self.installed_editor = False


class InstallTransaction:
    """Coordinates prepare, per-package install and completion.

    Not re-entrant: callers issue one call at a time.
    """

    def __init__(
        self,
        *,
        layout: InstallLayout,
        file_ops: PrivilegedFileOps,
        installers: Mapping[FileType, PackageInstaller],
        find_installations: InstallationFinder,
        console: ConsoleProtocol,
        state: TransactionState | None = None,
    ) -> None:
        self._layout = layout
        self._file_ops = file_ops
        self._installers = installers
        self._find_installations = find_installations
        self._console = console
        self._state = state if state is not None else TransactionState.empty()

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def layout(self) -> InstallLayout:
        return self._layout

    # -------------------------------------------------------------------------
    # prepare
    # -------------------------------------------------------------------------

    def prepare(
        self,
        queue: InstallQueue,
        install_paths: str | None,
        *,
        cancel: CancelToken | None = None,
    ) -> Result[None, InstallError]:
        """Start a transaction for queue.

        Fails without touching anything if a transaction is already active.
        A failure after the canonical location was parked puts it back and
        leaves the transaction idle.
        """
        state = self._state
        if state.active:
            return Err(
                InstallError(
                    kind="already_installing",
                    message=f"Already installing another version: {state.version}",
                )
            )

        state.phase = Phase.PREPARING
        state.version = queue.version
        state.install_paths = install_paths
        state.installed_editor = False
        state.moved_existing = False
        state.upgrade_original_path = None

        result = self._park_existing(state, cancel)
        if isinstance(result, Ok) and not queue.has_editor:
            result = self._stage_upgrade(state, queue.version, cancel)

        if isinstance(result, Err):
            self._abandon_prepare(state)
        return result

    def _park_existing(
        self, state: TransactionState, cancel: CancelToken | None
    ) -> Result[None, InstallError]:
        install_path = self._layout.install_path
        if not path_exists(install_path):
            return Ok(None)

        fallback = self._layout.fallback_path
        if path_exists(fallback):
            return Err(
                InstallError(
                    kind="fallback_path_occupied",
                    message=f"Fallback installation path '{fallback}' already exists.",
                    hint=f"Move '{fallback}' back to '{install_path}' or delete it.",
                )
            )

        self._console.info(
            f"Temporarily moving existing installation at default install path: {install_path}"
        )
        result = self._file_ops.move(install_path, fallback, cancel=cancel)
        if isinstance(result, Err):
            return result
        state.moved_existing = True
        return Ok(None)

    def _stage_upgrade(
        self,
        state: TransactionState,
        version: VersionMetadata,
        cancel: CancelToken | None,
    ) -> Result[None, InstallError]:
        found = self._find_installations(state.install_paths, cancel)
        if isinstance(found, Err):
            return found

        existing = next((i for i in found.value if i.version.same_release(version)), None)
        if existing is None:
            return Err(
                InstallError(
                    kind="version_not_installed",
                    message=f"Not installing editor but version {version} not already installed.",
                    hint="Include the editor package to install this version from scratch.",
                )
            )

        self._console.info(
            f"Temporarily moving installation to upgrade from '{existing.path}' "
            "to default install path"
        )
        result = self._file_ops.move(existing.path, self._layout.install_path, cancel=cancel)
        if isinstance(result, Err):
            return result
        state.upgrade_original_path = existing.path
        return Ok(None)

    def _abandon_prepare(self, state: TransactionState) -> None:
        restored = self._restore_existing(state, None)
        if isinstance(restored, Err):
            self._console.error(restored.error.message)
        state.reset()

    # -------------------------------------------------------------------------
    # install
    # -------------------------------------------------------------------------

    def install_package(
        self, item: PackageItem, *, cancel: CancelToken | None = None
    ) -> Result[None, InstallError]:
        """Install one queued package into the canonical location."""
        state = self._state
        if not state.active:
            return Err(
                InstallError(
                    kind="no_active_transaction",
                    message="No install in progress; call prepare first.",
                )
            )

        if not item.is_editor and not state.installed_editor and not state.upgrading:
            return Err(
                InstallError(
                    kind="editor_not_installed_first",
                    message=(
                        f"Cannot install package '{item.name}' without installing editor first."
                    ),
                )
            )

        installer = self._installers.get(item.file_type)
        if installer is None:
            return Err(
                InstallError(
                    kind="unsupported_package_type",
                    message=(
                        f"Cannot install package of type: {item.file_type} "
                        f"({item.file_path.name})"
                    ),
                )
            )

        state.phase = Phase.INSTALLING
        self._console.info(f"Installing {item.name}...")
        result = installer(item, self._layout.install_path, cancel)
        if isinstance(result, Err):
            return result

        if item.is_editor:
            state.installed_editor = True
        return Ok(None)

    # -------------------------------------------------------------------------
    # complete
    # -------------------------------------------------------------------------

    def complete(
        self, aborted: bool, *, cancel: CancelToken | None = None
    ) -> Result[Installation | None, InstallError]:
        """Finish the transaction.

        Returns:
            Ok(Installation) on success, Ok(None) when aborted, Err when a
            relocation failed or the executable is missing. The transaction
            is idle afterwards in every case.
        """
        state = self._state
        if not state.active:
            return Err(
                InstallError(
                    kind="no_active_transaction",
                    message="Not installing any version to complete.",
                )
            )

        state.phase = Phase.COMPLETING
        try:
            return self._finish(state, aborted, cancel)
        finally:
            state.reset()

    def _finish(
        self,
        state: TransactionState,
        aborted: bool,
        cancel: CancelToken | None,
    ) -> Result[Installation | None, InstallError]:
        assert state.version is not None
        install_path = self._layout.install_path

        destination: Path | None = None
        if state.upgrade_original_path is not None:
            destination = state.upgrade_original_path
            self._console.info(f"Moving back upgraded installation to: {destination}")
            primary = self._move_to(install_path, destination, cancel)
        elif not aborted:
            destination = resolve_unique_install_path(
                state.version, state.install_paths, install_path
            )
            self._console.info(f"Moving newly installed version to: {destination}")
            primary = self._move_to(install_path, destination, cancel)
        else:
            self._console.info(f"Deleting aborted installation at path: {install_path}")
            primary = self._file_ops.delete(install_path, cancel=cancel)

        # Put back the parked installation even if the step above failed
        restored = self._restore_existing(state, cancel)

        if isinstance(primary, Err):
            if isinstance(restored, Err):
                self._console.error(restored.error.message)
            return primary
        if isinstance(restored, Err):
            return restored

        if aborted or destination is None:
            return Ok(None)

        executable = self._layout.executable_for(destination)
        if not executable.is_file():
            self._console.error(f"Could not find Unity executable at path: {executable}")
            return Err(
                InstallError(
                    kind="executable_not_found",
                    message=f"Could not find Unity executable at path: {executable}",
                    hint=f"The installation was left at '{destination}'.",
                )
            )

        return Ok(Installation(version=state.version, executable=executable, path=destination))

    def _move_to(
        self, source: Path, destination: Path, cancel: CancelToken | None
    ) -> Result[None, InstallError]:
        if path_exists(destination):
            return Err(
                InstallError(
                    kind="destination_exists",
                    message=f"Destination path already exists: {destination}",
                    hint=f"The installation was left at '{source}'.",
                )
            )
        return self._file_ops.move(source, destination, cancel=cancel)

    def _restore_existing(
        self, state: TransactionState, cancel: CancelToken | None
    ) -> Result[None, InstallError]:
        if not state.moved_existing:
            return Ok(None)

        install_path = self._layout.install_path
        fallback = self._layout.fallback_path
        hint = f"Move '{fallback}' back to '{install_path}' manually."
        if path_exists(install_path):
            return Err(
                InstallError(
                    kind="restore_failed",
                    message=(
                        f"Could not move back the installation parked at '{fallback}': "
                        f"'{install_path}' is still occupied."
                    ),
                    hint=hint,
                )
            )

        self._console.info("Moving back installation that was at default installation path")
        result = self._file_ops.move(fallback, install_path, cancel=cancel)
        if isinstance(result, Err):
            return Err(
                InstallError(
                    kind="restore_failed",
                    message=f"Could not move back the installation parked at '{fallback}': "
                    f"{result.error.message}",
                    hint=hint,
                )
            )
        state.moved_existing = False
        return Ok(None)

    # -------------------------------------------------------------------------
    # whole queue
    # -------------------------------------------------------------------------

    def run_queue(
        self,
        queue: InstallQueue,
        install_paths: str | None,
        *,
        cancel: CancelToken | None = None,
    ) -> Result[Installation | None, InstallError]:
        """Prepare, install every item in order, then complete.

        A failed package, a cancellation or Ctrl-C after prepare completes
        the transaction as aborted before returning (or re-raising).
        """
        prepared = self.prepare(queue, install_paths, cancel=cancel)
        if isinstance(prepared, Err):
            return prepared

        try:
            for item in queue.items:
                if cancel is not None and cancel.cancelled:
                    self._console.warning("Install cancelled, cleaning up")
                    return self._abort(None)
                installed = self.install_package(item, cancel=cancel)
                if isinstance(installed, Err):
                    return self._abort(installed.error)
        except KeyboardInterrupt:
            self._abort(None)
            raise

        return self.complete(False, cancel=cancel)

    def _abort(self, cause: InstallError | None) -> Result[None, InstallError]:
        # Cleanup ignores the cancel token, it has to run to the end
        aborted = self.complete(True)
        if isinstance(aborted, Err):
            if cause is not None:
                self._console.error(cause.message)
            return Err(aborted.error)
        if cause is not None:
            return Err(cause)
        return Ok(None)
