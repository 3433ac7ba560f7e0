"""Archive extraction for Linux packages.

Editor and module archives are unpacked into an existing directory: modules
land inside the editor's tree, so nothing already there is removed except
files and links an entry replaces. Directories and symlinks are recreated.

Skipped, with a warning:
- entries that would escape the destination (absolute paths, '..', drive
  letters)
- symlinks whose target resolves outside the destination
- hard links and special files (devices, fifos)
"""

from __future__ import annotations

import contextlib
import os
import shutil
import stat
import tarfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import IO

from iu.core.queue import FileType
from iu.core.result import Err, Ok, Result
from iu.install.errors import InstallError
from iu.output.console import ConsoleProtocol

__all__ = ["ARCHIVE_TYPES", "extract_archive"]

ARCHIVE_TYPES = frozenset({FileType.ZIP, FileType.TAR_XZ, FileType.TAR_GZ})


def _safe_relative_path(member_name: str) -> Path | None:
    """Return a sanitized relative extraction path, or None if unsafe."""
    normalized = member_name.replace("\\", "/")
    if normalized.startswith("/"):
        return None

    parts = [p for p in PurePosixPath(normalized).parts if p != "."]
    if not parts:
        return None
    if any(part in {"", ".."} for part in parts):
        return None
    if parts[0].endswith(":"):
        return None
    return Path(*parts)


def _is_within_root(root: Path, target: Path) -> bool:
    try:
        return target.resolve().is_relative_to(root)
    except OSError:
        return False


def _link_stays_inside(root: Path, link: Path, target: str) -> bool:
    if not target or target.startswith("/"):
        return False
    resolved = os.path.normpath(link.parent.resolve() / target)
    return Path(resolved).is_relative_to(root)


class _Extractor:
    """Writes entries of one archive below root."""

    def __init__(self, destination: Path, console: ConsoleProtocol) -> None:
        self.destination = destination
        self.root = destination.resolve()
        self.console = console
        self.files = 0

    def skip(self, name: str, reason: str) -> None:
        self.console.warning(f"Skipping archive entry {name}: {reason}")

    def target(self, name: str) -> Path | None:
        rel_path = _safe_relative_path(name)
        if rel_path is None:
            # "./" and similar root entries
            if name.replace("\\", "/").strip("./"):
                self.skip(name, "path escapes the install directory")
            return None
        full_path = self.destination / rel_path
        if not _is_within_root(self.root, full_path.parent):
            self.skip(name, "path escapes the install directory")
            return None
        return full_path

    def directory(self, name: str) -> None:
        full_path = self.target(name)
        if full_path is not None:
            full_path.mkdir(parents=True, exist_ok=True)

    def file(self, name: str, src: IO[bytes], perms: int) -> None:
        full_path = self.target(name)
        if full_path is None:
            return
        if full_path.is_symlink() and not _is_within_root(self.root, full_path):
            self.skip(name, "existing link points outside the install directory")
            return

        full_path.parent.mkdir(parents=True, exist_ok=True)
        with open(full_path, "wb") as dst:
            shutil.copyfileobj(src, dst)
        if perms:
            with contextlib.suppress(OSError):
                full_path.chmod(perms)
        self.files += 1

    def symlink(self, name: str, link_target: str) -> None:
        full_path = self.target(name)
        if full_path is None:
            return
        full_path.parent.mkdir(parents=True, exist_ok=True)
        if not _link_stays_inside(self.root, full_path, link_target):
            self.skip(name, f"link target {link_target} is outside the install directory")
            return
        if full_path.is_symlink() or full_path.is_file():
            full_path.unlink()
        elif full_path.exists():
            self.skip(name, "a directory is in the way")
            return
        full_path.symlink_to(link_target)


def extract_archive(
    archive: Path,
    destination: Path,
    file_type: FileType,
    *,
    console: ConsoleProtocol,
) -> Result[int, InstallError]:
    """Extract an archive into destination, creating it if needed.

    Returns:
        Ok with the number of regular files written. OSError (e.g.
        permission denied) propagates so the caller can retry elevated.
    """
    if file_type not in ARCHIVE_TYPES:
        return Err(
            InstallError(
                kind="unsupported_package_type",
                message=f"Not an archive: {archive.name} ({file_type})",
            )
        )

    destination.mkdir(parents=True, exist_ok=True)
    extractor = _Extractor(destination, console)
    try:
        if file_type == FileType.ZIP:
            _extract_zip(archive, extractor)
        else:
            mode = "r:xz" if file_type == FileType.TAR_XZ else "r:gz"
            _extract_tar(archive, extractor, mode)
    except (tarfile.TarError, zipfile.BadZipFile) as e:
        return Err(
            InstallError(
                kind="package_install_failed",
                message=f"Could not extract {archive.name}: {e}",
            )
        )
    return Ok(extractor.files)


def _extract_tar(archive: Path, extractor: _Extractor, mode: str) -> None:
    with tarfile.open(archive, mode) as tar:  # type: ignore[call-overload]
        for member in tar.getmembers():
            if member.isdir():
                extractor.directory(member.name)
            elif member.issym():
                extractor.symlink(member.name, member.linkname)
            elif member.isreg():
                src = tar.extractfile(member)
                if src is None:
                    continue
                with src:
                    extractor.file(member.name, src, member.mode & 0o777)
            else:
                extractor.skip(member.name, "unsupported entry type")


def _extract_zip(archive: Path, extractor: _Extractor) -> None:
    with zipfile.ZipFile(archive, "r") as zf:
        for info in zf.infolist():
            unix_attrs = info.external_attr >> 16
            if info.is_dir():
                extractor.directory(info.filename)
            elif stat.S_IFMT(unix_attrs) == stat.S_IFLNK:
                extractor.symlink(info.filename, zf.read(info).decode("utf-8"))
            else:
                with zf.open(info) as src:
                    extractor.file(info.filename, src, unix_attrs & 0o777)
