"""Packages queued for installation.

The editor is the main package; every other package is a module installed
into the editor's directory, so the editor must come first in a queue.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path

from .version import VersionMetadata

__all__ = ["EDITOR_PACKAGE_NAME", "FileType", "InstallQueue", "PackageItem"]

# Name of the main (editor) package
EDITOR_PACKAGE_NAME = "Unity"


class FileType(Enum):
    """Artifact classification, derived from the file name."""

    EXE = auto()
    PKG = auto()
    DMG = auto()
    ZIP = auto()
    TAR_XZ = auto()
    TAR_GZ = auto()
    UNKNOWN = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_path(cls, path: Path) -> FileType:
        # NOTE: Path.suffixes splits on every dot, which breaks on names
        # like "UnitySetup-2021.3.5f1.exe".
        name = path.name.lower()
        if name.endswith(".exe"):
            return cls.EXE
        if name.endswith(".pkg"):
            return cls.PKG
        if name.endswith(".dmg"):
            return cls.DMG
        if name.endswith(".zip"):
            return cls.ZIP
        if name.endswith((".tar.xz", ".txz")):
            return cls.TAR_XZ
        if name.endswith((".tar.gz", ".tgz")):
            return cls.TAR_GZ
        return cls.UNKNOWN


@dataclass(frozen=True, slots=True)
class PackageItem:
    """A downloaded package ready to install.

    Attributes:
        name: Package name (EDITOR_PACKAGE_NAME for the editor)
        file_path: Path to the downloaded artifact
        file_type: Classification of the artifact
    """

    name: str
    file_path: Path
    file_type: FileType = field(default=FileType.UNKNOWN)

    @classmethod
    def for_file(cls, name: str, file_path: Path) -> PackageItem:
        """Create an item, classifying the artifact from its name."""
        return cls(name=name, file_path=file_path, file_type=FileType.from_path(file_path))

    @property
    def is_editor(self) -> bool:
        return self.name == EDITOR_PACKAGE_NAME


@dataclass(frozen=True, slots=True)
class InstallQueue:
    """A version and the packages to install for it, in install order."""

    version: VersionMetadata
    items: tuple[PackageItem, ...]

    def __post_init__(self) -> None:
        editor_positions = [i for i, item in enumerate(self.items) if item.is_editor]
        if editor_positions and editor_positions != [0]:
            raise ValueError(f"{EDITOR_PACKAGE_NAME} must be queued once, as the first package")

    @property
    def has_editor(self) -> bool:
        return any(item.is_editor for item in self.items)
