from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .version import VersionMetadata

__all__ = ["Installation"]


@dataclass(slots=True)
class Installation:
    """An installed editor.

    Attributes:
        version: Installed version
        executable: Absolute path to the editor executable
        path: Installation root directory
    """

    version: VersionMetadata
    executable: Path
    path: Path

    def __str__(self) -> str:
        return f"{self.version} ({self.path})"
