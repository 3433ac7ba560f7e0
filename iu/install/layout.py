"""Where installers put the editor and where it is moved afterwards.

Installers always write to the canonical install location. Whatever was
there before the transaction is parked at the fallback location, a sibling
named after this tool, and put back when the transaction completes.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePath

from iu.platform.paths import PRODUCT_NAME

__all__ = ["FALLBACK_MARKER", "InstallLayout"]

FALLBACK_MARKER = f" (Moved by {PRODUCT_NAME})"


@dataclass(frozen=True, slots=True)
class InstallLayout:
    """Filesystem conventions of one platform.

    Attributes:
        install_path: Canonical install location
        executable_subpath: Editor executable, relative to an installation root
        default_paths: Install path templates used when none are configured
    """

    install_path: Path
    executable_subpath: PurePath
    default_paths: str

    @property
    def fallback_path(self) -> Path:
        return self.install_path.with_name(self.install_path.name + FALLBACK_MARKER)

    def executable_for(self, root: Path) -> Path:
        return root / self.executable_subpath

    def with_install_path(self, install_path: Path | None) -> InstallLayout:
        """Copy with another canonical location (None keeps this one)."""
        if install_path is None:
            return self
        return InstallLayout(
            install_path=install_path,
            executable_subpath=self.executable_subpath,
            default_paths=self.default_paths,
        )
