"""Find installed editors by scanning install roots.

An installation is a directory whose name contains a version
(``Unity 2021.3.5f1``, ``2021.3.5f1``) and which holds the editor
executable at the layout's sub-path. Roots scanned: the parent of the
canonical location and the directory each install path template expands
under.
"""

from __future__ import annotations

from pathlib import Path

from iu.core.installation import Installation
from iu.core.version import VersionMetadata
from iu.install.layout import InstallLayout
from iu.install.paths import PATH_SEPARATOR

__all__ = ["scan_installations", "search_roots"]


def _template_root(template: str) -> Path | None:
    """Directory above the first templated component of a path template."""
    template = template.strip()
    if not template:
        return None
    brace = template.find("{")
    if brace < 0:
        return Path(template).parent
    prefix = template[:brace]
    if not prefix:
        return None
    if prefix.endswith(("/", "\\")):
        return Path(prefix)
    return Path(prefix).parent


def search_roots(layout: InstallLayout, install_paths: str | None) -> list[Path]:
    roots: list[Path] = [layout.install_path.parent]
    for template in (install_paths or "").split(PATH_SEPARATOR):
        root = _template_root(template)
        if root is not None and root not in roots:
            roots.append(root)
    return roots


def scan_installations(layout: InstallLayout, install_paths: str | None) -> list[Installation]:
    """List installations found under the search roots, sorted by path."""
    found: dict[Path, Installation] = {}
    for root in search_roots(layout, install_paths):
        try:
            children = sorted(root.iterdir())
        except OSError:
            # Missing or unreadable root
            continue
        for child in children:
            if child in found or not child.is_dir():
                continue
            version = VersionMetadata.parse(child.name)
            if version is None:
                continue
            executable = layout.executable_for(child)
            if executable.is_file():
                found[child] = Installation(version=version, executable=executable, path=child)
    return [found[p] for p in sorted(found)]
