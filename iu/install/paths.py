"""Expansion of install path templates into a free destination.

Templates are separated by ';' and may use the tokens {major}, {minor},
{patch}, {type}, {build} and {hash}, matched case-insensitively:

    /Applications/Unity {major}.{minor}.{patch}{type}{build}
    -> /Applications/Unity 2021.3.5f1

The free-path check races with anything else touching the filesystem; that
is accepted.
"""

from __future__ import annotations

import re
from pathlib import Path

from iu.core.version import VersionMetadata

__all__ = [
    "PATH_SEPARATOR",
    "expand_install_path",
    "generate_unique_path",
    "path_exists",
    "resolve_unique_install_path",
]

PATH_SEPARATOR = ";"

_TOKEN_RE = re.compile(r"\{(major|minor|patch|type|build|hash)\}", re.IGNORECASE)


def expand_install_path(version: VersionMetadata, template: str) -> str:
    """Substitute version tokens in a single template."""
    values = {
        "major": str(version.major),
        "minor": str(version.minor),
        "patch": str(version.patch),
        "type": str(version.type),
        "build": str(version.build),
        "hash": version.hash,
    }
    return _TOKEN_RE.sub(lambda m: values[m.group(1).lower()], template.strip())


def path_exists(path: Path) -> bool:
    # A dangling symlink still occupies the name
    return path.exists() or path.is_symlink()


def generate_unique_path(path: Path) -> Path:
    """Return path, or path with -1, -2, ... appended, whichever is free first."""
    if not path_exists(path):
        return path
    counter = 1
    while True:
        candidate = path.with_name(f"{path.name}-{counter}")
        if not path_exists(candidate):
            return candidate
        counter += 1


def resolve_unique_install_path(
    version: VersionMetadata,
    templates: str | None,
    default_root: Path,
) -> Path:
    """Find a destination for a new installation.

    Tries each template in order and returns the first expansion that does
    not exist. When all exist, numbers the last expansion; when there are no
    templates, numbers default_root.

    Args:
        version: Version being installed
        templates: PATH_SEPARATOR-separated templates (None or blank: none)
        default_root: Fallback when no template is given

    Returns:
        A path that did not exist at call time
    """
    expanded: Path | None = None
    for template in (templates or "").split(PATH_SEPARATOR):
        if not template.strip():
            continue
        expanded = Path(expand_install_path(version, template))
        if not path_exists(expanded):
            return expanded

    return generate_unique_path(expanded if expanded is not None else default_root)
