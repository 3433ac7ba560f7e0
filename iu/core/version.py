"""Unity version metadata.

A version renders as ``2021.3.5f1``: major, minor and patch numbers, the
release channel code and the build number. The revision hash is opaque and
optional.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

__all__ = ["ReleaseType", "VersionMetadata"]

_VERSION_RE = re.compile(
    r"(?P<major>\d+)\.(?P<minor>\d+)\.(?P<patch>\d+)(?P<type>[abfpx])(?P<build>\d+)"
    r"(?:\s*\((?P<hash>[0-9a-fA-F]+)\))?"
)


class ReleaseType(Enum):
    """Release channel, valued by its single-character code."""

    ALPHA = "a"
    BETA = "b"
    FINAL = "f"
    PATCH = "p"
    EXPERIMENTAL = "x"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class VersionMetadata:
    major: int
    minor: int
    patch: int
    type: ReleaseType
    build: int
    hash: str = ""

    @classmethod
    def parse(cls, text: str) -> VersionMetadata | None:
        """Parse ``2021.3.5f1`` or ``2021.3.5f1 (abcd1234)``.

        The version may be embedded in a longer string such as a directory
        name (``Unity 2021.3.5f1``). Returns None if no version is found.
        """
        match = _VERSION_RE.search(text)
        if match is None:
            return None
        return cls(
            major=int(match["major"]),
            minor=int(match["minor"]),
            patch=int(match["patch"]),
            type=ReleaseType(match["type"]),
            build=int(match["build"]),
            hash=match["hash"] or "",
        )

    def same_release(self, other: VersionMetadata) -> bool:
        """Compare versions, ignoring the hash unless both sides carry one."""
        if (self.major, self.minor, self.patch, self.type, self.build) != (
            other.major,
            other.minor,
            other.patch,
            other.type,
            other.build,
        ):
            return False
        if self.hash and other.hash:
            return self.hash.lower() == other.hash.lower()
        return True

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}{self.type}{self.build}"
