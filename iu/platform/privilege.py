"""Query whether the current process runs with elevated rights."""

from __future__ import annotations

import ctypes
import os

from .detection import is_windows

__all__ = ["is_elevated"]


def is_elevated() -> bool:
    """True for root on Unix and for an administrator token on Windows."""
    if is_windows():
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0
