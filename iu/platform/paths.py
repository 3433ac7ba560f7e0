"""Per-user directories for configuration, cache and downloads."""

from __future__ import annotations

import os
import tempfile
from functools import lru_cache
from pathlib import Path

from .detection import is_macos, is_windows

__all__ = [
    "PRODUCT_NAME",
    "home",
    "user_cache_dir",
    "user_config_dir",
    "user_download_dir",
]

# Product name used for directory naming and the fallback path marker
PRODUCT_NAME = "install-unity"


@lru_cache(maxsize=1)
def home() -> Path:
    """Get user's home directory.

    Uses USERPROFILE on Windows, HOME on Unix, then Path.home().
    """
    if is_windows():
        userprofile = os.environ.get("USERPROFILE")
        if userprofile:
            return Path(userprofile)
    else:
        home_env = os.environ.get("HOME")
        if home_env:
            return Path(home_env)

    return Path.home()


@lru_cache(maxsize=1)
def user_config_dir() -> Path:
    """Directory holding config.toml.

    ~/Library/Application Support/install-unity (macOS),
    %APPDATA%/install-unity (Windows), $XDG_CONFIG_HOME/install-unity (Linux).
    """
    if is_windows():
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data) / PRODUCT_NAME
        return home() / "AppData" / "Roaming" / PRODUCT_NAME

    if is_macos():
        return home() / "Library" / "Application Support" / PRODUCT_NAME

    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        return Path(xdg_config) / PRODUCT_NAME
    return home() / ".config" / PRODUCT_NAME


@lru_cache(maxsize=1)
def user_cache_dir() -> Path:
    if is_windows():
        local = os.environ.get("LOCALAPPDATA")
        if local:
            return Path(local) / PRODUCT_NAME
        return home() / "AppData" / "Local" / PRODUCT_NAME

    if is_macos():
        return user_config_dir()

    xdg_cache = os.environ.get("XDG_CACHE_HOME")
    if xdg_cache:
        return Path(xdg_cache) / PRODUCT_NAME
    return home() / ".cache" / PRODUCT_NAME


def user_download_dir() -> Path:
    """Scratch directory for downloaded packages."""
    return Path(tempfile.gettempdir()) / PRODUCT_NAME


def clear_caches() -> None:
    """Clear all cached paths.

    Useful for testing when environment variables change.
    """
    home.cache_clear()
    user_config_dir.cache_clear()
    user_cache_dir.cache_clear()
